"""Folder listing cache with a used-space invalidation heuristic."""

import inspect
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from mailru_cloud.models.entries import CloudFolder

logger = structlog.get_logger(__name__)

FolderFetcher = Callable[[], Awaitable[CloudFolder | None]]
UsedSpaceProbe = Callable[[], Awaitable[int]]
Clock = Callable[[], float]
ContentListener = Callable[[CloudFolder | None], Awaitable[None] | None]


@dataclass(frozen=True, kw_only=True)
class FolderCacheEntry:
    """
    Snapshot held by a FolderCache.

    Attributes:
        folder: Last fetched listing, None if the folder no longer exists.
        refreshed_at: Clock value of the last refresh.
        used_space: Account used space (bytes) seen by the last probe.
    """

    folder: CloudFolder | None
    refreshed_at: float
    used_space: int | None = None


class FolderCache:
    """
    Cached listing of one folder.

    The listing is re-fetched when:
    - it was never fetched, or a refresh is forced;
    - more than ``refresh_interval`` seconds passed since the last refresh
      and the account used space reported by ``probe`` differs from the
      value recorded by the previous probe.

    The probe only runs once the interval has elapsed. Listeners are notified
    after each actual refresh, never on a cache hit.

    Not safe for concurrent use: one caller per instance.
    """

    def __init__(
        self,
        fetch: FolderFetcher,
        probe: UsedSpaceProbe,
        *,
        clock: Clock = time.monotonic,
        refresh_interval: float = 1.0,
    ) -> None:
        """
        Args:
            fetch: Coroutine function returning the folder listing.
            probe: Coroutine function returning the account used space in bytes.
            clock: Monotonic time source in seconds.
            refresh_interval: Seconds before the probe is consulted.
        """
        self._fetch = fetch
        self._probe = probe
        self._clock = clock
        self._refresh_interval = refresh_interval
        self._entry: FolderCacheEntry | None = None
        self._listeners: list[ContentListener] = []

    @property
    def entry(self) -> FolderCacheEntry | None:
        """Current snapshot, None before the first refresh."""
        return self._entry

    def add_listener(self, listener: ContentListener) -> None:
        """Register a callback fired with the new snapshot after each refresh."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ContentListener) -> None:
        """Unregister a callback. No-op if it was not registered."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def get(self, *, force: bool = False) -> CloudFolder | None:
        """
        Return the listing, refreshing it first when needed.

        Args:
            force: Refresh regardless of the heuristic.

        Returns:
            The current listing, or None if the folder does not exist.
        """
        if await self._needs_refresh(force):
            await self.refresh()
        return self._entry.folder

    async def refresh(self) -> CloudFolder | None:
        """Fetch the listing, replace the snapshot and notify listeners."""
        folder = await self._fetch()
        used_space = self._entry.used_space if self._entry is not None else None
        self._entry = FolderCacheEntry(
            folder=folder, refreshed_at=self._clock(), used_space=used_space
        )
        logger.debug(
            "Folder listing refreshed",
            path=folder.full_path if folder is not None else None,
            exists=folder is not None,
        )
        for listener in list(self._listeners):
            result = listener(folder)
            if inspect.isawaitable(result):
                await result
        return folder

    def invalidate(self) -> None:
        """Drop the snapshot so that the next read refreshes."""
        self._entry = None

    async def _needs_refresh(self, force: bool) -> bool:
        if self._entry is None or force:
            return True

        if self._clock() - self._entry.refreshed_at <= self._refresh_interval:
            return False

        used_space = await self._probe()
        changed = used_space != self._entry.used_space
        self._entry = FolderCacheEntry(
            folder=self._entry.folder,
            refreshed_at=self._entry.refreshed_at,
            used_space=used_space,
        )
        return changed
