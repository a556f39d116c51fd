from unittest.mock import AsyncMock, Mock

import pytest

from mailru_cloud.core.cache import FolderCache
from mailru_cloud.models.entries import CloudFolder


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_folder(files_count: int = 0) -> CloudFolder:
    return CloudFolder(name="docs", full_path="/docs", files_count=files_count)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetch() -> AsyncMock:
    return AsyncMock(side_effect=[make_folder(i) for i in range(10)])


@pytest.fixture
def probe() -> AsyncMock:
    return AsyncMock(return_value=1024)


@pytest.fixture
def cache(fetch: AsyncMock, probe: AsyncMock, clock: FakeClock) -> FolderCache:
    return FolderCache(fetch, probe, clock=clock, refresh_interval=1.0)


@pytest.mark.asyncio
async def test_first_read_refreshes_without_probe(
    cache: FolderCache, fetch: AsyncMock, probe: AsyncMock
) -> None:
    folder = await cache.get()

    assert folder == make_folder(0)
    fetch.assert_awaited_once()
    probe.assert_not_awaited()


@pytest.mark.asyncio
async def test_read_within_interval_is_served_from_cache(
    cache: FolderCache, fetch: AsyncMock, probe: AsyncMock, clock: FakeClock
) -> None:
    await cache.get()
    clock.advance(0.5)

    await cache.get()

    assert fetch.await_count == 1
    probe.assert_not_awaited()


@pytest.mark.asyncio
async def test_read_after_interval_refreshes_when_used_space_first_seen(
    cache: FolderCache, fetch: AsyncMock, probe: AsyncMock, clock: FakeClock
) -> None:
    await cache.get()
    clock.advance(1.5)

    folder = await cache.get()

    assert folder == make_folder(1)
    probe.assert_awaited_once()
    assert cache.entry is not None
    assert cache.entry.used_space == 1024


@pytest.mark.asyncio
async def test_read_after_interval_keeps_cache_when_used_space_unchanged(
    cache: FolderCache, fetch: AsyncMock, probe: AsyncMock, clock: FakeClock
) -> None:
    await cache.get()
    clock.advance(1.5)
    await cache.get()
    clock.advance(1.5)

    folder = await cache.get()

    assert folder == make_folder(1)
    assert fetch.await_count == 2
    assert probe.await_count == 2


@pytest.mark.asyncio
async def test_read_after_interval_refreshes_when_used_space_changed(
    cache: FolderCache, fetch: AsyncMock, probe: AsyncMock, clock: FakeClock
) -> None:
    await cache.get()
    clock.advance(1.5)
    await cache.get()
    probe.return_value = 4096
    clock.advance(1.5)

    folder = await cache.get()

    assert folder == make_folder(2)
    assert cache.entry is not None
    assert cache.entry.used_space == 4096


@pytest.mark.asyncio
async def test_exactly_one_interval_is_not_enough(
    cache: FolderCache, fetch: AsyncMock, probe: AsyncMock, clock: FakeClock
) -> None:
    await cache.get()
    clock.advance(1.0)

    await cache.get()

    assert fetch.await_count == 1
    probe.assert_not_awaited()


@pytest.mark.asyncio
async def test_forced_read_always_refreshes(
    cache: FolderCache, fetch: AsyncMock, probe: AsyncMock
) -> None:
    await cache.get()

    folder = await cache.get(force=True)

    assert folder == make_folder(1)
    probe.assert_not_awaited()


@pytest.mark.asyncio
async def test_listeners_are_notified_only_on_refresh(
    cache: FolderCache, clock: FakeClock
) -> None:
    listener = Mock(return_value=None)
    cache.add_listener(listener)

    await cache.get()
    clock.advance(0.2)
    await cache.get()
    await cache.get(force=True)

    assert listener.call_count == 2
    listener.assert_called_with(make_folder(1))


@pytest.mark.asyncio
async def test_async_listener_is_awaited(cache: FolderCache) -> None:
    listener = AsyncMock()
    cache.add_listener(listener)

    await cache.get()

    listener.assert_awaited_once_with(make_folder(0))


@pytest.mark.asyncio
async def test_removed_listener_is_not_notified(cache: FolderCache) -> None:
    listener = Mock(return_value=None)
    cache.add_listener(listener)
    cache.remove_listener(listener)
    cache.remove_listener(listener)

    await cache.get()

    listener.assert_not_called()


@pytest.mark.asyncio
async def test_invalidate_forces_next_read(
    cache: FolderCache, fetch: AsyncMock
) -> None:
    await cache.get()
    cache.invalidate()

    await cache.get()

    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_refresh_keeps_recorded_used_space(
    cache: FolderCache, clock: FakeClock
) -> None:
    await cache.get()
    clock.advance(2.0)
    await cache.get()

    await cache.get(force=True)

    assert cache.entry is not None
    assert cache.entry.used_space == 1024
