"""
Live folder handle backed by a FolderCache.
"""

import time
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO

from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.core.cache import Clock, ContentListener, FolderCache
from mailru_cloud.core.paths import normalize_path
from mailru_cloud.exceptions import PathNotExistsError
from mailru_cloud.models.entries import CloudFile, CloudFolder, EntryKind
from mailru_cloud.services.auth_service import AuthService
from mailru_cloud.services.entry_service import EntryService
from mailru_cloud.services.file_service import FileService
from mailru_cloud.services.transfer import ProgressCallback


class RemoteFolder:
    """
    A cloud folder whose listing is re-read lazily.

    Reads go through the cache heuristic: the listing is fetched again once
    the refresh interval has elapsed and the account used space changed.
    Operations that change the folder force a refresh right after they
    complete. Listeners are called with the new snapshot after each refresh.

    Example:
        ```python
        docs = client.folder("/docs")
        docs.add_listener(lambda folder: print("changed"))
        for f in await docs.files():
            print(f.name, f.size)
        await docs.upload_file("report.pdf")
        ```
    """

    def __init__(
        self,
        path: str,
        *,
        auth: AuthService,
        entries: EntryService,
        files: FileService,
        config: MailRuCloudConfig,
        clock: Clock = time.monotonic,
    ) -> None:
        self._path = normalize_path(path)
        self._auth = auth
        self._entries = entries
        self._files = files
        self._config = config
        self._clock = clock
        self._cache = FolderCache(
            self._fetch,
            self._probe_used_space,
            clock=clock,
            refresh_interval=config.folder_refresh_interval,
        )

    @property
    def path(self) -> str:
        """Normalized folder path, with both slashes."""
        return self._path

    @property
    def cache(self) -> FolderCache:
        return self._cache

    def add_listener(self, listener: ContentListener) -> None:
        self._cache.add_listener(listener)

    def remove_listener(self, listener: ContentListener) -> None:
        self._cache.remove_listener(listener)

    async def info(self) -> CloudFolder:
        """
        Current folder snapshot.

        Raises:
            PathNotExistsError: If the folder does not exist (anymore).
        """
        return self._require_folder(await self._cache.get())

    async def files(self) -> tuple[CloudFile, ...]:
        return (await self.info()).files

    async def folders(self) -> tuple[CloudFolder, ...]:
        return (await self.info()).folders

    async def refresh(self) -> CloudFolder:
        """Re-read the listing regardless of the heuristic."""
        return self._require_folder(await self._cache.get(force=True))

    async def create_folder(self, name: str) -> CloudFolder:
        """
        Create a subfolder.

        Raises:
            ValueError: If the name is empty or contains a path separator.
        """
        if not name or "/" in name or "\\" in name:
            msg = f"Invalid folder name: {name!r}"
            raise ValueError(msg)
        created = await self._entries.create_folder(self._path + name)
        await self._cache.get(force=True)
        return created

    async def rename(self, name: str) -> CloudFolder:
        """Rename this folder; the handle follows the new path."""
        renamed = await self._entries.rename(EntryKind.FOLDER, self._path, name)
        self._path = normalize_path(renamed.full_path)
        await self._cache.get(force=True)
        return renamed

    async def move(self, dest_folder: str) -> CloudFolder:
        """Move this folder; the handle follows the new path."""
        moved = await self._entries.move(EntryKind.FOLDER, self._path, dest_folder)
        self._path = normalize_path(moved.full_path)
        await self._cache.get(force=True)
        return moved

    async def copy(self, dest_folder: str) -> "RemoteFolder":
        """Copy this folder and return a handle on the copy."""
        copied = await self._entries.copy(EntryKind.FOLDER, self._path, dest_folder)
        return RemoteFolder(
            copied.full_path,
            auth=self._auth,
            entries=self._entries,
            files=self._files,
            config=self._config,
            clock=self._clock,
        )

    async def remove(self) -> None:
        """Remove this folder. Listeners receive None."""
        await self._entries.remove(self._path)
        await self._cache.get(force=True)

    async def publish(self) -> CloudFolder:
        published = await self._entries.publish(EntryKind.FOLDER, self._path)
        await self._cache.get(force=True)
        return published

    async def unpublish(self) -> CloudFolder:
        """
        Remove the public link of this folder.

        An unpublished folder is returned as is, without a request.
        """
        folder = await self.info()
        public_link = folder.public_link
        if public_link is None:
            return folder
        unpublished = await self._entries.unpublish(EntryKind.FOLDER, public_link)
        await self._cache.get(force=True)
        return unpublished

    async def upload_file(
        self,
        local_path: Path | str,
        name: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> CloudFile:
        uploaded = await self._files.upload_file(
            local_path, self._path, name, on_progress=on_progress
        )
        await self._cache.get(force=True)
        return uploaded

    async def upload_stream(
        self,
        name: str,
        source: BinaryIO,
        *,
        length: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> CloudFile:
        uploaded = await self._files.upload_stream(
            name, source, self._path, length=length, on_progress=on_progress
        )
        await self._cache.get(force=True)
        return uploaded

    async def get_zip_direct_link(self, archive_name: str | None = None) -> str:
        """ZIP link of this whole folder."""
        return await self._files.get_zip_direct_link([self._path], archive_name)

    async def download_as_zip(
        self,
        dest_folder: Path | str,
        archive_name: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """Download this folder as a ZIP archive into a local folder."""
        return await self._files.download_zip_to_path(
            [self._path], dest_folder, archive_name, on_progress=on_progress
        )

    async def download_children_as_zip(
        self,
        names: Sequence[str],
        dest_folder: Path | str,
        archive_name: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """Download the named children of this folder as one ZIP archive."""
        return await self._files.download_zip_to_path(
            [self._path + name for name in names],
            dest_folder,
            archive_name,
            on_progress=on_progress,
        )

    async def _fetch(self) -> CloudFolder | None:
        return await self._entries.get_folder(self._path)

    async def _probe_used_space(self) -> int:
        return (await self._auth.get_disk_usage()).used.bytes

    def _require_folder(self, folder: CloudFolder | None) -> CloudFolder:
        if folder is None:
            msg = "The folder does not exist in the cloud"
            raise PathNotExistsError(msg, parameter="path")
        return folder

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self._path!r})"
