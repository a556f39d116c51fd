"""
Mail.Ru Cloud client facade.

This is the main entry point for users of the library. It provides a clean,
high-level API that hides the complexity of the underlying services.
"""

import asyncio
from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import BinaryIO, Self

import httpx
import structlog

from mailru_cloud.api.http_client import AsyncHttpClient
from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.models.account import AuthState, Credentials, DiskUsage, Rate
from mailru_cloud.models.entries import CloudEntry, CloudFile, CloudFolder, EntryKind, History
from mailru_cloud.models.shards import ShardMap
from mailru_cloud.services.auth_service import AuthService
from mailru_cloud.services.entry_service import EntryService
from mailru_cloud.services.file_service import DownloadStream, FileService
from mailru_cloud.services.folder_service import RemoteFolder
from mailru_cloud.services.shard_service import ShardService
from mailru_cloud.services.transfer import ProgressCallback, Sink

logger = structlog.get_logger(__name__)


class MailRuCloudClient:
    """
    Async client for Mail.Ru Cloud.

    This is the main entry point for interacting with Mail.Ru Cloud.
    It provides a high-level API for authentication, entry management,
    and file transfers.

    Example:
        ```python
        async with MailRuCloudClient(Credentials("user@mail.ru", "password")) as client:
            if not await client.login():
                raise SystemExit("Rejected")

            root = await client.get_folder()
            print(root.format_tree())

            await client.upload_file("report.pdf", "/docs")
            await client.download_to_path("/docs/report.pdf", "downloads")
        ```

    Args:
        credentials: Account credentials, may be given to login() instead.
        config: Client configuration. Uses defaults if not provided.
        transport: Optional httpx transport for testing (mock transport).
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        config: MailRuCloudConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the Mail.Ru Cloud client.

        Args:
            credentials: Account credentials.
            config: Client configuration. Uses defaults if not provided.
            transport: Optional httpx transport for testing.
        """
        self._credentials = credentials
        self._config = config or MailRuCloudConfig()
        self._transport = transport

        self._http: AsyncHttpClient | None = None
        self._auth_service: AuthService | None = None
        self._shard_service: ShardService | None = None
        self._entry_service: EntryService | None = None
        self._file_service: FileService | None = None

        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        """Enter async context."""
        await self._ensure_initialized()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    async def _ensure_initialized(self) -> None:
        """Ensure all components are initialized."""
        async with self._init_lock:
            if self._initialized:
                return

            self._http = AsyncHttpClient(self._config, transport=self._transport)
            await self._http.__aenter__()

            self._auth_service = AuthService(self._http, self._config, self._credentials)
            self._shard_service = ShardService(self._http, self._auth_service)
            self._entry_service = EntryService(
                self._http, self._auth_service, self._shard_service, self._config
            )
            self._file_service = FileService(
                self._http,
                self._auth_service,
                self._shard_service,
                self._entry_service,
                self._config,
            )

            self._initialized = True
            logger.debug("Client initialized")

    async def close(self) -> None:
        """Close the client and release resources."""
        async with self._init_lock:
            if self._auth_service is not None:
                self._credentials = self._auth_service.credentials
                self._auth_service = None

            if self._http:
                await self._http.__aexit__(None, None, None)
                self._http = None

            self._shard_service = None
            self._entry_service = None
            self._file_service = None
            self._initialized = False
            logger.debug("Client closed")

    async def login(self, email: str | None = None, password: str | None = None) -> bool:
        """
        Log in.

        Args:
            email: Replaces the configured email when given.
            password: Replaces the configured password when given.

        Returns:
            True on success, False if the server rejected the credentials.

        Raises:
            NotAuthorizedError: If the email or the password is empty.
        """
        await self._ensure_initialized()
        return await self._auth.login(email, password)

    async def check_authorization(self) -> bool:
        """Whether the server still accepts the session."""
        return await self._auth.check_authorization()

    async def get_disk_usage(self) -> DiskUsage:
        return await self._auth.get_disk_usage()

    @property
    def state(self) -> AuthState:
        if self._auth_service is None:
            return AuthState.UNAUTHENTICATED
        return self._auth_service.state

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def activated_tariffs(self) -> tuple[Rate, ...]:
        return self._auth.activated_tariffs

    @property
    def has_2gb_upload_limit(self) -> bool:
        return self._auth.has_2gb_upload_limit

    async def resolve_shards(self) -> ShardMap:
        return await self._shards.resolve_shards()

    def cancel_transfers(self) -> None:
        """
        Abort every running upload and download at its next block boundary.

        Transfers started afterwards are not affected.
        """
        self._files.cancel_transfers()

    async def get_folder(self, path: str | None = None) -> CloudFolder | None:
        """
        List a folder (one level).

        Returns:
            The folder, or None if it does not exist.
        """
        return await self._entries.get_folder(path)

    def folder(self, path: str = "/") -> RemoteFolder:
        """
        Get a live handle on a folder.

        The handle caches the listing and refreshes it when the account
        content changes.
        """
        return RemoteFolder(
            path,
            auth=self._auth,
            entries=self._entries,
            files=self._files,
            config=self._config,
        )

    async def create_folder(self, path: str) -> CloudFolder:
        return await self._entries.create_folder(path)

    async def rename(self, kind: EntryKind, path: str, name: str) -> CloudEntry:
        """Rename an entry. Files keep their extension."""
        return await self._entries.rename(kind, path, name)

    async def move(self, kind: EntryKind, path: str, dest_folder: str) -> CloudEntry:
        return await self._entries.move(kind, path, dest_folder)

    async def copy(self, kind: EntryKind, path: str, dest_folder: str) -> CloudEntry:
        return await self._entries.copy(kind, path, dest_folder)

    async def remove(self, path: str) -> None:
        await self._entries.remove(path)

    async def publish(self, kind: EntryKind, path: str) -> CloudEntry:
        return await self._entries.publish(kind, path)

    async def unpublish(self, kind: EntryKind, public_link: str) -> CloudEntry:
        return await self._entries.unpublish(kind, public_link)

    async def get_file_history(self, path: str) -> list[History]:
        return await self._entries.get_file_history(path)

    async def restore_file_from_history(
        self,
        path: str,
        revision: int,
        rewrite: bool = False,
        new_name: str | None = None,
    ) -> CloudFile:
        """
        Restore a file from history. Not available on the free tier.

        Raises:
            NotSupportedOperationError: On restricted-tier accounts.
            HistoryNotExistsError: If the revision does not exist.
        """
        return await self._entries.restore_file_from_history(path, revision, rewrite, new_name)

    async def get_one_time_direct_link(self, public_link: str) -> str:
        """Anonymous one-time download link of a published file."""
        return await self._entries.get_one_time_direct_link(public_link)

    async def upload_file(
        self,
        local_path: Path | str,
        dest_folder: str,
        name: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> CloudFile:
        """
        Upload a local file.

        Raises:
            UploadingSizeLimitError: If the file exceeds the account ceiling.
            PathNotExistsError: If the destination folder does not exist.
        """
        return await self._files.upload_file(local_path, dest_folder, name, on_progress=on_progress)

    async def upload_stream(
        self,
        name: str,
        source: BinaryIO,
        dest_folder: str,
        *,
        length: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> CloudFile:
        return await self._files.upload_stream(
            name, source, dest_folder, length=length, on_progress=on_progress
        )

    def open_download(self, path: str) -> AbstractAsyncContextManager[DownloadStream]:
        """
        Open a file download as a stream.

        Example:
            ```python
            async with client.open_download("/docs/report.pdf") as stream:
                async for chunk in stream.chunks():
                    f.write(chunk)
            ```
        """
        return self._files.open_download(path)

    async def download(
        self, path: str, sink: Sink, *, on_progress: ProgressCallback | None = None
    ) -> int:
        return await self._files.download(path, sink, on_progress=on_progress)

    async def download_to_path(
        self,
        path: str,
        dest_folder: Path | str,
        name: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """
        Download a file into a local folder.

        Raises:
            PathNotExistsError: If the file does not exist.
        """
        return await self._files.download_to_path(
            path, dest_folder, name, on_progress=on_progress
        )

    async def get_zip_direct_link(
        self, paths: Sequence[str], archive_name: str | None = None
    ) -> str:
        """
        Direct link of a ZIP bundle of entries sharing one parent folder.

        Raises:
            DifferentParentPathsError: If the entries have different parents.
        """
        return await self._files.get_zip_direct_link(paths, archive_name)

    def open_zip_download(
        self, paths: Sequence[str], archive_name: str | None = None
    ) -> AbstractAsyncContextManager[DownloadStream]:
        return self._files.open_zip_download(paths, archive_name)

    async def download_zip(
        self,
        paths: Sequence[str],
        sink: Sink,
        *,
        archive_name: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> int:
        return await self._files.download_zip(
            paths, sink, archive_name=archive_name, on_progress=on_progress
        )

    async def download_zip_to_path(
        self,
        paths: Sequence[str],
        dest_folder: Path | str,
        archive_name: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        return await self._files.download_zip_to_path(
            paths, dest_folder, archive_name, on_progress=on_progress
        )

    @property
    def _auth(self) -> AuthService:
        if self._auth_service is None:
            raise RuntimeError("Client not initialized")
        return self._auth_service

    @property
    def _shards(self) -> ShardService:
        if self._shard_service is None:
            raise RuntimeError("Client not initialized")
        return self._shard_service

    @property
    def _entries(self) -> EntryService:
        if self._entry_service is None:
            raise RuntimeError("Client not initialized")
        return self._entry_service

    @property
    def _files(self) -> FileService:
        if self._file_service is None:
            raise RuntimeError("Client not initialized")
        return self._file_service
