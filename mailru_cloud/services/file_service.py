"""
File transfer service for Mail.Ru Cloud.

Handles streaming uploads, downloads and ZIP bundles of several entries.
"""

import os
import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

import httpx
import structlog

from mailru_cloud.api.endpoints.cloud import add_entry, create_zip, upload_content
from mailru_cloud.api.http_client import AsyncHttpClient, raise_for_status
from mailru_cloud.api.request_builder import build_form_fields
from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.core.cancellation import CancellationToken
from mailru_cloud.core.paths import entry_name, normalize_path, parent_of, with_extension_of
from mailru_cloud.core.size import Size
from mailru_cloud.exceptions import (
    DifferentParentPathsError,
    DownloadingSizeLimitError,
    PathNotExistsError,
    UploadingSizeLimitError,
)
from mailru_cloud.models.entries import CloudFile, EntryKind
from mailru_cloud.models.shards import ShardClass
from mailru_cloud.services.auth_service import AuthService
from mailru_cloud.services.entry_service import EntryService
from mailru_cloud.services.shard_service import ShardService
from mailru_cloud.services.transfer import ProgressableContent, ProgressCallback, Sink, copy_stream

logger = structlog.get_logger(__name__)

_ZIP_SUFFIX = ".zip"


class DownloadStream:
    """
    An open download.

    Attributes:
        length: Declared length in bytes. For ZIP bundles it is an estimate
            (sum of the entries' sizes), usually below the real length.
    """

    def __init__(self, response: httpx.Response, length: int | None, block_size: int) -> None:
        self._response = response
        self.length = length
        self._block_size = block_size

    @property
    def status_code(self) -> int:
        return self._response.status_code

    def chunks(self) -> AsyncIterator[bytes]:
        """Iterate over the body. Can only be consumed once."""
        return self._response.aiter_bytes(self._block_size)


class FileService:
    """
    Service for moving file content to and from the cloud.

    All transfers share one cancellation token; cancel_transfers() aborts
    every running transfer at its next block boundary.
    """

    def __init__(
        self,
        http: AsyncHttpClient,
        auth: AuthService,
        shards: ShardService,
        entries: EntryService,
        config: MailRuCloudConfig,
    ) -> None:
        """
        Args:
            http: Async HTTP client.
            auth: Session manager.
            shards: Shard resolver for upload and download endpoints.
            entries: Entry operations, used to check destinations.
            config: Client configuration.
        """
        self._http = http
        self._auth = auth
        self._shards = shards
        self._entries = entries
        self._config = config
        self._cancel_token = CancellationToken()

    @property
    def cancel_token(self) -> CancellationToken:
        """Token handed to transfers started from now on."""
        return self._cancel_token

    def cancel_transfers(self) -> None:
        """Cancel running transfers; later transfers get a fresh token."""
        self._cancel_token.cancel()
        self._cancel_token = CancellationToken()
        logger.info("Transfers cancelled")

    async def upload_stream(
        self,
        name: str,
        source: BinaryIO,
        dest_folder: str,
        *,
        length: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> CloudFile:
        """
        Upload a binary stream as a new file.

        Args:
            name: File name in the cloud.
            source: Readable binary stream, read from its current position.
            dest_folder: Existing destination folder.
            length: Number of bytes to send; the rest of the stream is left
                unread. Required for unseekable streams.
            on_progress: Progress callback.

        Returns:
            The created file; its name may differ on conflicts.

        Raises:
            UploadingSizeLimitError: If the payload exceeds the account
                ceiling (checked before any network call) or the server one.
            PathNotExistsError: If the destination folder does not exist.
            ValueError: If the stream ends before ``length`` bytes were sent.
        """
        if not name:
            msg = "name must not be empty"
            raise ValueError(msg)

        session = self._auth.require_session()
        size = length if length is not None else _remaining_length(source)
        limit = self._auth.upload_size_limit
        if size > limit:
            msg = f"Max uploading size limit is {Size(limit)}"
            raise UploadingSizeLimitError(msg, parameter="content")
        if size <= 0:
            msg = "content must not be empty"
            raise ValueError(msg)

        await self._auth.ensure_authorized()
        destination = normalize_path(dest_folder)
        if await self._entries.lookup_folder(session, destination) is None:
            msg = "Destination folder does not exist in the cloud"
            raise PathNotExistsError(msg, parameter="dest_folder_path")

        shards = await self._shards.resolve_shards(authorized=True)
        body = ProgressableContent(
            source,
            size,
            on_progress=on_progress,
            cancel_token=self._cancel_token,
            block_size=self._config.block_size,
        )
        logger.info("Uploading file", name=name, dest_folder=destination, size=size)
        content_hash = await upload_content(
            self._http, shards.url_for(ShardClass.UPLOAD), session, body, size
        )

        new_path = await add_entry(
            self._http,
            EntryKind.FILE,
            build_form_fields(session, home=destination + name),
            content_hash=content_hash,
            size=size,
        )
        logger.info("File uploaded", path=new_path)
        return CloudFile(
            name=entry_name(new_path),
            full_path=new_path,
            size=Size(size),
            hash=content_hash,
            modified_at=datetime.now(timezone.utc),
        )

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

        Args:
            local_path: File on the local machine.
            dest_folder: Existing destination folder in the cloud.
            name: Cloud file name, the local name when omitted. The local
                extension is appended when missing.
            on_progress: Progress callback.
        """
        local_path = Path(local_path)
        name = with_extension_of(name, local_path.name) if name else local_path.name
        with local_path.open("rb") as f:
            return await self.upload_stream(
                name,
                f,
                dest_folder,
                length=os.fstat(f.fileno()).st_size,
                on_progress=on_progress,
            )

    @asynccontextmanager
    async def open_download(self, path: str) -> AsyncIterator[DownloadStream]:
        """
        Open a file download.

        Example:
            ```python
            async with files.open_download("/docs/report.pdf") as stream:
                async for chunk in stream.chunks():
                    ...
            ```

        Raises:
            PathNotExistsError: If the file does not exist.
            DownloadingSizeLimitError: If the server refuses the size.
        """
        await self._auth.ensure_authorized()
        shards = await self._shards.resolve_shards(authorized=True)
        relative = normalize_path(path, leading_slash=False, trailing_slash=False)
        url = f"{shards.url_for(ShardClass.GET).rstrip('/')}/{relative}"

        async with self._http.stream("GET", url) as response:
            if response.status_code == httpx.codes.UNPROCESSABLE_ENTITY:
                msg = "The maximum downloading size limit is 4GB"
                raise DownloadingSizeLimitError(msg, parameter="source_path")
            if response.status_code == httpx.codes.NOT_FOUND:
                msg = "The file does not exist in the cloud"
                raise PathNotExistsError(msg, parameter="source_path")
            raise_for_status(response, "download")

            length = response.headers.get("Content-Length")
            yield DownloadStream(
                response, int(length) if length else None, self._config.block_size
            )

    async def download(
        self, path: str, sink: Sink, *, on_progress: ProgressCallback | None = None
    ) -> int:
        """
        Download a file into a writable binary sink.

        Returns:
            Number of bytes written.
        """
        async with self.open_download(path) as stream:
            return await self._drain(stream, sink, on_progress)

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

        Args:
            path: File path in the cloud.
            dest_folder: Local folder, created when missing.
            name: Local file name, the cloud name when omitted. The original
                extension is appended when missing.
            on_progress: Progress callback.

        Returns:
            Path of the written file.
        """
        original_name = entry_name(path)
        name = with_extension_of(name, original_name) if name else original_name
        destination = Path(dest_folder) / name
        destination.parent.mkdir(parents=True, exist_ok=True)

        with destination.open("wb") as f:
            await self.download(path, f, on_progress=on_progress)

        logger.info("File saved", path=path, destination=str(destination))
        return destination

    async def get_zip_direct_link(
        self, paths: Sequence[str], archive_name: str | None = None
    ) -> str:
        """
        Prepare a ZIP bundle and return its anonymous download link.

        Args:
            paths: Entries sharing one parent folder, root excluded.
            archive_name: Archive name, a UUID when omitted; ".zip" is
                appended when missing.

        Raises:
            DifferentParentPathsError: If the entries have different parents,
                before any network call.
            DownloadingSizeLimitError: If the bundle exceeds the server ceiling.
        """
        home_list = _zip_paths(paths)
        await self._auth.ensure_authorized()
        link = await create_zip(
            self._http, self._auth.require_session(), home_list, _zip_name(archive_name)
        )
        logger.debug("ZIP link created", entries=len(home_list))
        return link

    @asynccontextmanager
    async def open_zip_download(
        self, paths: Sequence[str], archive_name: str | None = None
    ) -> AsyncIterator[DownloadStream]:
        """
        Open the download of a ZIP bundle.

        The stream length is the sum of the entries' sizes, an estimate of
        the compressed archive length.
        """
        home_list = _zip_paths(paths)
        link = await self.get_zip_direct_link(home_list, archive_name)

        parent = await self._entries.lookup_folder(
            self._auth.require_session(), parent_of(home_list[0])
        )
        selected = {p.lower() for p in home_list}
        estimate = sum(
            child.size.bytes
            for child in (parent.children if parent is not None else ())
            if child.full_path.rstrip("/").lower() in selected
        )

        async with self._http.stream("GET", link) as response:
            if response.status_code == httpx.codes.UNPROCESSABLE_ENTITY:
                msg = "The maximum downloading size limit is 4GB"
                raise DownloadingSizeLimitError(msg, parameter="paths")
            raise_for_status(response, "zip")
            yield DownloadStream(response, estimate or None, self._config.block_size)

    async def download_zip(
        self,
        paths: Sequence[str],
        sink: Sink,
        *,
        archive_name: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> int:
        """Download a ZIP bundle into a writable binary sink."""
        async with self.open_zip_download(paths, archive_name) as stream:
            return await self._drain(stream, sink, on_progress)

    async def download_zip_to_path(
        self,
        paths: Sequence[str],
        dest_folder: Path | str,
        archive_name: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """
        Download a ZIP bundle into a local folder.

        Returns:
            Path of the written archive.
        """
        name = _zip_name(archive_name)
        destination = Path(dest_folder) / name
        destination.parent.mkdir(parents=True, exist_ok=True)

        with destination.open("wb") as f:
            await self.download_zip(paths, f, archive_name=name, on_progress=on_progress)

        logger.info("Archive saved", entries=len(paths), destination=str(destination))
        return destination

    async def _drain(
        self, stream: DownloadStream, sink: Sink, on_progress: ProgressCallback | None
    ) -> int:
        return await copy_stream(
            stream.chunks(),
            stream.length,
            sink,
            on_progress=on_progress,
            cancel_token=self._cancel_token,
            block_size=self._config.block_size,
        )


def _remaining_length(source: BinaryIO) -> int:
    if not source.seekable():
        msg = "length is required for unseekable streams"
        raise ValueError(msg)
    position = source.tell()
    end = source.seek(0, os.SEEK_END)
    source.seek(position)
    return end - position


def _zip_paths(paths: Sequence[str]) -> list[str]:
    """Normalize ZIP entries and check that they share one parent."""
    if not paths:
        msg = "paths must not be empty"
        raise ValueError(msg)

    normalized = [normalize_path(p, trailing_slash=False) for p in paths]
    if any(p == "/" for p in normalized):
        msg = "paths must not point to the root folder"
        raise ValueError(msg)

    if len({parent_of(p) for p in normalized}) > 1:
        msg = "All entries must have the same parent folder"
        raise DifferentParentPathsError(msg, parameter="paths")
    return normalized


def _zip_name(archive_name: str | None) -> str:
    name = archive_name or str(uuid.uuid4())
    if not name.lower().endswith(_ZIP_SUFFIX):
        name += _ZIP_SUFFIX
    return name
