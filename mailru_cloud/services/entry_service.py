"""
Entry operations for Mail.Ru Cloud.

Every operation checks the session, normalizes its paths, verifies the
source by listing its parent folder where needed, then issues one request.
"""

from dataclasses import replace

import structlog

from mailru_cloud.api.endpoints.auth import get_download_token
from mailru_cloud.api.endpoints.cloud import (
    add_entry,
    copy_entry,
    get_file_history,
    get_folder,
    move_entry,
    publish_entry,
    remove_entry,
    rename_entry,
    unpublish_entry,
)
from mailru_cloud.api.http_client import AsyncHttpClient, Session
from mailru_cloud.api.request_builder import ConflictMode, build_form_fields
from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.core.paths import entry_name, normalize_path, parent_of, with_extension_of
from mailru_cloud.exceptions import (
    HistoryNotExistsError,
    NotSupportedOperationError,
    PathNotExistsError,
)
from mailru_cloud.models.entries import CloudEntry, CloudFile, CloudFolder, EntryKind, History
from mailru_cloud.models.shards import ShardClass
from mailru_cloud.services.auth_service import AuthService
from mailru_cloud.services.shard_service import ShardService

logger = structlog.get_logger(__name__)


class EntryService:
    """
    File and folder operations on the cloud tree.

    Entries are immutable: operations return new instances. Rename, move
    and copy return entries without a public link.
    """

    def __init__(
        self,
        http: AsyncHttpClient,
        auth: AuthService,
        shards: ShardService,
        config: MailRuCloudConfig,
    ) -> None:
        """
        Args:
            http: Async HTTP client.
            auth: Session manager gating every call.
            shards: Shard resolver for direct links.
            config: Client configuration.
        """
        self._http = http
        self._auth = auth
        self._shards = shards
        self._config = config

    async def get_folder(self, path: str | None = None) -> CloudFolder | None:
        """
        List a folder.

        Args:
            path: Folder path, the root when omitted.

        Returns:
            The folder with one level of children, None if it does not exist.
        """
        await self._auth.ensure_authorized()
        return await self.lookup_folder(self._auth.require_session(), path)

    async def lookup_folder(self, session: Session, path: str | None) -> CloudFolder | None:
        """List a folder for an already authorized session."""
        return await get_folder(
            self._http,
            session,
            normalize_path(path),
            public_link_prefix=self._config.public_link_prefix,
        )

    async def find_entry(
        self, session: Session, path: str, kind: EntryKind, *, parameter: str = "path"
    ) -> CloudEntry:
        """
        Find an entry in the listing of its parent folder.

        Args:
            session: Authorized session.
            path: Normalized entry path without trailing slash.
            kind: Expected entry kind.
            parameter: Argument name reported on failure.

        Raises:
            PathNotExistsError: If no entry of that kind and name exists.
        """
        parent = await self.lookup_folder(session, parent_of(path))
        item = parent.find(entry_name(path), kind) if parent is not None else None
        if item is None:
            msg = "Source entry does not exist in the cloud"
            raise PathNotExistsError(msg, parameter=parameter)
        return item

    async def create_folder(self, path: str) -> CloudFolder:
        """
        Create a folder and its missing parents.

        Returns:
            The created folder; its name may differ on conflicts.
        """
        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        home = normalize_path(path)

        new_path = await add_entry(
            self._http, EntryKind.FOLDER, build_form_fields(session, home=home)
        )
        logger.info("Folder created", path=new_path)
        return CloudFolder(name=entry_name(new_path), full_path=new_path)

    async def rename(self, kind: EntryKind, path: str, name: str) -> CloudEntry:
        """
        Rename a file or folder.

        A file keeps its extension when ``name`` lacks it: renaming
        "report.docx" to "summary" gives "summary.docx".

        Raises:
            PathNotExistsError: If the entry does not exist.
        """
        if not name:
            msg = "name must not be empty"
            raise ValueError(msg)

        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        source = normalize_path(path, trailing_slash=False)
        item = await self.find_entry(session, source, kind)
        if kind == EntryKind.FILE:
            name = with_extension_of(name, item.name)

        new_path = await rename_entry(self._http, build_form_fields(session, home=source), name)
        logger.info("Entry renamed", source=source, path=new_path)
        return replace(item, name=entry_name(new_path), full_path=new_path, public_link=None)

    async def move(self, kind: EntryKind, path: str, dest_folder: str) -> CloudEntry:
        """
        Move an entry into another folder.

        Raises:
            PathNotExistsError: If the entry (``path``) or the destination
                folder (``dest_folder_path``) does not exist.
        """
        new_entry = await self._move_or_copy(kind, path, dest_folder, move=True)
        logger.info("Entry moved", path=new_entry.full_path)
        return new_entry

    async def copy(self, kind: EntryKind, path: str, dest_folder: str) -> CloudEntry:
        """
        Copy an entry into another folder.

        Raises:
            PathNotExistsError: If the entry (``path``) or the destination
                folder (``dest_folder_path``) does not exist.
        """
        new_entry = await self._move_or_copy(kind, path, dest_folder, move=False)
        logger.info("Entry copied", path=new_entry.full_path)
        return new_entry

    async def remove(self, path: str) -> None:
        """Remove a file or folder."""
        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        home = normalize_path(path, trailing_slash=False)
        await remove_entry(self._http, build_form_fields(session, home=home))
        logger.info("Entry removed", path=home)

    async def publish(self, kind: EntryKind, path: str) -> CloudEntry:
        """
        Publish an entry.

        Returns:
            The entry with its new public link.

        Raises:
            PathNotExistsError: If the entry does not exist.
        """
        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        source = normalize_path(path, trailing_slash=False)
        item = await self.find_entry(session, source, kind)

        weblink = await publish_entry(
            self._http, build_form_fields(session, home=source, conflict=None)
        )
        logger.info("Entry published", path=source)
        return replace(item, public_link=self._config.public_link_prefix + weblink)

    async def unpublish(self, kind: EntryKind, public_link: str) -> CloudEntry:
        """
        Remove a public link.

        Args:
            kind: Kind of the published entry.
            public_link: Full public URL or bare weblink id.

        Returns:
            The entry as listed after the link was removed.

        Raises:
            PublicLinkNotExistsError: If the link does not exist.
        """
        if not public_link:
            msg = "public_link must not be empty"
            raise ValueError(msg)

        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        fields = build_form_fields(session, conflict=None)
        fields["weblink"] = public_link.removeprefix(self._config.public_link_prefix)

        path = await unpublish_entry(self._http, fields)
        logger.info("Entry unpublished", path=path)
        return await self.find_entry(
            session, normalize_path(path, trailing_slash=False), kind, parameter="public_link"
        )

    async def get_file_history(self, path: str) -> list[History]:
        """
        Get the history of a file, most recent (current) first.

        Raises:
            PathNotExistsError: If the file does not exist.
        """
        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        return await self._history(session, normalize_path(path, trailing_slash=False))

    async def restore_file_from_history(
        self,
        path: str,
        revision: int,
        rewrite: bool = False,
        new_name: str | None = None,
    ) -> CloudFile:
        """
        Restore a file from one of its history records.

        Args:
            path: File path.
            revision: Exact revision number of the record to restore.
            rewrite: Overwrite the file in place; otherwise the record is
                restored next to it as a new file.
            new_name: Name of the restored file when not rewriting. The
                original extension is appended when missing.

        Raises:
            NotSupportedOperationError: On restricted-tier accounts, before
                any network call.
            HistoryNotExistsError: If no record has that revision.
            ValueError: If ``revision`` is not positive.
        """
        if revision <= 0:
            msg = "revision must be positive"
            raise ValueError(msg)

        self._auth.require_session()
        if self._auth.has_2gb_upload_limit:
            msg = "The current operation is not supported for your account. Please, upgrade your tariff plan"
            raise NotSupportedOperationError(msg)

        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        source = normalize_path(path, trailing_slash=False)

        histories = await self._history(session, source)
        history = next((h for h in histories if h.revision == revision), None)
        if history is None:
            msg = "History not exists by specified revision number"
            raise HistoryNotExistsError(msg, parameter="revision")

        original_name = entry_name(source)
        name = original_name if new_name is None else with_extension_of(new_name, original_name)
        target = source if rewrite else parent_of(source) + name
        conflict = ConflictMode.REWRITE if rewrite else ConflictMode.RENAME

        new_path = await add_entry(
            self._http,
            EntryKind.FILE,
            build_form_fields(session, home=target, conflict=conflict),
            content_hash=history.hash,
            size=history.size.bytes,
        )
        logger.info("File restored", path=new_path, revision=revision)
        return CloudFile(
            name=entry_name(new_path),
            full_path=new_path,
            size=history.size,
            hash=history.hash,
            modified_at=history.modified_at,
        )

    async def get_one_time_direct_link(self, public_link: str) -> str:
        """
        Build an anonymous one-time download link of a published file.

        Args:
            public_link: Public URL of the file.

        Returns:
            URL on the ``weblink_get`` shard carrying a download key.
        """
        if not public_link.startswith(self._config.public_link_prefix):
            msg = f"Not a public link: {public_link}"
            raise ValueError(msg)

        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        key = await get_download_token(self._http, build_form_fields(session, conflict=None))
        shards = await self._shards.resolve_shards(authorized=True)
        shard_url = shards.url_for(ShardClass.WEBLINK_GET).rstrip("/")
        weblink = public_link.removeprefix(self._config.public_link_prefix)
        return f"{shard_url}/{weblink}?key={key}"

    async def _history(self, session: Session, source: str) -> list[History]:
        return await get_file_history(
            self._http, session, build_form_fields(session, home=source, conflict=None)
        )

    async def _move_or_copy(
        self, kind: EntryKind, path: str, dest_folder: str, *, move: bool
    ) -> CloudEntry:
        await self._auth.ensure_authorized()
        session = self._auth.require_session()
        source = normalize_path(path, trailing_slash=False)
        destination = normalize_path(dest_folder, trailing_slash=False)

        item = await self.find_entry(session, source, kind)
        if await self.lookup_folder(session, destination) is None:
            msg = "Destination folder does not exist in the cloud"
            raise PathNotExistsError(msg, parameter="dest_folder_path")

        fields = build_form_fields(session, home=source)
        operation = move_entry if move else copy_entry
        new_path = await operation(self._http, fields, destination)
        return replace(item, name=entry_name(new_path), full_path=new_path, public_link=None)
