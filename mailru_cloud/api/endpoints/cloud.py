"""Cloud structure endpoints (listing, entries, history, shards, ZIP, upload)."""

import json
from collections.abc import AsyncIterable
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

import httpx

from mailru_cloud.api.http_client import (
    AsyncHttpClient,
    Session,
    raise_for_status,
    unwrap_body,
)
from mailru_cloud.api.request_builder import API_VERSION
from mailru_cloud.core.size import Size
from mailru_cloud.exceptions import (
    APIError,
    DownloadingSizeLimitError,
    PathNotExistsError,
    PublicLinkNotExistsError,
    UploadingSizeLimitError,
)
from mailru_cloud.models.entries import CloudEntry, CloudFile, CloudFolder, EntryKind, History
from mailru_cloud.models.shards import ShardClass, ShardInfo, ShardMap

# Server side ceiling for uploads and ZIP bundles.
_SIZE_CEILING_STATUS = httpx.codes.UNPROCESSABLE_ENTITY
_SHARD_CLASSES = frozenset(c.value for c in ShardClass)


async def get_dispatcher(http: AsyncHttpClient, session: Session) -> ShardMap:
    """
    Get the shard map.

    Raises:
        APIError: If the response is not a valid shard map.
    """
    endpoint = "/api/v2/dispatcher"
    body = await http.request_body("GET", endpoint, params={"token": session.token})
    if not isinstance(body, dict):
        raise APIError("Malformed shard map", endpoint=endpoint)

    shards: dict[ShardClass, tuple[ShardInfo, ...]] = {}
    try:
        for key, records in body.items():
            if key not in _SHARD_CLASSES:
                continue
            shards[ShardClass(key)] = tuple(
                ShardInfo(url=r["url"], count=int(r.get("count") or 0)) for r in records
            )
    except (KeyError, TypeError, ValueError) as e:
        raise APIError("Malformed shard map", endpoint=endpoint) from e
    return ShardMap(MappingProxyType(shards))


async def get_folder(
    http: AsyncHttpClient, session: Session, home: str, *, public_link_prefix: str
) -> CloudFolder | None:
    """
    List a folder.

    Args:
        http: Configured async HTTP client.
        session: Current session.
        home: Normalized folder path.
        public_link_prefix: Prefix turning weblink ids into URLs.

    Returns:
        The folder with its children, or None if the server rejects the path.
    """
    endpoint = "/api/v2/folder"
    response = await http.request(
        "GET", endpoint, params={"token": session.token, "home": home}
    )
    if not response.is_success:
        return None

    body = unwrap_body(response, endpoint)
    try:
        entry = parse_entry(body, public_link_prefix)
    except (KeyError, TypeError, ValueError) as e:
        raise APIError("Malformed folder listing", endpoint=endpoint) from e
    if not isinstance(entry, CloudFolder):
        raise APIError("Listing target is not a folder", endpoint=endpoint)
    return entry


async def add_entry(
    http: AsyncHttpClient,
    kind: EntryKind,
    fields: dict[str, Any],
    *,
    content_hash: str | None = None,
    size: int = 0,
) -> str:
    """
    Create a file or folder record.

    Files are registered from an already uploaded content hash.

    Returns:
        The path assigned by the server (may differ on name conflicts).
    """
    data = dict(fields)
    if kind == EntryKind.FILE and content_hash and size:
        data["hash"] = content_hash
        data["size"] = size
    return await _post_for_path(http, f"/api/v2/{kind.value}/add", data)


async def rename_entry(http: AsyncHttpClient, fields: dict[str, Any], name: str) -> str:
    """Rename an entry, returning its new path."""
    return await _post_for_path(http, "/api/v2/file/rename", {**fields, "name": name})


async def move_entry(http: AsyncHttpClient, fields: dict[str, Any], folder: str) -> str:
    """Move an entry into a folder, returning its new path."""
    return await _post_for_path(http, "/api/v2/file/move", {**fields, "folder": folder})


async def copy_entry(http: AsyncHttpClient, fields: dict[str, Any], folder: str) -> str:
    """Copy an entry into a folder, returning the path of the copy."""
    return await _post_for_path(http, "/api/v2/file/copy", {**fields, "folder": folder})


async def remove_entry(http: AsyncHttpClient, fields: dict[str, Any]) -> None:
    """Remove an entry."""
    endpoint = "/api/v2/file/remove"
    response = await http.request("POST", endpoint, data=fields)
    raise_for_status(response, endpoint)


async def publish_entry(http: AsyncHttpClient, fields: dict[str, Any]) -> str:
    """
    Publish an entry.

    Returns:
        The weblink id of the new public link.

    Raises:
        PathNotExistsError: If the entry does not exist (404 or 400).
    """
    endpoint = "/api/v2/file/publish"
    response = await http.request("POST", endpoint, data=fields)
    if response.status_code in (httpx.codes.NOT_FOUND, httpx.codes.BAD_REQUEST):
        msg = "The entry by entered path does not exist"
        raise PathNotExistsError(msg, parameter="path")
    raise_for_status(response, endpoint)
    return _require_str(unwrap_body(response, endpoint), endpoint)


async def unpublish_entry(http: AsyncHttpClient, fields: dict[str, Any]) -> str:
    """
    Remove the public link of an entry.

    Returns:
        The path of the entry that was published.

    Raises:
        PublicLinkNotExistsError: If the link does not exist (404 or 400).
    """
    endpoint = "/api/v2/file/unpublish"
    response = await http.request("POST", endpoint, data=fields)
    if response.status_code in (httpx.codes.NOT_FOUND, httpx.codes.BAD_REQUEST):
        msg = "The entered public link does not exist"
        raise PublicLinkNotExistsError(msg, parameter="public_link")
    raise_for_status(response, endpoint)
    return _require_str(unwrap_body(response, endpoint), endpoint)


async def get_file_history(
    http: AsyncHttpClient, session: Session, fields: dict[str, Any]
) -> list[History]:
    """
    Get the history of a file, most recent first.

    The first record is flagged as the current version.

    Raises:
        PathNotExistsError: If the file does not exist.
    """
    endpoint = "/api/v2/file/history"
    response = await http.request(
        "POST",
        endpoint,
        params={
            "home": fields.get("home", ""),
            "api": API_VERSION,
            "email": session.email,
            "x-email": session.email,
            "token": session.token,
        },
        data=fields,
    )
    if response.status_code == httpx.codes.NOT_FOUND:
        msg = "The file by specified path does not exist"
        raise PathNotExistsError(msg, parameter="path")
    raise_for_status(response, endpoint)

    body = unwrap_body(response, endpoint)
    try:
        return [
            History(
                id=int(h.get("uid") or 0),
                name=h["name"],
                full_path=h["path"],
                size=Size(int(h.get("size") or 0)),
                revision=int(h.get("rev") or 0),
                hash=h.get("hash"),
                modified_at=_parse_timestamp(h.get("time")),
                is_current=index == 0,
            )
            for index, h in enumerate(body)
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise APIError("Malformed file history", endpoint=endpoint) from e


async def create_zip(
    http: AsyncHttpClient, session: Session, paths: list[str], name: str
) -> str:
    """
    Prepare a ZIP bundle of entries sharing one parent.

    Returns:
        Direct download URL of the bundle.

    Raises:
        DownloadingSizeLimitError: If the bundle exceeds the server ceiling.
    """
    endpoint = "/api/v2/zip"
    response = await http.request(
        "POST",
        endpoint,
        data={
            "home_list": json.dumps(paths, ensure_ascii=False),
            "name": name,
            "api": API_VERSION,
            "token": session.token,
            "email": session.email,
        },
    )
    if response.status_code == _SIZE_CEILING_STATUS:
        msg = "The maximum downloading size limit is 4GB"
        raise DownloadingSizeLimitError(msg, parameter="paths")
    raise_for_status(response, endpoint)
    return _require_str(unwrap_body(response, endpoint), endpoint)


async def upload_content(
    http: AsyncHttpClient,
    shard_url: str,
    session: Session,
    content: AsyncIterable[bytes],
    length: int,
) -> str:
    """
    Stream file content to an upload shard.

    Returns:
        Content hash used to register the file.

    Raises:
        UploadingSizeLimitError: If the payload exceeds the server ceiling.
    """
    response = await http.request(
        "PUT",
        shard_url,
        params={"cloud_domain": 2, "x-email": session.email},
        content=content,
        headers={"Content-Length": str(length)},
    )
    if response.status_code == _SIZE_CEILING_STATUS:
        msg = "The maximum uploading size limit is 4GB"
        raise UploadingSizeLimitError(msg, parameter="content")
    raise_for_status(response, "upload")
    content_hash = response.text.strip()
    if not content_hash:
        raise APIError("Upload returned no hash", endpoint="upload")
    return content_hash


def parse_entry(data: dict[str, Any], public_link_prefix: str) -> CloudEntry:
    """Build a CloudFile or CloudFolder from a listing item."""
    weblink = data.get("weblink")
    public_link = public_link_prefix + weblink if weblink else None
    full_path = data["home"]
    name = data.get("name", "")
    size = Size(int(data.get("size") or 0))

    if data.get("type") == EntryKind.FILE:
        return CloudFile(
            name=name,
            full_path=full_path,
            size=size,
            public_link=public_link,
            hash=data.get("hash"),
            modified_at=_parse_timestamp(data.get("mtime")),
        )

    count = data.get("count") or {}
    return CloudFolder(
        name=name,
        full_path=full_path,
        size=size,
        public_link=public_link,
        files_count=int(count.get("files") or 0),
        folders_count=int(count.get("folders") or 0),
        children=tuple(parse_entry(item, public_link_prefix) for item in data.get("list") or ()),
    )


async def _post_for_path(http: AsyncHttpClient, endpoint: str, data: dict[str, Any]) -> str:
    body = await http.request_body("POST", endpoint, data=data)
    return _require_str(body, endpoint)


def _require_str(body: Any, endpoint: str) -> str:
    if not isinstance(body, str) or not body:
        raise APIError("Expected a string body", endpoint=endpoint)
    return body


def _parse_timestamp(timestamp: int | None) -> datetime | None:
    """Parse Unix timestamp to UTC datetime."""
    if not timestamp:
        return None
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
