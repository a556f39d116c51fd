"""Builders for raw API payloads."""

from typing import Any

from mailru_cloud.core.size import Size
from mailru_cloud.models.account import Rate

EMAIL = "user@mail.ru"
PASSWORD = "secret-password"
TOKEN = "csrf-token-4f8a9c2e"

UPLOAD_SHARD = "https://upload.cloud.mail.ru/upload/"
GET_SHARD = "https://get.cloud.mail.ru/get/"
WEBLINK_GET_SHARD = "https://weblink.cloud.mail.ru/weblink/get/"


def file_item(
    home: str,
    size: int = 1024,
    *,
    weblink: str | None = None,
    hash: str = "C172C6E2FF47284FF33F348FEA7EECE532F6C051",
    mtime: int = 1_530_000_000,
) -> dict[str, Any]:
    item: dict[str, Any] = {
        "type": "file",
        "kind": "file",
        "name": home.rsplit("/", 1)[-1],
        "home": home,
        "size": size,
        "hash": hash,
        "mtime": mtime,
    }
    if weblink:
        item["weblink"] = weblink
    return item


def folder_item(
    home: str,
    items: list[dict[str, Any]] | None = None,
    *,
    size: int = 0,
    weblink: str | None = None,
) -> dict[str, Any]:
    home = home.rstrip("/") or "/"
    children = items or []
    item: dict[str, Any] = {
        "type": "folder",
        "kind": "folder",
        "name": home.rsplit("/", 1)[-1],
        "home": home,
        "size": size,
        "count": {
            "files": sum(1 for c in children if c["type"] == "file"),
            "folders": sum(1 for c in children if c["type"] == "folder"),
        },
    }
    if children:
        item["list"] = children
    if weblink:
        item["weblink"] = weblink
    return item


def dispatcher_body() -> dict[str, Any]:
    return {
        "upload": [{"url": UPLOAD_SHARD, "count": "1"}],
        "get": [{"url": GET_SHARD, "count": "1"}],
        "weblink_get": [{"url": WEBLINK_GET_SHARD, "count": 1}],
        "thumbnails": [{"url": "https://thumb.cloud.mail.ru/", "count": 1}],
    }


def rate(rate_id: str, *, active: bool = True) -> dict[str, Any]:
    return {
        "id": rate_id,
        "name": rate_id.title(),
        "active": active,
        "available": True,
        "size": 8 * 1024**3,
        "cost": [],
    }


def history_item(revision: int, *, uid: int = 1, size: int = 2048, path: str = "/docs/report.docx") -> dict[str, Any]:
    return {
        "uid": uid,
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "size": size,
        "rev": revision,
        "hash": f"HASH{revision}",
        "time": 1_530_000_000 + revision,
    }


MIB = 1024 * 1024


def paid_rate() -> Rate:
    return Rate(
        id="PAID64",
        name="64 GB",
        is_active=True,
        is_available=True,
        size=Size(64 * 1024**3),
    )
