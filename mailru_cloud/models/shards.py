"""
Shard (per-operation endpoint) models.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from mailru_cloud.exceptions import APIError


class ShardClass(StrEnum):
    """Operation classes returned by the dispatcher."""

    VIDEO = "video"
    VIEW_DIRECT = "view_direct"
    WEBLINK_VIEW = "weblink_view"
    WEBLINK_VIDEO = "weblink_video"
    WEBLINK_GET = "weblink_get"
    STOCK = "stock"
    WEBLINK_THUMBNAILS = "weblink_thumbnails"
    WEB = "web"
    AUTH = "auth"
    VIEW = "view"
    GET = "get"
    UPLOAD = "upload"
    THUMBNAILS = "thumbnails"


@dataclass(frozen=True, kw_only=True)
class ShardInfo:
    """One endpoint of a shard class."""

    url: str
    count: int = 0


@dataclass(frozen=True)
class ShardMap:
    """Mapping of operation class to its endpoints."""

    shards: Mapping[ShardClass, tuple[ShardInfo, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get(self, shard_class: ShardClass) -> tuple[ShardInfo, ...]:
        return self.shards.get(shard_class, ())

    def url_for(self, shard_class: ShardClass) -> str:
        """
        URL of the first endpoint of a class.

        Raises:
            APIError: If the dispatcher returned no endpoint for the class.
        """
        shards = self.get(shard_class)
        if not shards:
            msg = f"No shard available for {shard_class.value}"
            raise APIError(msg, endpoint="dispatcher")
        return shards[0].url
