from types import MappingProxyType

import pytest

from mailru_cloud.exceptions import APIError
from mailru_cloud.models.shards import ShardClass, ShardInfo, ShardMap


def test_url_for_returns_first_endpoint() -> None:
    shards = ShardMap(
        MappingProxyType(
            {
                ShardClass.GET: (
                    ShardInfo(url="https://get1/", count=1),
                    ShardInfo(url="https://get2/", count=2),
                )
            }
        )
    )

    assert shards.url_for(ShardClass.GET) == "https://get1/"


def test_url_for_missing_class_raises() -> None:
    with pytest.raises(APIError) as exc_info:
        ShardMap().url_for(ShardClass.UPLOAD)

    assert "upload" in str(exc_info.value)


def test_get_missing_class_is_empty() -> None:
    assert ShardMap().get(ShardClass.WEBLINK_GET) == ()
