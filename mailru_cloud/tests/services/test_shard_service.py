import pytest

from mailru_cloud.exceptions import NotAuthorizedError
from mailru_cloud.models.shards import ShardClass
from mailru_cloud.services.shard_service import ShardService
from mailru_cloud.tests.utils.cloud_data import UPLOAD_SHARD
from mailru_cloud.tests.utils.mock_transport import MockTransport


@pytest.mark.asyncio
async def test_resolve_shards_probes_session_then_dispatcher(
    shards: ShardService, transport: MockTransport
) -> None:
    result = await shards.resolve_shards()

    assert result.url_for(ShardClass.UPLOAD) == UPLOAD_SHARD
    assert transport.paths() == ["/api/v2/user/space", "/api/v2/dispatcher"]


@pytest.mark.asyncio
async def test_resolve_shards_skips_probe_when_authorized(
    shards: ShardService, transport: MockTransport
) -> None:
    await shards.resolve_shards(authorized=True)

    assert transport.paths() == ["/api/v2/dispatcher"]


@pytest.mark.asyncio
async def test_resolve_shards_is_not_cached(
    shards: ShardService, transport: MockTransport
) -> None:
    await shards.resolve_shards(authorized=True)
    await shards.resolve_shards(authorized=True)

    assert transport.paths() == ["/api/v2/dispatcher", "/api/v2/dispatcher"]


@pytest.mark.asyncio
async def test_resolve_shards_requires_session(
    shards: ShardService, transport: MockTransport
) -> None:
    shards._http.clear_session()

    with pytest.raises(NotAuthorizedError):
        await shards.resolve_shards()

    assert transport.requests == []
