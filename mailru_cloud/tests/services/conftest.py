import pytest

from mailru_cloud.api.http_client import AsyncHttpClient
from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.services.auth_service import AuthService
from mailru_cloud.services.entry_service import EntryService
from mailru_cloud.services.file_service import FileService
from mailru_cloud.services.shard_service import ShardService
from mailru_cloud.tests.utils.cloud_data import dispatcher_body, paid_rate
from mailru_cloud.tests.utils.mock_transport import MockTransport


@pytest.fixture
def paid_auth(auth: AuthService) -> AuthService:
    """Session on an unrestricted tier, without a login round trip."""
    auth._activated_tariffs = (paid_rate(),)
    return auth


@pytest.fixture
def shards(
    authorized_http: AsyncHttpClient, auth: AuthService, transport: MockTransport
) -> ShardService:
    transport.add_body("GET", "/api/v2/dispatcher", dispatcher_body())
    return ShardService(authorized_http, auth)


@pytest.fixture
def entries(
    authorized_http: AsyncHttpClient,
    auth: AuthService,
    shards: ShardService,
    config: MailRuCloudConfig,
) -> EntryService:
    return EntryService(authorized_http, auth, shards, config)


@pytest.fixture
def files(
    authorized_http: AsyncHttpClient,
    auth: AuthService,
    shards: ShardService,
    entries: EntryService,
    config: MailRuCloudConfig,
) -> FileService:
    return FileService(authorized_http, auth, shards, entries, config)
