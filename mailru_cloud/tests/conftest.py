from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from mailru_cloud.api.http_client import AsyncHttpClient
from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.models.account import Credentials
from mailru_cloud.services.auth_service import AuthService
from mailru_cloud.tests.utils.cloud_data import EMAIL, PASSWORD, TOKEN
from mailru_cloud.tests.utils.mock_transport import MockTransport


@pytest.fixture
def config() -> MailRuCloudConfig:
    return MailRuCloudConfig()


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest_asyncio.fixture
async def http(config: MailRuCloudConfig, transport: MockTransport) -> AsyncIterator[AsyncHttpClient]:
    async with AsyncHttpClient(config, transport=transport) as client:
        yield client


@pytest.fixture
def authorized_http(http: AsyncHttpClient) -> AsyncHttpClient:
    """HTTP client holding a token and a cookie, as after a login."""
    http.set_session(EMAIL, TOKEN)
    http._require_client().cookies.set("sdcs", "cookie-value", domain=".mail.ru")
    return http


@pytest.fixture
def auth(
    authorized_http: AsyncHttpClient, config: MailRuCloudConfig, transport: MockTransport
) -> AuthService:
    """Logged-in session manager whose disk-usage probe succeeds."""
    transport.add_body("GET", "/api/v2/user/space", {"total": 8192, "used": 1024})
    return AuthService(authorized_http, config, Credentials(EMAIL, PASSWORD))
