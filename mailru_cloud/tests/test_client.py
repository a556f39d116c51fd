import pytest

from mailru_cloud.client import MailRuCloudClient
from mailru_cloud.models.account import AuthState, Credentials
from mailru_cloud.services.folder_service import RemoteFolder
from mailru_cloud.tests.utils.cloud_data import (
    EMAIL,
    PASSWORD,
    TOKEN,
    file_item,
    folder_item,
    rate,
)
from mailru_cloud.tests.utils.mock_transport import MockTransport


@pytest.fixture
def cloud(transport: MockTransport) -> MockTransport:
    """Transport answering a full login and a small tree."""
    transport.add_response(
        "POST",
        "/cgi-bin/auth",
        headers={"Set-Cookie": "Mpop=session-cookie; Domain=.mail.ru; Path=/"},
    )
    transport.add_response("GET", "/sdc")
    transport.add_body("GET", "/api/v2/tokens/csrf", {"token": TOKEN})
    transport.add_body("GET", "/api/v2/billing/rates", {"rates": [rate("ZERO"), rate("PAID64")]})
    transport.add_body("GET", "/api/v2/user/space", {"total": 8192, "used": 1024})
    transport.add_listings(
        {"/": folder_item("/", [folder_item("/docs"), file_item("/readme.txt", 12)])}
    )
    return transport


@pytest.mark.asyncio
async def test_calls_before_initialization_raise() -> None:
    client = MailRuCloudClient()

    assert client.state == AuthState.UNAUTHENTICATED
    with pytest.raises(RuntimeError):
        await client.get_folder()


@pytest.mark.asyncio
async def test_login_then_list_root(cloud: MockTransport) -> None:
    async with MailRuCloudClient(Credentials(EMAIL, PASSWORD), transport=cloud) as client:
        assert await client.login() is True

        assert client.is_authenticated
        assert client.has_2gb_upload_limit is False
        assert {r.id for r in client.activated_tariffs} == {"ZERO", "PAID64"}

        root = await client.get_folder()

    assert root is not None
    assert root.format_tree().splitlines() == [
        "[D] /",
        "  [D] docs",
        "  [F] readme.txt (12 B)",
    ]


@pytest.mark.asyncio
async def test_login_initializes_client_lazily(cloud: MockTransport) -> None:
    client = MailRuCloudClient(transport=cloud)

    assert await client.login(EMAIL, PASSWORD) is True
    assert await client.check_authorization() is True

    await client.close()
    assert client.state == AuthState.UNAUTHENTICATED


@pytest.mark.asyncio
async def test_close_keeps_credentials(cloud: MockTransport) -> None:
    client = MailRuCloudClient(transport=cloud)
    await client.login(EMAIL, PASSWORD)
    await client.close()

    async with client:
        assert await client.login() is True


@pytest.mark.asyncio
async def test_folder_returns_live_handle(cloud: MockTransport) -> None:
    async with MailRuCloudClient(Credentials(EMAIL, PASSWORD), transport=cloud) as client:
        await client.login()
        root = client.folder()

        assert isinstance(root, RemoteFolder)
        assert [f.name for f in await root.files()] == ["readme.txt"]


@pytest.mark.asyncio
async def test_get_disk_usage(cloud: MockTransport) -> None:
    async with MailRuCloudClient(Credentials(EMAIL, PASSWORD), transport=cloud) as client:
        await client.login()
        usage = await client.get_disk_usage()

    assert usage.used.bytes == 1024 * 1024 * 1024
