import hashlib
import io
import uuid
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from mailru_cloud.client import MailRuCloudClient
from mailru_cloud.models.account import Credentials
from mailru_cloud.models.entries import CloudFolder, EntryKind

PAYLOAD = b"mailru-cloud integration payload\n" * 1024


@pytest_asyncio.fixture
async def client(mailru_credentials: tuple[str, str]) -> AsyncIterator[MailRuCloudClient]:
    email, password = mailru_credentials
    async with MailRuCloudClient(Credentials(email, password)) as client:
        assert await client.login()
        yield client


@pytest_asyncio.fixture
async def workspace(client: MailRuCloudClient) -> AsyncIterator[CloudFolder]:
    folder = await client.create_folder(f"/mailru_cloud_it_{uuid.uuid4().hex[:8]}")
    try:
        yield folder
    finally:
        await client.remove(folder.full_path)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_login_succeeds(client: MailRuCloudClient) -> None:
    assert client.is_authenticated
    assert await client.check_authorization()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_root_listing(client: MailRuCloudClient) -> None:
    root = await client.get_folder()

    assert root is not None
    assert root.full_path == "/"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_missing_folder_is_none(client: MailRuCloudClient) -> None:
    assert await client.get_folder("/this_path_does_not_exist_xyz") is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_upload_download_round_trip(
    client: MailRuCloudClient, workspace: CloudFolder
) -> None:
    uploaded = await client.upload_stream("payload.txt", io.BytesIO(PAYLOAD), workspace.full_path)

    sink = io.BytesIO()
    await client.download(uploaded.full_path, sink)

    assert hashlib.sha256(sink.getvalue()).hexdigest() == hashlib.sha256(PAYLOAD).hexdigest()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_rename_publish_unpublish(client: MailRuCloudClient, workspace: CloudFolder) -> None:
    uploaded = await client.upload_stream("draft.txt", io.BytesIO(PAYLOAD), workspace.full_path)

    renamed = await client.rename(EntryKind.FILE, uploaded.full_path, "final")
    published = await client.publish(EntryKind.FILE, renamed.full_path)
    assert published.public_link is not None

    unpublished = await client.unpublish(EntryKind.FILE, published.public_link)

    assert renamed.name == "final.txt"
    assert unpublished.public_link is None
