from unittest.mock import Mock

import pytest

from mailru_cloud.api.http_client import Session
from mailru_cloud.tests.utils.cloud_data import EMAIL, TOKEN


@pytest.fixture
def mock_http() -> Mock:
    return Mock()


@pytest.fixture
def session() -> Session:
    return Session(email=EMAIL, token=TOKEN)
