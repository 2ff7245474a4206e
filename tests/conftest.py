import os

# settings are read at import time
os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("JWT_SECRET", "test-secret")

from zoneinfo import ZoneInfo

import pytest

from jukebox.config.settings import SpotifyConfig
from tests.mocks.firestore import FakeAsyncFirestore, FakeFirestore


@pytest.fixture
def utc():
    return ZoneInfo("UTC")


@pytest.fixture
def spotify_config():
    return SpotifyConfig(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="server-refresh",
        redirect_uri="http://localhost:4200",
    )


@pytest.fixture
def async_db():
    return FakeAsyncFirestore()


@pytest.fixture
def sync_db():
    return FakeFirestore()
