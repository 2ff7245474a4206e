import base64

import pytest

from jukebox.config.settings import ConfigurationError, SpotifyConfig
from jukebox.models.token_model import TokenType
from jukebox.models.track_models import Outcome
from jukebox.services.spotify_token_service import TokenBroker
from jukebox.services.token_store import TokenStore
from tests.mocks.spotify import FakeSpotify


def test_broker_refuses_incomplete_configuration():
    config = SpotifyConfig(client_id="id", client_secret="", redirect_uri="http://localhost")

    with pytest.raises(ConfigurationError) as exc:
        TokenBroker(config, client=None)

    assert exc.value.missing == ["client_secret", "refresh_token"]
    assert "client_secret" in str(exc.value)


async def test_authorization_code_exchange(spotify_config):
    spotify = FakeSpotify()

    async with spotify.client() as client:
        pair = await TokenBroker(spotify_config, client).exchange_authorization_code("the-code")

    assert (pair.access, pair.refresh) == ("fresh-access", "fresh-refresh")
    assert spotify.token_forms() == [{
        "grant_type": "authorization_code",
        "code": "the-code",
        "redirect_uri": "http://localhost:4200",
    }]
    expected = "Basic " + base64.b64encode(b"client-id:client-secret").decode()
    assert spotify.requests[0].headers["Authorization"] == expected
    assert spotify.requests[0].headers["Content-Type"] == "application/x-www-form-urlencoded"


async def test_refresh(spotify_config):
    spotify = FakeSpotify()

    async with spotify.client() as client:
        pair = await TokenBroker(spotify_config, client).refresh("user-refresh")

    assert pair.access == "fresh-access"
    assert pair.refresh == ""
    assert spotify.token_forms() == [{"grant_type": "refresh_token", "refresh_token": "user-refresh"}]


async def test_failed_exchange_degrades_to_empty_tokens(spotify_config):
    spotify = FakeSpotify(fail_token=True)

    async with spotify.client() as client:
        broker = TokenBroker(spotify_config, client)
        code_pair = await broker.exchange_authorization_code("bad-code")
        refresh_pair = await broker.refresh("revoked")

    for pair in (code_pair, refresh_pair):
        assert (pair.access, pair.refresh) == ("", "")
        assert pair.outcome == Outcome.FAILURE


async def test_auth_headers_use_the_configured_refresh_token(spotify_config):
    spotify = FakeSpotify(access_token="server-access")

    async with spotify.client() as client:
        headers = await TokenBroker(spotify_config, client).get_auth_headers()

    assert headers["Authorization"] == "Bearer server-access"
    assert spotify.token_forms()[0]["refresh_token"] == "server-refresh"


async def test_request_token_access_stores_both_tokens(spotify_config, async_db):
    spotify = FakeSpotify()

    async with spotify.client() as client:
        broker = TokenBroker(spotify_config, client, TokenStore(async_db))
        pair = await broker.request_token("uid-1", TokenType.ACCESS, code="the-code")

    tokens = async_db.docs("users")["uid-1"]["tokens"]
    assert pair.outcome == Outcome.SUCCESS
    assert tokens["access"] == "fresh-access"
    assert tokens["refresh"] == "fresh-refresh"
    assert tokens["addedAt"] is not None


async def test_request_token_refresh_keeps_the_stored_refresh_token(spotify_config, async_db):
    async_db.docs("users")["uid-1"] = {"uid": "uid-1", "tokens": {"access": "old", "refresh": "R"}}
    spotify = FakeSpotify(access_token="new-access")

    async with spotify.client() as client:
        broker = TokenBroker(spotify_config, client, TokenStore(async_db))
        pair = await broker.request_token("uid-1", TokenType.REFRESH, refresh_token="R")

    tokens = async_db.docs("users")["uid-1"]["tokens"]
    assert pair.access == "new-access"
    assert tokens["access"] == "new-access"
    assert tokens["refresh"] == "R"


async def test_request_token_refresh_falls_back_to_the_stored_refresh_token(spotify_config, async_db):
    async_db.docs("users")["uid-1"] = {"uid": "uid-1", "tokens": {"access": "old", "refresh": "stored-R"}}
    spotify = FakeSpotify(access_token="new-access")

    async with spotify.client() as client:
        broker = TokenBroker(spotify_config, client, TokenStore(async_db))
        pair = await broker.request_token("uid-1", TokenType.REFRESH)

    assert spotify.token_forms() == [{"grant_type": "refresh_token", "refresh_token": "stored-R"}]
    assert pair.access == "new-access"
    assert async_db.docs("users")["uid-1"]["tokens"]["refresh"] == "stored-R"


async def test_request_token_failure_writes_nothing(spotify_config, async_db):
    spotify = FakeSpotify(fail_token=True)

    async with spotify.client() as client:
        broker = TokenBroker(spotify_config, client, TokenStore(async_db))
        pair = await broker.request_token("uid-1", TokenType.REFRESH, refresh_token="R")

    assert pair.access == ""
    assert async_db.docs("users") == {}
