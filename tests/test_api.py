import pytest
from fastapi.testclient import TestClient

from jukebox.api.deps import get_firestore, get_http_client, get_spotify_config
from jukebox.config.settings import SpotifyConfig
from jukebox.main import app
from tests.mocks.spotify import FakeSpotify, playlist_item


@pytest.fixture
def spotify():
    return FakeSpotify(total=250)


@pytest.fixture
def api(async_db, spotify, spotify_config):
    async def http_client():
        async with spotify.client() as client:
            yield client

    app.dependency_overrides[get_firestore] = lambda: async_db
    app.dependency_overrides[get_http_client] = http_client
    app.dependency_overrides[get_spotify_config] = lambda: spotify_config
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(api):
    assert api.get("/").json()["status"] == "ok"


# --------------------------
# Tracks
# --------------------------
def test_ingest_playlist(api, async_db, spotify):
    r = api.post("/tracks/playlist", json={"playlistId": "pl", "channelTag": "nova"})

    assert r.status_code == 200
    assert r.json() == {"result": "250 tracks saved", "status": "success"}
    assert len(async_db.docs("tracks")) == 250


def test_ingest_playlist_window(api, async_db):
    r = api.post("/tracks/playlist", json={"playlistId": "pl", "start": 10, "end": 60, "channelTag": "nova"})

    assert r.json()["result"] == "50 tracks saved"


def test_ingest_playlist_rejects_reversed_window(api):
    r = api.post("/tracks/playlist", json={"playlistId": "pl", "start": 60, "end": 10})

    assert r.status_code == 422


def test_ingest_reports_partial_results(api, spotify):
    spotify.failing_offsets = {200}

    r = api.post("/tracks/playlist", json={"playlistId": "pl"})

    assert r.status_code == 200
    assert r.json() == {"result": "200 tracks saved (1 of 3 pages failed)", "status": "partial"}


def test_ingest_without_configuration(api):
    app.dependency_overrides[get_spotify_config] = lambda: SpotifyConfig(client_id="id")

    r = api.post("/tracks/playlist", json={"playlistId": "pl"})

    assert r.status_code == 500
    assert "client_secret" in r.json()["detail"]


def test_save_tracks(api, async_db):
    tracks = [
        {"uri": "spotify:track:1", "name": "One", "addedAtDay": 2, "addedAtHour": 8},
        None,
        {},
        {"uri": "spotify:track:2"},
    ]

    r = api.post("/tracks", json={"tracks": tracks})

    assert r.json() == {"result": "4 tracks saved", "status": "success"}
    assert {d["uri"] for d in async_db.docs("tracks").values()} == {"spotify:track:1", "spotify:track:2"}


def test_save_raw_playlist_items(api, async_db):
    r = api.post("/tracks", json={"tracks": [playlist_item(1)]})

    assert r.status_code == 200
    (doc,) = async_db.docs("tracks").values()
    assert doc["artist"] == "Artist 1"


# --------------------------
# Spotify tokens
# --------------------------
def test_get_spotify_token_access(api, async_db):
    r = api.post("/spotify/token", json={"tokenType": "access", "code": "the-code", "userId": "uid-1"})

    assert r.json() == {"token": "fresh-access", "refreshToken": "fresh-refresh"}
    tokens = async_db.docs("users")["uid-1"]["tokens"]
    assert (tokens["access"], tokens["refresh"]) == ("fresh-access", "fresh-refresh")


def test_get_spotify_token_refresh(api, async_db):
    async_db.docs("users")["uid-1"] = {"tokens": {"access": "old", "refresh": "R"}}

    r = api.post("/spotify/token", json={"tokenType": "refresh", "refreshToken": "R", "userId": "uid-1"})

    assert r.json() == {"token": "fresh-access", "refreshToken": ""}
    assert async_db.docs("users")["uid-1"]["tokens"]["refresh"] == "R"


def test_get_spotify_token_failure_is_empty(api, spotify):
    spotify.fail_token = True

    r = api.post("/spotify/token", json={"tokenType": "refresh", "refreshToken": "bad", "userId": "uid-1"})

    assert r.status_code == 200
    assert r.json() == {"token": "", "refreshToken": ""}


def test_save_empty_token(api, async_db):
    r = api.post("/spotify/token/save", json={"token": "", "tokenType": "access", "userId": "uid-1"})

    assert r.json()["result"] == "Empty token."
    assert async_db.store.writes == 0


def test_save_token(api, async_db):
    r = api.post(
        "/spotify/token/save",
        json={"token": "A", "tokenType": "access", "refreshToken": "R", "userId": "uid-1"},
    )

    assert r.json() == {"result": "Access token successfully added.", "status": "success"}
    assert async_db.docs("users")["uid-1"]["tokens"]["refresh"] == "R"


def test_login_url(api):
    r = api.get("/spotify/login", params={"state": "uid-1"})

    url = r.json()["authorization_url"]
    assert url.startswith("https://accounts.spotify.com/authorize?client_id=client-id")
    assert "response_type=code" in url
    assert "scope=streaming+user-read-email+user-read-private" in url
    assert "state=uid-1" in url


# --------------------------
# Auth
# --------------------------
def test_anonymous_login_then_me(api):
    login = api.post("/auth/anonymous").json()

    r = api.get("/auth/me", headers={"Authorization": f"Bearer {login['token']}"})

    assert r.status_code == 200
    assert r.json()["uid"] == login["uid"]


def test_me_hides_tokens(api, async_db):
    login = api.post("/auth/anonymous").json()
    async_db.docs("users")[login["uid"]]["tokens"] = {"access": "secret"}

    r = api.get("/auth/me", headers={"Authorization": f"Bearer {login['token']}"})

    assert "tokens" not in r.json()


def test_me_requires_a_valid_token(api):
    assert api.get("/auth/me").status_code == 401
    assert api.get("/auth/me", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_provision_account(api, async_db):
    r = api.post("/auth/account", json={"uid": "uid-7", "displayName": "Hall", "email": "hall@jukebox.io"})

    assert r.json()["uid"] == "uid-7"
    assert async_db.docs("users")["uid-7"]["emailVerified"] is True
