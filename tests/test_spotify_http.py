import httpx
import pytest

from jukebox.models.track_models import Outcome
from jukebox.services.playlist_fetcher import PlaylistFetcher
from jukebox.services.spotify_http import SpotifyRetryTransport, create_spotify_client
from jukebox.services.spotify_token_service import TokenBroker
from tests.mocks.spotify import FakeSpotify

HEADERS = {"Authorization": "Bearer server-token"}


class RecordedSleeps(list):
    async def __call__(self, delay):
        self.append(delay)


@pytest.fixture
def sleeps():
    return RecordedSleeps()


async def test_page_answered_503_once_is_fetched_again(utc):
    spotify = FakeSpotify(total=250, flaky_offsets={0: 1})

    async with create_spotify_client(spotify.transport(), backoff=0) as client:
        result = await PlaylistFetcher(client, tz=utc).fetch("pl", HEADERS)

    assert sorted(spotify.page_offsets) == [0, 0, 100, 200]
    assert len(result.tracks) == 250
    assert result.outcome == Outcome.SUCCESS


async def test_page_gives_up_after_three_retries(utc):
    spotify = FakeSpotify(total=250, failing_offsets={100})

    async with create_spotify_client(spotify.transport(), backoff=0) as client:
        result = await PlaylistFetcher(client, tz=utc).fetch("pl", HEADERS)

    assert spotify.page_offsets.count(100) == 4
    assert len(result.tracks) == 150
    assert result.outcome == Outcome.PARTIAL


async def test_client_errors_are_not_retried(utc):
    spotify = FakeSpotify(total=250, fail_lookup=True)

    async with create_spotify_client(spotify.transport(), backoff=0) as client:
        result = await PlaylistFetcher(client, tz=utc).fetch("pl", HEADERS)

    assert len(spotify.requests) == 1
    assert result.outcome == Outcome.FAILURE


async def test_token_exchange_is_retried(spotify_config):
    spotify = FakeSpotify(flaky_token=2)

    async with create_spotify_client(spotify.transport(), backoff=0) as client:
        pair = await TokenBroker(spotify_config, client).server_token()

    assert pair.access == "fresh-access"
    assert len(spotify.token_forms()) == 3


async def test_backoff_doubles_between_attempts(sleeps):
    answers = iter([503, 502, 500, 200])

    def handler(request):
        return httpx.Response(next(answers))

    async with httpx.AsyncClient(transport=SpotifyRetryTransport(httpx.MockTransport(handler), sleep=sleeps)) as client:
        r = await client.get("https://api.spotify.com/v1/playlists/pl")

    assert r.status_code == 200
    assert sleeps == [0.5, 1.0, 2.0]


async def test_rate_limit_waits_for_retry_after(sleeps):
    answers = iter([
        httpx.Response(429, headers={"Retry-After": "4"}),
        httpx.Response(429, headers={"Retry-After": "600"}),
        httpx.Response(200),
    ])

    async with httpx.AsyncClient(transport=SpotifyRetryTransport(httpx.MockTransport(lambda r: next(answers)), sleep=sleeps)) as client:
        r = await client.get("https://api.spotify.com/v1/playlists/pl")

    assert r.status_code == 200
    assert sleeps == [4.0, 30.0]


async def test_last_error_response_is_returned(sleeps):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    async with httpx.AsyncClient(transport=SpotifyRetryTransport(httpx.MockTransport(handler), retries=2, sleep=sleeps)) as client:
        r = await client.get("https://api.spotify.com/v1/playlists/pl")

    assert r.status_code == 503
    assert len(calls) == 3
