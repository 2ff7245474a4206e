# jukebox/services/spotify_http.py
import asyncio
import logging
from typing import Optional
import httpx

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE = "https://api.spotify.com/v1"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"

TRANSPORT_RETRIES = 3
TIMEOUT_SECONDS = 20.0

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})
RETRY_BACKOFF_SECONDS = 0.5
MAX_RETRY_AFTER_SECONDS = 30.0


class SpotifyRetryTransport(httpx.AsyncBaseTransport):
    """
    Re-sends a request that Spotify answered with 429 or a 5xx, at most
    `retries` more times. A 429 waits for Retry-After when Spotify sends it,
    everything else backs off 0.5s, 1s, 2s. The last response is returned
    as-is, so callers still see the error status.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        retries: int = TRANSPORT_RETRIES,
        backoff: float = RETRY_BACKOFF_SECONDS,
        sleep=asyncio.sleep,
    ):
        self._transport = transport
        self.retries = retries
        self.backoff = backoff
        self._sleep = sleep

    def _delay(self, response: httpx.Response, attempt: int) -> float:
        retry_after = response.headers.get("Retry-After")
        if response.status_code == 429 and retry_after:
            try:
                return min(float(retry_after), MAX_RETRY_AFTER_SECONDS)
            except ValueError:
                pass
        return self.backoff * (2 ** attempt)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            response = await self._transport.handle_async_request(request)
            if response.status_code not in RETRY_STATUSES or attempt >= self.retries:
                return response

            delay = self._delay(response, attempt)
            await response.aclose()
            attempt += 1
            logger.warning(
                f"Spotify answered {response.status_code} to {request.method} {request.url.path}, "
                f"retry {attempt}/{self.retries} in {delay:.1f}s"
            )
            await self._sleep(delay)

    async def aclose(self) -> None:
        await self._transport.aclose()


def create_spotify_client(
    transport: Optional[httpx.AsyncBaseTransport] = None,
    backoff: float = RETRY_BACKOFF_SECONDS,
) -> httpx.AsyncClient:
    """
    Shared AsyncClient for the backend. Failed connections are retried by the
    httpx transport, 429/5xx answers by SpotifyRetryTransport, 3 times each.
    Callers never retry on top of it.
    """
    if transport is None:
        transport = httpx.AsyncHTTPTransport(retries=TRANSPORT_RETRIES)
    return httpx.AsyncClient(
        transport=SpotifyRetryTransport(transport, backoff=backoff),
        timeout=TIMEOUT_SECONDS,
    )
