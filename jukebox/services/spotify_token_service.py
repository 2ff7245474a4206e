# jukebox/services/spotify_token_service.py
import base64
import logging
from typing import Dict, Optional
import httpx
from google.api_core.exceptions import GoogleAPIError
from jukebox.config.settings import SpotifyConfig
from jukebox.models.token_model import TokenPair, TokenType
from jukebox.models.track_models import Outcome
from jukebox.services.spotify_http import SPOTIFY_TOKEN_URL
from jukebox.services.token_store import TokenStore

logger = logging.getLogger(__name__)


def bearer_headers(access_token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/json",
        "Content-Type": "application/json",
    }


class TokenBroker:
    """
    Talks to the Spotify accounts service. Failures never raise: the caller
    gets empty token strings and a `failure` outcome.
    """

    def __init__(self, config: SpotifyConfig, client: httpx.AsyncClient, token_store: Optional[TokenStore] = None):
        self.config = config.require()
        self.client = client
        self.token_store = token_store

    def _basic_auth(self) -> str:
        secret = f"{self.config.client_id}:{self.config.client_secret}".encode()
        return "Basic " + base64.b64encode(secret).decode()

    async def _post_token(self, payload: Dict[str, str]) -> Optional[dict]:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": self._basic_auth(),
        }
        try:
            r = await self.client.post(SPOTIFY_TOKEN_URL, data=payload, headers=headers)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Spotify token request ({payload['grant_type']}) failed: {e}")
            return None

        if not data.get("access_token"):
            logger.error(f"Spotify token response has no access_token: {data}")
            return None
        return data

    async def exchange_authorization_code(self, code: str, redirect_uri: Optional[str] = None) -> TokenPair:
        data = await self._post_token({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri or self.config.redirect_uri,
        })
        if data is None:
            return TokenPair(outcome=Outcome.FAILURE)
        return TokenPair(access=data["access_token"], refresh=data.get("refresh_token") or "")

    async def refresh(self, refresh_token: str) -> TokenPair:
        data = await self._post_token({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        if data is None:
            return TokenPair(outcome=Outcome.FAILURE)
        return TokenPair(access=data["access_token"])

    async def server_token(self) -> TokenPair:
        """
        Access token for server-triggered calls, obtained with the refresh
        token from the configuration rather than a device user's.
        """
        return await self.refresh(self.config.refresh_token)

    async def get_auth_headers(self) -> Dict[str, str]:
        """
        Bearer headers for the server token. On failure the bearer is empty;
        callers that must tell the two apart use server_token() and
        bearer_headers() instead, as the ingestion run does.
        """
        pair = await self.server_token()
        return bearer_headers(pair.access)

    async def _stored_refresh_token(self, user_id: str) -> str:
        if self.token_store is None:
            return ""
        try:
            record = await self.token_store.get_tokens(user_id)
        except GoogleAPIError as e:
            logger.error(f"Reading tokens of {user_id} failed: {e}")
            return ""
        return (record.refresh if record else None) or ""

    async def request_token(
        self,
        user_id: str,
        token_type: TokenType,
        code: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> TokenPair:
        """
        One entry point for both flows:
        - access: authorization code → access + refresh token
        - refresh: refresh token → access token
        The result is merge-written to users/{user_id}.tokens. A refresh
        without a refresh token uses the one stored for the user.
        """
        if token_type == TokenType.ACCESS:
            pair = await self.exchange_authorization_code(code or "")
        else:
            if not refresh_token:
                refresh_token = await self._stored_refresh_token(user_id)
            pair = await self.refresh(refresh_token)

        if pair.outcome == Outcome.FAILURE or self.token_store is None:
            return pair

        saved = await self.token_store.save_token(
            user_id,
            pair.access,
            token_type,
            refresh_token=pair.refresh,
        )
        if not saved:
            return pair.model_copy(update={"outcome": Outcome.PARTIAL})
        return pair
