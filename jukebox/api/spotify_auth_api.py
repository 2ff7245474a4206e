# jukebox/api/spotify_auth_api.py
from typing import Optional
from urllib.parse import urlencode
from fastapi import APIRouter, Depends, Query
from jukebox.api.deps import get_spotify_config, get_token_broker, get_token_store
from jukebox.config.settings import SpotifyConfig
from jukebox.models.spotify_auth_models import AuthLoginResponse
from jukebox.models.token_model import (
    GetTokenRequest,
    GetTokenResponse,
    SaveTokenRequest,
    TokenType,
)
from jukebox.models.track_models import Outcome, ResultResponse
from jukebox.services.spotify_token_service import TokenBroker
from jukebox.services.token_store import TokenStore

router = APIRouter()

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
PLAYER_SCOPES = ["streaming", "user-read-email", "user-read-private"]


def build_authorize_url(client_id: str, redirect_uri: str, state: Optional[str] = None) -> str:
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": " ".join(PLAYER_SCOPES),
    }
    if state:
        params["state"] = state
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


@router.get(
    "/login",
    summary="Spotify Login: 建立 OAuth URL",
    description="裝置第一次登入時 redirect 到這個 URL，授權完成後會帶著 code 回到 redirect_uri。",
    response_model=AuthLoginResponse,
)
def login(
    state: Optional[str] = Query(None, description="原封不動帶回 redirect_uri"),
    config: SpotifyConfig = Depends(get_spotify_config),
):
    config.require()
    return {"authorization_url": build_authorize_url(config.client_id, config.redirect_uri, state)}


@router.post(
    "/token",
    summary="Get a Spotify token",
    description=(
        "tokenType=access: exchange an authorization code for access + refresh tokens. "
        "tokenType=refresh: exchange a refresh token for a new access token. "
        "Tokens are saved under users/{userId}.tokens."
    ),
    response_model=GetTokenResponse,
    response_model_by_alias=True,
)
async def get_spotify_token(
    payload: GetTokenRequest,
    broker: TokenBroker = Depends(get_token_broker),
):
    pair = await broker.request_token(
        payload.user_id,
        payload.token_type,
        code=payload.code,
        refresh_token=payload.refresh_token,
    )
    return GetTokenResponse(token=pair.access, refresh_token=pair.refresh)


@router.post(
    "/token/save",
    summary="Save a Spotify token",
    response_model=ResultResponse,
)
async def save_token(
    payload: SaveTokenRequest,
    token_store: TokenStore = Depends(get_token_store),
):
    if not payload.token:
        return ResultResponse(result="Empty token.", status=Outcome.FAILURE)

    saved = await token_store.save_token(
        payload.user_id,
        payload.token,
        payload.token_type,
        refresh_token=payload.refresh_token,
    )
    if not saved:
        return ResultResponse(result="Token could not be saved.", status=Outcome.FAILURE)

    kind = "Access" if payload.token_type == TokenType.ACCESS else "Refreshed access"
    return ResultResponse(result=f"{kind} token successfully added.")
