# jukebox/player/playback_client.py
"""
Device side of the jukebox: reads the tracks of the current time bucket from
Firestore and drives Spotify playback on the device registered for the user.

Credentials come from users/{uid}.tokens. They are refreshed through the
backend's token trigger (which also stores them) before any call made with a
token older than one hour.
"""
import logging
import random
from datetime import datetime, timezone
from typing import List, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from jukebox.config.settings import JUKEBOX_API_URL
from jukebox.models.token_model import TokenRecord, TokenType
from jukebox.models.track_models import Track
from jukebox.services.track_normalizer import bucket_zone, day_of_week

logger = logging.getLogger(__name__)

SPOTIFY_PLAYER_URL = "https://api.spotify.com/v1/me/player"
TOKEN_TTL_SECONDS = 3600
# Not documented by Spotify, play requests with more uris than this are rejected
URIS_LIMIT = 700


def session_with_retries(total=3):
    retry = Retry(
        total=total,
        connect=total,
        read=total,
        status=total,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=frozenset({"GET", "POST", "PUT"}),
        raise_on_status=False,
    )
    s = requests.Session()
    s.mount("https://", HTTPAdapter(max_retries=retry))
    s.mount("http://", HTTPAdapter(max_retries=retry))
    return s


def is_stale(token_record: TokenRecord, now: Optional[datetime] = None) -> bool:
    if token_record.added_at is None:
        return True
    now = now or datetime.now(timezone.utc)
    return (now - token_record.added_at).total_seconds() > TOKEN_TTL_SECONDS


def shuffle(uris: List[str], rng: Optional[random.Random] = None) -> List[str]:
    # https://en.wikipedia.org/wiki/Fisher-Yates_shuffle#The_modern_algorithm
    rng = rng or random.Random()
    uris = list(uris)
    for i in range(len(uris) - 1, 0, -1):
        j = rng.randrange(i + 1)
        uris[i], uris[j] = uris[j], uris[i]
    return uris


def cap_track_count(uris: List[str]) -> List[str]:
    if len(uris) > URIS_LIMIT:
        return uris[:URIS_LIMIT - 1]
    return uris


class PlaybackSessionClient:
    def __init__(self, user_id: str, db, api_url: str = JUKEBOX_API_URL, session=None, rng=None, tz=None):
        self.user_id = user_id
        self.db = db
        self.api_url = api_url.rstrip("/")
        self.session = session or session_with_retries()
        self.rng = rng or random.Random()
        self.tz = tz or bucket_zone()

    # --------------------------
    # Firestore
    # --------------------------
    def _user_ref(self):
        return self.db.collection("users").document(self.user_id)

    def get_user(self) -> dict:
        doc = self._user_ref().get()
        return doc.to_dict() if doc.exists else {}

    def save_device_id(self, device_id: str) -> None:
        self._user_ref().update({"deviceId": device_id})

    def select_now_tracks(self, now: Optional[datetime] = None) -> List[Track]:
        now = (now or datetime.now(timezone.utc)).astimezone(self.tz)
        docs = (
            self.db.collection("tracks")
            .where("addedAtDay", "==", day_of_week(now))
            .where("addedAtHour", "==", now.hour)
            .stream()
        )
        return [Track.model_validate(doc.to_dict()) for doc in docs]

    # --------------------------
    # Tokens
    # --------------------------
    def refresh_token(self, tokens: TokenRecord) -> str:
        """
        Blocks until the backend has refreshed and stored a new access token.
        Returns the new token, or the current one when the refresh failed.
        """
        logger.info("Refreshing Spotify token")
        try:
            r = self.session.post(
                f"{self.api_url}/spotify/token",
                json={
                    "tokenType": TokenType.REFRESH.value,
                    "refreshToken": tokens.refresh,
                    "userId": self.user_id,
                },
                timeout=30,
            )
            r.raise_for_status()
            token = r.json().get("token")
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Token refresh failed: {e}")
            return tokens.access

        return token or tokens.access

    def auth_headers(self, user: Optional[dict] = None) -> dict:
        user = user if user is not None else self.get_user()
        tokens = TokenRecord.model_validate(user.get("tokens") or {})
        access = tokens.access
        if is_stale(tokens):
            access = self.refresh_token(tokens)
        return {"Authorization": f"Bearer {access}"}

    # --------------------------
    # Playback
    # --------------------------
    def _put(self, url: str, headers: dict, params=None, body=None) -> bool:
        try:
            r = self.session.put(url, headers=headers, params=params, json=body, timeout=30)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"PUT {url} failed: {e}")
            return False
        return True

    def play(self, uris: Optional[List[str]] = None) -> bool:
        user = self.get_user()
        headers = self.auth_headers(user)
        params = None
        body = None
        if uris:
            uris = cap_track_count(uris)
            body = {"uris": uris}
            if user.get("deviceId"):
                params = {"device_id": user["deviceId"]}
        return self._put(f"{SPOTIFY_PLAYER_URL}/play", headers, params=params, body=body)

    def pause(self) -> bool:
        return self._put(f"{SPOTIFY_PLAYER_URL}/pause", self.auth_headers())

    def play_now(self, now: Optional[datetime] = None) -> bool:
        uris = [t.uri for t in self.select_now_tracks(now) if t.uri]
        if not uris:
            logger.warning("No tracks for this hour")
            return False
        return self.play(shuffle(uris, self.rng))
