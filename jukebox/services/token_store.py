# jukebox/services/token_store.py
import logging
from typing import Optional
from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore
from jukebox.models.token_model import TokenRecord, TokenType

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class TokenStore:
    """
    Spotify credentials live in users/{uid}.tokens and are only ever
    merge-written: a refresh cycle updates `access` and `addedAt` and leaves
    the stored `refresh` alone.
    """

    def __init__(self, db):
        self.db = db

    def _user_ref(self, user_id: str):
        return self.db.collection(USERS_COLLECTION).document(user_id)

    @staticmethod
    def build_tokens(token: str, token_type: TokenType, refresh_token: Optional[str] = None) -> dict:
        tokens = {
            "access": token,
            "addedAt": firestore.SERVER_TIMESTAMP,
        }
        # 只有第一次用 code 換 token 時才會拿到 refresh token
        if token_type == TokenType.ACCESS and refresh_token:
            tokens["refresh"] = refresh_token
        return tokens

    async def save_token(
        self,
        user_id: str,
        token: Optional[str],
        token_type: TokenType,
        refresh_token: Optional[str] = None,
    ) -> bool:
        """
        Returns False without touching the store when `token` is empty,
        or when the write itself failed.
        """
        if not token:
            return False

        tokens = self.build_tokens(token, token_type, refresh_token)
        try:
            await self._user_ref(user_id).set({"tokens": tokens}, merge=True)
        except GoogleAPIError as e:
            logger.error(f"Saving tokens for {user_id} failed: {e}")
            return False

        logger.info(f"Saved {token_type.value} token for {user_id}")
        return True

    async def get_tokens(self, user_id: str) -> Optional[TokenRecord]:
        doc = await self._user_ref(user_id).get()
        if not doc.exists:
            return None

        tokens = (doc.to_dict() or {}).get("tokens")
        if not tokens:
            return None
        return TokenRecord.model_validate(tokens)
