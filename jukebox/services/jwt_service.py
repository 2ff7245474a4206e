# jukebox/services/jwt_service.py
# Custom auth tokens handed to the device after anonymous login / account creation.
import time
from typing import Optional
import jwt
from jukebox.config.settings import JWT_SECRET

JWT_ALGORITHM = "HS256"
EXPIRE_SECONDS = 3600 * 24 * 7       # 7 天


def create_jwt_token(user_id: str, claims: Optional[dict] = None) -> str:
    now = int(time.time())
    payload = {
        **(claims or {}),
        "user_id": user_id,
        "iat": now,
        "exp": now + EXPIRE_SECONDS,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_jwt_token(token: str) -> dict:
    """Raises jwt.PyJWTError when the token is invalid or expired."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
