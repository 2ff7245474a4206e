# jukebox/services/user_auth.py
import jwt
from fastapi import Depends, HTTPException, Header
from jukebox.api.deps import get_firestore
from jukebox.services.jwt_service import decode_jwt_token
from jukebox.services.user_service import get_user


async def get_current_user(authorization: str = Header(None), db=Depends(get_firestore)):
    """
    從 Authorization: Bearer <JWT token> 解析 user_id
    然後在 Firestore 讀取該 user 的資料
    """

    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid token format")

    token = authorization.split(" ")[1]

    try:
        payload = decode_jwt_token(token)
        user_id = payload.get("user_id")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    data = await get_user(db, user_id)
    if data is None:
        raise HTTPException(status_code=404, detail="User not found")

    data["user_id"] = user_id
    return data
