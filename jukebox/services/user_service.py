# jukebox/services/user_service.py
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from google.api_core.exceptions import NotFound
from jukebox.services.jwt_service import create_jwt_token

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
AUTH_COLLECTION = "user_auth"


async def create_anonymous_user(db):
    """
    在 users collection 建立匿名使用者（共用裝置只登入一次）
    回傳 (uid, custom token)
    """
    uid = str(uuid.uuid4())

    await asyncio.gather(
        db.collection(USERS_COLLECTION).document(uid).set({"uid": uid}),
        db.collection(AUTH_COLLECTION).document(uid).set({
            "uid": uid,
            "anonymous": True,
            "created_at": datetime.now(timezone.utc),
        }),
    )
    logger.info(f"Created anonymous user {uid}")
    return uid, create_jwt_token(uid, {"anonymous": True})


async def _upsert_auth_record(db, uid: str, profile: dict):
    ref = db.collection(AUTH_COLLECTION).document(uid)
    try:
        await ref.update(profile)
    except NotFound:
        # 帳號不存在 → 建立新帳號
        logger.info(f"No auth record for {uid}, creating it")
        await ref.create({"uid": uid, "created_at": datetime.now(timezone.utc), **profile})


async def provision_account(db, uid: str, display_name: str, email: str) -> str:
    """
    Creates or updates the user's profile and auth record, then returns a
    custom token for that uid.
    """
    profile = {
        "displayName": display_name,
        "email": email,
        "emailVerified": True,
    }

    user_task = db.collection(USERS_COLLECTION).document(uid).set({"uid": uid, **profile}, merge=True)
    auth_task = _upsert_auth_record(db, uid, {**profile, "anonymous": False})
    await asyncio.gather(user_task, auth_task)

    return create_jwt_token(uid, {"anonymous": False})


async def get_user(db, uid: str):
    doc = await db.collection(USERS_COLLECTION).document(uid).get()
    return doc.to_dict() if doc.exists else None
