# jukebox/api/auth_api.py
from fastapi import APIRouter, Depends
from jukebox.api.deps import get_firestore
from jukebox.models.auth_models import AuthTokenResponse, ProvisionAccountRequest
from jukebox.services.user_auth import get_current_user
from jukebox.services.user_service import create_anonymous_user, provision_account

router = APIRouter()


# === Anonymous login (shared device) ===
@router.post("/anonymous", response_model=AuthTokenResponse)
async def anonymous_login(db=Depends(get_firestore)):
    uid, token = await create_anonymous_user(db)
    return {"status": "ok", "uid": uid, "token": token}


# === Create or update an account ===
@router.post("/account", response_model=AuthTokenResponse)
async def account(payload: ProvisionAccountRequest, db=Depends(get_firestore)):
    token = await provision_account(db, payload.uid, payload.display_name, payload.email)
    return {"status": "ok", "uid": payload.uid, "token": token}


# === Current user ===
@router.get("/me")
async def me(user=Depends(get_current_user)):
    # tokens 不回傳給前端
    user.pop("tokens", None)
    return user
