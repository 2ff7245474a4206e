# jukebox/models/auth_models.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ProvisionAccountRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    display_name: str = Field(alias="displayName")
    email: EmailStr


# 匿名登入 / 建立帳號 都回傳 uid + 自訂 token
class AuthTokenResponse(BaseModel):
    status: str
    uid: str
    token: str
