# jukebox/models/token_model.py
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from jukebox.models.track_models import Outcome


class TokenType(str, Enum):
    # "access": first login, exchanges an authorization code (gets a refresh token too)
    # "refresh": exchanges a stored refresh token for a new access token
    ACCESS = "access"
    REFRESH = "refresh"


# users/{uid}.tokens
class TokenRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access: str = ""
    refresh: Optional[str] = None
    added_at: Optional[datetime] = Field(None, alias="addedAt")


class TokenPair(BaseModel):
    access: str = ""
    refresh: str = ""
    outcome: Outcome = Outcome.SUCCESS


class GetTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token_type: TokenType = Field(alias="tokenType")
    user_id: str = Field(alias="userId")
    code: Optional[str] = None
    refresh_token: Optional[str] = Field(None, alias="refreshToken")


class GetTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    refresh_token: str = Field("", alias="refreshToken")


class SaveTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = None
    token_type: TokenType = Field(alias="tokenType")
    user_id: str = Field(alias="userId")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")
