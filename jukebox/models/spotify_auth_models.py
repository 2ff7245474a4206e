from pydantic import BaseModel

# 登入（redirect）回傳的資訊
class AuthLoginResponse(BaseModel):
    authorization_url: str
