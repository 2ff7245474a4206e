import os
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import BaseModel

def load_env():
    if os.getenv("ENVIRONMENT") == "production":
        return

    base_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    env_path = os.path.join(base_dir, ".env")

    if os.path.exists(env_path):
        load_dotenv(env_path)

# Load env now
load_env()

# Spotify
CLIENT_ID = os.getenv("CLIENT_ID")
CLIENT_SECRET = os.getenv("CLIENT_SECRET")
REDIRECT_URI = os.getenv("REDIRECT_URI")
SPOTIFY_REFRESH_TOKEN = os.getenv("SPOTIFY_REFRESH_TOKEN")

# JWT
JWT_SECRET = os.getenv("JWT_SECRET", "PLEASE_SET_SECRET")

# Time bucket (ingestion and playback must agree on it)
TIME_BUCKET_TZ = os.getenv("TIME_BUCKET_TZ", "UTC")

# Device -> backend
JUKEBOX_API_URL = os.getenv("JUKEBOX_API_URL", "http://localhost:8000")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# GCP Credentials (base64)
GOOGLE_CLOUD_CREDENTIALS = os.getenv("GOOGLE_CLOUD_CREDENTIALS")


class ConfigurationError(RuntimeError):
    """Raised when a required Spotify setting is absent."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing Spotify configuration: {', '.join(missing)}")


class SpotifyConfig(BaseModel):
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    redirect_uri: Optional[str] = None

    @classmethod
    def from_env(cls) -> "SpotifyConfig":
        return cls(
            client_id=CLIENT_ID,
            client_secret=CLIENT_SECRET,
            refresh_token=SPOTIFY_REFRESH_TOKEN,
            redirect_uri=REDIRECT_URI,
        )

    def require(self) -> "SpotifyConfig":
        missing = [name for name, value in self.model_dump().items() if not value]
        if missing:
            raise ConfigurationError(missing)
        return self
