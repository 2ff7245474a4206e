# jukebox/services/firestore_client.py
import base64
import json
from google.cloud import firestore
from google.oauth2 import service_account
from jukebox.config.settings import GOOGLE_CLOUD_CREDENTIALS

_cached_client = None
_cached_async_client = None


def _load_credentials():
    # 1. Load base64 string from environment
    raw = GOOGLE_CLOUD_CREDENTIALS
    if not raw:
        raise Exception("GOOGLE_CLOUD_CREDENTIALS is missing in environment variables")

    # 2. Decode base64 → dict
    try:
        creds_json = json.loads(base64.b64decode(raw))
    except Exception as e:
        raise Exception(f"Failed to decode GOOGLE_CLOUD_CREDENTIALS: {e}")

    # 3. Build service account credentials
    try:
        return service_account.Credentials.from_service_account_info(creds_json)
    except Exception as e:
        raise Exception(f"Failed to create service account credentials: {e}")


def get_db():
    """
    Lazy-load the synchronous Firestore client (device side) using service
    account credentials stored in GOOGLE_CLOUD_CREDENTIALS.
    """

    global _cached_client

    if _cached_client is not None:
        return _cached_client

    creds = _load_credentials()
    try:
        _cached_client = firestore.Client(credentials=creds, project=creds.project_id)
    except Exception as e:
        raise Exception(f"Failed to create Firestore client: {e}")

    return _cached_client


def get_async_db():
    """
    Same as get_db, but returns the asyncio client used by the backend
    triggers, so every store read/write is an await point.
    """

    global _cached_async_client

    if _cached_async_client is not None:
        return _cached_async_client

    creds = _load_credentials()
    try:
        _cached_async_client = firestore.AsyncClient(credentials=creds, project=creds.project_id)
    except Exception as e:
        raise Exception(f"Failed to create Firestore async client: {e}")

    return _cached_async_client
