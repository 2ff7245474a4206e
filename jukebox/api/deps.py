# jukebox/api/deps.py
from functools import lru_cache
from fastapi import Depends
from jukebox.config.settings import SpotifyConfig
from jukebox.services.firestore_client import get_async_db
from jukebox.services.ingestion_service import IngestionOrchestrator
from jukebox.services.playlist_fetcher import PlaylistFetcher
from jukebox.services.spotify_http import create_spotify_client
from jukebox.services.spotify_token_service import TokenBroker
from jukebox.services.token_store import TokenStore
from jukebox.services.track_ingestor import TrackIngestor


def get_firestore():
    return get_async_db()


@lru_cache
def get_spotify_config() -> SpotifyConfig:
    return SpotifyConfig.from_env()


async def get_http_client():
    async with create_spotify_client() as client:
        yield client


def get_token_store(db=Depends(get_firestore)) -> TokenStore:
    return TokenStore(db)


def get_token_broker(
    config: SpotifyConfig = Depends(get_spotify_config),
    client=Depends(get_http_client),
    token_store: TokenStore = Depends(get_token_store),
) -> TokenBroker:
    # raises ConfigurationError before any call to Spotify
    return TokenBroker(config, client, token_store)


def get_track_ingestor(db=Depends(get_firestore)) -> TrackIngestor:
    return TrackIngestor(db)


def get_orchestrator(
    broker: TokenBroker = Depends(get_token_broker),
    client=Depends(get_http_client),
    ingestor: TrackIngestor = Depends(get_track_ingestor),
) -> IngestionOrchestrator:
    return IngestionOrchestrator(broker, PlaylistFetcher(client), ingestor)
