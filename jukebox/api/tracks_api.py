# jukebox/api/tracks_api.py
import logging
from fastapi import APIRouter, Depends
from jukebox.api.deps import get_orchestrator, get_track_ingestor
from jukebox.models.track_models import (
    IngestPlaylistRequest,
    ResultResponse,
    SaveTracksRequest,
)
from jukebox.services.ingestion_service import IngestionOrchestrator
from jukebox.services.track_ingestor import TrackIngestor

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post(
    "/playlist",
    summary="Ingest a Spotify playlist",
    description=(
        "Fetches the playlist's tracks (optionally only [start, end)), "
        "tags them with the channel and saves them in the tracks collection."
    ),
    response_model=ResultResponse,
)
async def ingest_playlist(
    payload: IngestPlaylistRequest,
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.run(
        payload.playlist_id,
        channel=payload.channel_tag,
        window=payload.window(),
    )
    return ResultResponse(result=result.message, status=result.outcome)


@router.post(
    "",
    summary="Save tracks",
    description="Saves already normalized tracks; empty entries are skipped.",
    response_model=ResultResponse,
)
async def save_tracks(
    payload: SaveTracksRequest,
    ingestor: TrackIngestor = Depends(get_track_ingestor),
):
    report = await ingestor.ingest(payload.tracks)
    message = f"{report.submitted} tracks saved"
    if report.batches_failed:
        message += f" ({report.batches_failed} batches failed)"
    return ResultResponse(result=message, status=report.outcome)
