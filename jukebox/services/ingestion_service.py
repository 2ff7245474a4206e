# jukebox/services/ingestion_service.py
import logging
from typing import Optional
from pydantic import BaseModel
from jukebox.models.track_models import FetchResult, IngestReport, Outcome, PlaylistWindow
from jukebox.services.playlist_fetcher import PlaylistFetcher
from jukebox.services.spotify_token_service import TokenBroker, bearer_headers
from jukebox.services.track_ingestor import TrackIngestor

logger = logging.getLogger(__name__)


class IngestionResult(BaseModel):
    fetch: FetchResult
    ingest: IngestReport
    outcome: Outcome
    message: str


def describe(fetch: FetchResult, ingest: IngestReport) -> str:
    message = f"{ingest.submitted} tracks saved"
    notes = []
    if fetch.pages_failed:
        notes.append(f"{fetch.pages_failed} of {fetch.pages_requested} pages failed")
    if ingest.batches_failed:
        notes.append(f"{ingest.batches_failed} batches failed")
    if notes:
        message += f" ({', '.join(notes)})"
    return message


def combine(*outcomes: Outcome) -> Outcome:
    if all(o == Outcome.SUCCESS for o in outcomes):
        return Outcome.SUCCESS
    if all(o == Outcome.FAILURE for o in outcomes):
        return Outcome.FAILURE
    return Outcome.PARTIAL


class IngestionOrchestrator:
    """authorize → fetch → ingest, for one playlist."""

    def __init__(self, broker: TokenBroker, fetcher: PlaylistFetcher, ingestor: TrackIngestor):
        self.broker = broker
        self.fetcher = fetcher
        self.ingestor = ingestor

    async def run(
        self,
        playlist_id: str,
        channel: Optional[str] = None,
        window: Optional[PlaylistWindow] = None,
    ) -> IngestionResult:
        token = await self.broker.server_token()
        if token.outcome == Outcome.FAILURE:
            logger.error(f"No Spotify access token, skipping playlist {playlist_id}")
            return IngestionResult(
                fetch=FetchResult(outcome=Outcome.FAILURE),
                ingest=IngestReport(),
                outcome=Outcome.FAILURE,
                message="0 tracks saved (Spotify authorization failed)",
            )

        headers = bearer_headers(token.access)
        fetched = await self.fetcher.fetch(playlist_id, headers, window=window, channel=channel)
        if fetched.outcome == Outcome.FAILURE:
            return IngestionResult(
                fetch=fetched,
                ingest=IngestReport(),
                outcome=Outcome.FAILURE,
                message=f"0 tracks saved (playlist {playlist_id} could not be read)",
            )

        report = await self.ingestor.ingest(fetched.tracks)
        outcome = combine(fetched.outcome, report.outcome)
        message = describe(fetched, report)
        logger.info(f"Playlist {playlist_id}: {message}")
        return IngestionResult(fetch=fetched, ingest=report, outcome=outcome, message=message)
