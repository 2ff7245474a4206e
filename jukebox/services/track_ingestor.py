# jukebox/services/track_ingestor.py
import logging
from typing import Iterable, List, Optional, Union
from google.api_core.exceptions import GoogleAPIError
from pydantic import ValidationError
from jukebox.models.track_models import IngestReport, Outcome, Track
from jukebox.services.track_normalizer import normalize_track

logger = logging.getLogger(__name__)

TRACKS_COLLECTION = "tracks"
FIRESTORE_BATCH_LIMIT = 500    # Firestore 單一 batch 最多 500 筆寫入


def batch_count(length: int, limit: int = FIRESTORE_BATCH_LIMIT) -> int:
    """Chunks visited for `length` tracks; the last one is empty when length divides evenly."""
    return length // limit + 1


def _persistable(entry: Union[Track, dict, None]) -> Optional[Track]:
    if not entry:
        return None
    try:
        track = normalize_track(entry)
    except ValidationError as e:
        logger.warning(f"Dropping malformed track: {e}")
        return None
    return track if track.uri else None


class TrackIngestor:
    def __init__(self, db, limit: int = FIRESTORE_BATCH_LIMIT):
        self.db = db
        self.limit = limit

    async def ingest(self, tracks: Iterable[Union[Track, dict, None]]) -> IngestReport:
        tracks = list(tracks)
        logger.info(f"Total tracks saving: {len(tracks)}")

        batches = batch_count(len(tracks), self.limit)
        written = 0
        attempted = 0
        failed = 0
        collection = self.db.collection(TRACKS_COLLECTION)

        for i in range(batches):
            chunk: List[Track] = [
                t for t in map(_persistable, tracks[self.limit * i:self.limit * (i + 1)]) if t
            ]
            if not chunk:
                logger.debug(f"Batch {i} is empty, nothing to commit")
                continue

            attempted += 1
            batch = self.db.batch()
            for track in chunk:
                batch.set(collection.document(), track.to_document(), merge=True)

            # one batch in flight at a time
            try:
                await batch.commit()
            except GoogleAPIError as e:
                failed += 1
                logger.error(f"Batch {i} failed: {e}")
                continue

            written += len(chunk)
            logger.info(f"Batch {i} saved ({len(chunk)} tracks)")

        return IngestReport(
            submitted=len(tracks),
            written=written,
            batches=batches,
            batches_failed=failed,
            outcome=Outcome.from_counts(failed, attempted),
        )
