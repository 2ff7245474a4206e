# jukebox/services/playlist_fetcher.py
import asyncio
import logging
from datetime import tzinfo
from typing import Dict, List, Optional, Tuple
import httpx
from jukebox.models.track_models import FetchResult, Outcome, PlaylistWindow, Track
from jukebox.services.spotify_http import SPOTIFY_API_BASE
from jukebox.services.track_normalizer import normalize_playlist_item

logger = logging.getLogger(__name__)

PAGE_SIZE = 100    # Spotify 每次最多回傳 100 首


def effective_total(playlist_total: int, window: Optional[PlaylistWindow] = None) -> int:
    """
    How many tracks are worth requesting. With a window this is one less
    than its size (see test_playlist_fetcher for the pinned behaviour).
    """
    if window is None:
        return playlist_total
    return min(playlist_total, window.size) - 1


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    if total <= 0:
        return 0
    pages = total // page_size
    if total % page_size:
        pages += 1
    return pages


def page_offsets(total: int, page_size: int = PAGE_SIZE) -> List[int]:
    return [i * page_size for i in range(page_count(total, page_size))]


class PlaylistFetcher:
    def __init__(self, client: httpx.AsyncClient, tz: Optional[tzinfo] = None):
        self.client = client
        self.tz = tz

    async def _get(self, path: str, headers: Dict[str, str], params: Optional[Dict] = None) -> dict:
        r = await self.client.get(f"{SPOTIFY_API_BASE}/{path}", headers=headers, params=params)
        r.raise_for_status()
        return r.json()

    async def get_total(self, playlist_id: str, headers: Dict[str, str]) -> Optional[int]:
        try:
            data = await self._get(f"playlists/{playlist_id}", headers, params={"fields": "tracks.total"})
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Playlist {playlist_id} lookup failed: {e}")
            return None

        total = (data.get("tracks") or {}).get("total")
        if not isinstance(total, int):
            logger.error(f"Playlist {playlist_id} has no track total: {data}")
            return None
        return total

    async def _fetch_page(
        self,
        playlist_id: str,
        headers: Dict[str, str],
        offset: int,
        channel: Optional[str],
    ) -> Tuple[int, Optional[List[Track]]]:
        try:
            data = await self._get(
                f"playlists/{playlist_id}/tracks",
                headers,
                params={"limit": PAGE_SIZE, "offset": offset},
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Page at offset {offset} of {playlist_id} failed: {e}")
            return offset, None

        tracks = [
            normalize_playlist_item(item, channel=channel, tz=self.tz)
            for item in data.get("items") or []
            if item
        ]
        logger.info(f"Loaded page at offset {offset} ({len(tracks)} tracks)")
        return offset, tracks

    async def fetch(
        self,
        playlist_id: str,
        auth_headers: Dict[str, str],
        window: Optional[PlaylistWindow] = None,
        channel: Optional[str] = None,
    ) -> FetchResult:
        total = await self.get_total(playlist_id, auth_headers)
        if total is None:
            return FetchResult(outcome=Outcome.FAILURE)

        offsets = page_offsets(effective_total(total, window))
        pages = await asyncio.gather(*(
            self._fetch_page(playlist_id, auth_headers, offset, channel)
            for offset in offsets
        ))

        # pages can settle in any order, slicing needs them back in playlist order
        tracks: List[Track] = []
        failed = 0
        for _, page in sorted(pages, key=lambda p: p[0]):
            if page is None:
                failed += 1
                continue
            tracks.extend(page)

        if window is not None:
            tracks = tracks[window.start:window.end]

        logger.info(f"Playlist {playlist_id}: {len(tracks)} tracks from {len(offsets)} pages ({failed} failed)")
        return FetchResult(
            tracks=tracks,
            total=total,
            pages_requested=len(offsets),
            pages_failed=failed,
            outcome=Outcome.from_counts(failed, len(offsets)),
        )
