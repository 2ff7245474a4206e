# jukebox/services/track_normalizer.py
"""
Maps the playlist item payloads returned by Spotify onto the Track document.

Spotify is not consistent about what it sends back: removed or local tracks
come with ``track: null``, local files have no album images, podcast episodes
may have no artists, and ``added_at`` is null for very old playlists. Every
optional field has exactly one default here, so callers never look inside the
raw payload themselves.
"""
import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo
from jukebox.config.settings import TIME_BUCKET_TZ
from jukebox.models.track_models import Track

logger = logging.getLogger(__name__)


def bucket_zone() -> tzinfo:
    return ZoneInfo(TIME_BUCKET_TZ)


def _parse_iso_ts(ts: str) -> datetime:
    if ts.endswith("Z"):
        ts = ts.replace("Z", "+00:00")
    return datetime.fromisoformat(ts)


def day_of_week(moment: datetime) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return moment.isoweekday() % 7


def time_bucket(added_at: str, tz: Optional[tzinfo] = None):
    """(day, hour) of an ISO timestamp, or (None, None) when it can't be read."""
    if not added_at:
        return None, None
    try:
        moment = _parse_iso_ts(added_at)
    except ValueError:
        logger.warning(f"Unreadable added_at: {added_at!r}")
        return None, None

    if moment.tzinfo is None:
        # Spotify timestamps are UTC; never fall back to the host's local time
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(tz or bucket_zone())
    return day_of_week(moment), moment.hour


def _first(values: Any) -> dict:
    if isinstance(values, list) and values and isinstance(values[0], dict):
        return values[0]
    return {}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _int_or_none(value: Any) -> Optional[int]:
    # bool is an int subclass
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def normalize_playlist_item(item: dict, channel: Optional[str] = None, tz: Optional[tzinfo] = None) -> Track:
    track = item.get("track") or {}
    album = track.get("album") or {}
    added_at = _text(item.get("added_at"))
    day, hour = time_bucket(added_at, tz)

    return Track(
        added_at=added_at,
        added_at_day=day,
        added_at_hour=hour,
        name=_text(track.get("name")),
        uri=_text(track.get("uri")),
        spotify_id=_text(track.get("id")),
        duration_ms=_int_or_none(track.get("duration_ms")),
        artist=_text(_first(track.get("artists")).get("name")),
        album=_text(album.get("name")),
        image_url=_text(_first(album.get("images")).get("url")),
        channel=channel,
    )


def normalize_track(
    entry: Union[Track, dict],
    channel: Optional[str] = None,
    tz: Optional[tzinfo] = None,
) -> Track:
    """
    Accepts a raw playlist item, an already normalized Track document or a
    Track, and always returns a Track. Normalizing a Track again returns an
    equal Track.
    """
    if isinstance(entry, Track):
        return entry

    if "track" in entry:
        return normalize_playlist_item(entry, channel=channel, tz=tz)

    return Track.model_validate(entry)
