# jukebox/models/track_models.py
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Outcome(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"

    @classmethod
    def from_counts(cls, failed: int, total: int) -> "Outcome":
        if failed == 0:
            return cls.SUCCESS
        if failed < total:
            return cls.PARTIAL
        return cls.FAILURE


# Firestore document of the `tracks` collection
class Track(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    added_at: str = Field("", alias="addedAt")
    added_at_day: Optional[int] = Field(None, alias="addedAtDay")    # 0 = Sunday
    added_at_hour: Optional[int] = Field(None, alias="addedAtHour")
    name: str = ""
    uri: str = ""
    spotify_id: str = Field("", alias="spotifyId")
    duration_ms: Optional[int] = Field(None, alias="durationMs")
    artist: str = ""
    album: str = ""
    image_url: str = Field("", alias="imageUrl")
    channel: Optional[str] = None

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class PlaylistWindow(BaseModel):
    start: int = Field(ge=0)
    end: int

    @model_validator(mode="after")
    def check_bounds(self):
        if self.end <= self.start:
            raise ValueError("window end must be greater than start")
        return self

    @property
    def size(self) -> int:
        return self.end - self.start


class FetchResult(BaseModel):
    tracks: List[Track] = []
    total: int = 0
    pages_requested: int = 0
    pages_failed: int = 0
    outcome: Outcome = Outcome.SUCCESS


class IngestReport(BaseModel):
    submitted: int = 0
    written: int = 0
    batches: int = 0
    batches_failed: int = 0
    outcome: Outcome = Outcome.SUCCESS


# ----- Trigger bodies -----

class IngestPlaylistRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    playlist_id: str = Field(alias="playlistId")
    start: Optional[int] = None
    end: Optional[int] = None
    channel_tag: Optional[str] = Field(None, alias="channelTag")

    @model_validator(mode="after")
    def check_window(self):
        if self.start is not None and self.end is not None:
            if self.start < 0 or self.end < self.start:
                raise ValueError("start/end must satisfy 0 <= start <= end")
        return self

    def window(self) -> Optional[PlaylistWindow]:
        # both bounds are needed, and an empty range means "whole playlist"
        if self.start is None or self.end is None or self.start == self.end:
            return None
        return PlaylistWindow(start=self.start, end=self.end)


class SaveTracksRequest(BaseModel):
    tracks: List[Optional[dict]] = []


class ResultResponse(BaseModel):
    result: str
    status: Outcome = Outcome.SUCCESS
