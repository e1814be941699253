"""Apple Music API response schemas (only the fields the adapter reads)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AppleMusicBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SongAttributes(AppleMusicBaseModel):
    name: str = ""
    artist_name: str = Field(default="", alias="artistName")
    duration_in_millis: int = Field(default=0, alias="durationInMillis")
    isrc: str | None = None


class Song(AppleMusicBaseModel):
    id: str
    type: str | None = None
    attributes: SongAttributes | None = None


class SongsResponse(AppleMusicBaseModel):
    data: list[Song] = Field(default_factory=list)


class SearchResults(AppleMusicBaseModel):
    songs: SongsResponse | None = None


class SearchResponse(AppleMusicBaseModel):
    results: SearchResults = Field(default_factory=SearchResults)


class LibraryPlaylist(AppleMusicBaseModel):
    id: str


class LibraryPlaylistsResponse(AppleMusicBaseModel):
    data: list[LibraryPlaylist] = Field(default_factory=list)
