"""Minimal Pydantic models for the Spotify playlist endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SpotifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SpotifyArtist(SpotifyBaseModel):
    id: str | None = None
    name: str


class PlaylistTrack(SpotifyBaseModel):
    # Local files carry no id; podcast episodes have type "episode".
    id: str | None = None
    name: str | None = None
    type: str | None = None
    is_local: bool = False
    duration_ms: int | None = None
    artists: list[SpotifyArtist] = Field(default_factory=list["SpotifyArtist"])
    external_ids: dict[str, str] = Field(default_factory=dict)


class PlaylistItem(SpotifyBaseModel):
    track: PlaylistTrack | None = None


class SpotifyPage(SpotifyBaseModel):
    href: str | None = None
    limit: int | None = None
    next: str | None = None
    offset: int | None = None
    previous: str | None = None
    total: int | None = None


class PlaylistItemsPage(SpotifyPage):
    items: list[PlaylistItem] = Field(default_factory=list["PlaylistItem"])


class SpotifyPlaylist(SpotifyBaseModel):
    id: str
    name: str = ""
