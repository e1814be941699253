"""Deezer search response schemas."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field

DEEZER_QUOTA_ERROR_CODE: Final[int] = 4


class DeezerBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class DeezerArtist(DeezerBaseModel):
    id: int | None = None
    name: str = ""


class DeezerTrack(DeezerBaseModel):
    id: int
    title: str = ""
    isrc: str | None = None
    duration: int = 0  # seconds
    artist: DeezerArtist | None = None


class DeezerError(DeezerBaseModel):
    type: str | None = None
    message: str | None = None
    code: int | None = None


class DeezerSearchResponse(DeezerBaseModel):
    data: list[DeezerTrack] = Field(default_factory=list)
    total: int | None = None
    error: DeezerError | None = None

    @property
    def quota_exceeded(self) -> bool:
        return self.error is not None and self.error.code == DEEZER_QUOTA_ERROR_CODE
