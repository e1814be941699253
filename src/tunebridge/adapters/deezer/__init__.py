"""Deezer adapter: ISRC resolution by title and artist."""

from __future__ import annotations

from .client import DeezerCodeResolver
from .schema import DeezerSearchResponse, DeezerTrack

__all__ = ["DeezerCodeResolver", "DeezerSearchResponse", "DeezerTrack"]
