"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import (
    CatalogLookup,
    CatalogSearch,
    CrossRefCodeResolver,
    PlaylistWriter,
    PlaylistWriteResult,
    SourcePlaylistFetcher,
    TargetCatalog,
)

__all__ = [
    "CatalogLookup",
    "CatalogSearch",
    "CrossRefCodeResolver",
    "PlaylistWriteResult",
    "PlaylistWriter",
    "SourcePlaylistFetcher",
    "TargetCatalog",
]
