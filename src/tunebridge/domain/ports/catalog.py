"""Ports for the external catalogs consumed by the reconciliation engine.

Every method may raise :class:`~tunebridge.domain.errors.CatalogRateLimitedError`,
:class:`~tunebridge.domain.errors.CatalogUnauthorizedError` or
:class:`~tunebridge.domain.errors.TransientCatalogError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from tunebridge.domain.reconciliation.types import CatalogTrack, SourcePlaylist


@dataclass(frozen=True, slots=True)
class PlaylistWriteResult:
    """Playlist created in the target catalog.

    ``success`` is false when the playlist could not be created or when any
    insert batch was rejected.
    """

    playlist_id: str | None
    success: bool


@runtime_checkable
class CrossRefCodeResolver(Protocol):
    """Find the cross-reference code (ISRC) of a track by title and artist."""

    async def resolve_cross_ref_code(self, title: str, artist: str) -> str | None: ...


@runtime_checkable
class CatalogLookup(Protocol):
    """Exact lookup of catalog tracks by cross-reference code.

    At most ``EXACT_LOOKUP_BATCH_SIZE`` codes may be passed per call. Keys
    of the returned mapping are the codes as reported by the catalog.
    """

    async def lookup_by_codes(
        self, codes: Sequence[str], region: str
    ) -> Mapping[str, CatalogTrack]: ...


@runtime_checkable
class CatalogSearch(Protocol):
    """Free-text search over the target catalog."""

    async def search_catalog(
        self, query: str, region: str, limit: int
    ) -> Sequence[CatalogTrack]: ...


@runtime_checkable
class PlaylistWriter(Protocol):
    """Create a playlist in the target catalog and fill it in order."""

    async def write_playlist(self, name: str, catalog_ids: Sequence[str]) -> PlaylistWriteResult: ...


@runtime_checkable
class TargetCatalog(CatalogLookup, CatalogSearch, PlaylistWriter, Protocol):
    """Everything a transfer needs from the target catalog."""


@runtime_checkable
class SourcePlaylistFetcher(Protocol):
    """Fetch a playlist from the source catalog."""

    def fetch_playlist(self, playlist_id: str) -> SourcePlaylist: ...


__all__ = [
    "CatalogLookup",
    "CatalogSearch",
    "CrossRefCodeResolver",
    "PlaylistWriteResult",
    "PlaylistWriter",
    "SourcePlaylistFetcher",
    "TargetCatalog",
]
