"""Translate Apple Music payloads into catalog tracks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tunebridge.domain.reconciliation.types import CatalogTrack

if TYPE_CHECKING:
    from .schema import Song


def song_to_catalog_track(song: Song) -> CatalogTrack | None:
    if song.attributes is None:
        return None
    attributes = song.attributes
    return CatalogTrack(
        catalog_id=song.id,
        title=attributes.name,
        artist=attributes.artist_name,
        duration_ms=max(attributes.duration_in_millis, 0),
        cross_ref_code=attributes.isrc or None,
    )
