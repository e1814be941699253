"""Translate Spotify playlist items into source tracks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tunebridge.domain.reconciliation.types import SourceTrack

if TYPE_CHECKING:
    from .schema import PlaylistItem


def playlist_item_to_source_track(item: PlaylistItem) -> SourceTrack | None:
    """Return ``None`` for items that cannot be matched (local files, episodes, removed tracks)."""

    track = item.track
    if track is None or track.is_local or not track.id or not track.name:
        return None
    if track.type not in {None, "track"}:
        return None
    isrc = track.external_ids.get("isrc")
    return SourceTrack(
        source_id=track.id,
        title=track.name,
        artist=track.artists[0].name if track.artists else "",
        duration_ms=max(track.duration_ms or 0, 0),
        cross_ref_code=isrc.strip() if isrc and isrc.strip() else None,
    )
