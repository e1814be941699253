"""Combining several source playlists into one transfer."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from .orchestrator import dedupe_tracks

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .types import SourcePlaylist, SourceTrack

MERGED_PLAYLIST_PREFIX = "Merged Playlist"


def merge_playlists(playlists: Sequence[SourcePlaylist]) -> list[SourceTrack]:
    """Concatenate playlists in order, keeping the first copy of each track."""

    return dedupe_tracks(track for playlist in playlists for track in playlist.tracks)


def resolve_playlist_name(
    playlists: Sequence[SourcePlaylist],
    override: str | None = None,
    *,
    today: date | None = None,
) -> str:
    """Pick the name for the target playlist.

    A non-blank ``override`` wins, then the name of a single source playlist,
    then ``"Merged Playlist - YYYY-MM-DD"``.
    """

    if override and override.strip():
        return override
    if len(playlists) == 1 and playlists[0].name.strip():
        return playlists[0].name
    day = today or datetime.now(UTC).date()
    return f"{MERGED_PLAYLIST_PREFIX} - {day:%Y-%m-%d}"
