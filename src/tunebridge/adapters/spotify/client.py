"""Spotipy-based reader for public Spotify playlists."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from tunebridge.config.spotify import get_spotify_config
from tunebridge.domain.reconciliation.types import SourcePlaylist

from .schema import PlaylistItemsPage, SpotifyPlaylist
from .translator import playlist_item_to_source_track

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tunebridge.config.spotify import SpotifyConfig
    from tunebridge.domain.reconciliation.types import SourceTrack

log = getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class SpotifyPlaylistFetcher:
    """Fetch playlists with the client-credentials flow (no user login)."""

    def __init__(
        self,
        *,
        config: SpotifyConfig | None = None,
        client: spotipy.Spotify | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if client is None:
            effective_config = config or get_spotify_config()
            auth_manager = SpotifyClientCredentials(
                client_id=effective_config.client_id,
                client_secret=effective_config.client_secret,
            )
            client = spotipy.Spotify(auth_manager=auth_manager)
        self._client = client
        self._page_size = page_size

    def fetch_playlist(self, playlist_id: str) -> SourcePlaylist:
        raw_playlist = self._client.playlist(playlist_id, fields="id,name")  # pyright: ignore[reportUnknownMemberType]
        playlist = SpotifyPlaylist.model_validate(raw_playlist)

        tracks: list[SourceTrack] = []
        skipped = 0
        for track in self._iter_tracks(playlist_id):
            if track is None:
                skipped += 1
                continue
            tracks.append(track)

        log.info(
            "Fetched Spotify playlist %r: %d track(s), %d skipped",
            playlist.name,
            len(tracks),
            skipped,
        )
        return SourcePlaylist(name=playlist.name, tracks=tuple(tracks))

    def _iter_tracks(self, playlist_id: str) -> Iterable[SourceTrack | None]:
        offset = 0
        while True:
            raw_payload = self._client.playlist_items(  # pyright: ignore[reportUnknownMemberType]
                playlist_id,
                limit=self._page_size,
                offset=offset,
                additional_types=("track",),
            )
            payload = PlaylistItemsPage.model_validate(raw_payload)
            items = payload.items
            if not items:
                return
            for item in items:
                yield playlist_item_to_source_track(item)
            if payload.next is None:
                return
            offset += len(items)
