from __future__ import annotations

from typing import Any

import pytest

from tunebridge.adapters.spotify.client import SpotifyPlaylistFetcher
from tunebridge.config.errors import MissingConfigurationError
from tunebridge.domain.reconciliation.types import SourceTrack


def _item(
    track_id: str | None,
    name: str | None,
    *,
    isrc: str | None = None,
    kind: str = "track",
    is_local: bool = False,
) -> dict[str, Any]:
    return {
        "added_at": "2024-05-01T10:00:00Z",
        "track": {
            "id": track_id,
            "name": name,
            "type": kind,
            "is_local": is_local,
            "duration_ms": 201_000,
            "artists": [{"id": "a1", "name": "Main Artist"}, {"id": "a2", "name": "Guest"}],
            "external_ids": {"isrc": isrc} if isrc else {},
        },
    }


class FakeSpotify:
    def __init__(self, pages: list[dict[str, Any]]) -> None:
        self._pages = pages
        self.offsets: list[int] = []

    def playlist(self, playlist_id: str, fields: str | None = None) -> dict[str, Any]:
        del fields
        return {"id": playlist_id, "name": "Road Trip"}

    def playlist_items(
        self,
        playlist_id: str,
        limit: int = 100,
        offset: int = 0,
        additional_types: tuple[str, ...] = ("track",),
    ) -> dict[str, Any]:
        del playlist_id, limit, additional_types
        self.offsets.append(offset)
        return self._pages[len(self.offsets) - 1]


def test_fetch_playlist_pages_and_translates() -> None:
    fake = FakeSpotify(
        [
            {
                "items": [_item("t1", "First", isrc="USAAA0000001"), _item("t2", "Second")],
                "next": "https://api.spotify.com/v1/playlists/p/tracks?offset=2",
            },
            {"items": [_item("t3", "Third")], "next": None},
        ]
    )

    playlist = SpotifyPlaylistFetcher(client=fake, page_size=2).fetch_playlist("p")  # type: ignore[arg-type]

    assert playlist.name == "Road Trip"
    assert fake.offsets == [0, 2]
    assert playlist.tracks[0] == SourceTrack(
        source_id="t1",
        title="First",
        artist="Main Artist",
        duration_ms=201_000,
        cross_ref_code="USAAA0000001",
    )
    assert [track.source_id for track in playlist.tracks] == ["t1", "t2", "t3"]
    assert playlist.tracks[1].cross_ref_code is None


def test_fetch_playlist_skips_unmatchable_items() -> None:
    fake = FakeSpotify(
        [
            {
                "items": [
                    _item(None, "Local file", is_local=True),
                    _item("e1", "Podcast", kind="episode"),
                    _item("t1", None),
                    {"track": None},
                    _item("t2", "Keeper"),
                ],
                "next": None,
            }
        ]
    )

    playlist = SpotifyPlaylistFetcher(client=fake).fetch_playlist("p")  # type: ignore[arg-type]

    assert [track.source_id for track in playlist.tracks] == ["t2"]


def test_fetcher_requires_credentials() -> None:
    with pytest.raises(MissingConfigurationError):
        SpotifyPlaylistFetcher()
