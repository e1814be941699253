"""Parse Spotify share links and URIs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import urlsplit

SPOTIFY_URI_SCHEME = "spotify:"
SPOTIFY_DOMAIN = "spotify.com"
EMBED_SEGMENT = "embed"
INTL_PREFIX = "intl-"


class SpotifyUrlType(StrEnum):
    TRACK = "track"
    ALBUM = "album"
    PLAYLIST = "playlist"
    ARTIST = "artist"
    SHOW = "show"
    EPISODE = "episode"


@dataclass(frozen=True, slots=True)
class SpotifyUrlInfo:
    type: SpotifyUrlType
    id: str


def parse_spotify_url(value: str | None) -> SpotifyUrlInfo | None:
    """Parse ``spotify:<type>:<id>`` URIs and ``https://open.spotify.com/...`` links.

    Embed links (``/embed/playlist/<id>``), localized links
    (``/intl-de/track/<id>``) and query strings are accepted. Returns ``None``
    for anything else.
    """

    if value is None or not value.strip():
        return None
    value = value.strip()
    if value.lower().startswith(SPOTIFY_URI_SCHEME):
        return _parse_uri(value[len(SPOTIFY_URI_SCHEME) :])
    return _parse_link(value)


def _parse_uri(rest: str) -> SpotifyUrlInfo | None:
    kind, _, identifier = rest.partition(":")
    if not kind or not identifier:
        return None
    return _build(kind, identifier)


def _parse_link(value: str) -> SpotifyUrlInfo | None:
    parts = urlsplit(value)
    host = (parts.hostname or "").lower()
    if parts.scheme not in {"http", "https"}:
        return None
    if host != SPOTIFY_DOMAIN and not host.endswith(f".{SPOTIFY_DOMAIN}"):
        return None

    segments = [segment for segment in parts.path.split("/") if segment]
    if segments and segments[0].lower() == EMBED_SEGMENT:
        segments = segments[1:]
    if segments and segments[0].lower().startswith(INTL_PREFIX):
        segments = segments[1:]
    if len(segments) < 2:  # noqa: PLR2004
        return None
    return _build(segments[0], segments[1])


def _build(kind: str, identifier: str) -> SpotifyUrlInfo | None:
    try:
        url_type = SpotifyUrlType(kind.lower())
    except ValueError:
        return None
    return SpotifyUrlInfo(type=url_type, id=identifier)
