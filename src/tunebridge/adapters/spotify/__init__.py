"""Spotify adapter: playlist source and link parsing."""

from __future__ import annotations

from .client import SpotifyPlaylistFetcher
from .urls import SpotifyUrlInfo, SpotifyUrlType, parse_spotify_url

__all__ = ["SpotifyPlaylistFetcher", "SpotifyUrlInfo", "SpotifyUrlType", "parse_spotify_url"]
