"""Apple Music adapter: catalog lookup, search and library playlists."""

from __future__ import annotations

from .client import AppleMusicCatalog, parse_retry_after

__all__ = ["AppleMusicCatalog", "parse_retry_after"]
