"""Track reconciliation engine.

Matches source tracks against a target catalog in two stages:
1) exact lookup by cross-reference code (ISRC)
2) fuzzy text search scored by title, artist and duration similarity
"""

from __future__ import annotations

from .concurrency import CancellationToken, MinIntervalRateLimiter, gather_bounded
from .exact import ExactMatchResolver, ExactMatchResult
from .fuzzy import FuzzyMatchResolver, build_queries
from .orchestrator import (
    ProgressEvent,
    ReconciliationOrchestrator,
    ReconciliationReport,
    RunStatus,
    TransferResult,
    dedupe_tracks,
    merge_outcomes,
)
from .playlists import merge_playlists, resolve_playlist_name
from .settings import ReconciliationSettings
from .types import (
    REASON_BELOW_THRESHOLD,
    REASON_CANCELLED,
    REASON_SKIPPED,
    CatalogTrack,
    Matched,
    MatchMethod,
    MatchOutcome,
    NotFound,
    Phase,
    SourcePlaylist,
    SourceTrack,
)

__all__ = [
    "REASON_BELOW_THRESHOLD",
    "REASON_CANCELLED",
    "REASON_SKIPPED",
    "CancellationToken",
    "CatalogTrack",
    "ExactMatchResolver",
    "ExactMatchResult",
    "FuzzyMatchResolver",
    "MatchMethod",
    "MatchOutcome",
    "Matched",
    "MinIntervalRateLimiter",
    "NotFound",
    "Phase",
    "ProgressEvent",
    "ReconciliationOrchestrator",
    "ReconciliationReport",
    "ReconciliationSettings",
    "RunStatus",
    "SourcePlaylist",
    "SourceTrack",
    "TransferResult",
    "build_queries",
    "dedupe_tracks",
    "gather_bounded",
    "merge_outcomes",
    "merge_playlists",
    "resolve_playlist_name",
]
