"""Value types shared by the reconciliation stages."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Final

from .scoring import ACCEPTANCE_THRESHOLD

REASON_BELOW_THRESHOLD: Final[str] = "best match below threshold"
REASON_SKIPPED: Final[str] = "skipped"
REASON_CANCELLED: Final[str] = "cancelled"
REASON_LOOKUP_FAILED: Final[str] = "catalog lookup failed"
REASON_ABORTED: Final[str] = "aborted"


class MatchMethod(StrEnum):
    EXACT = "exact"
    FUZZY = "fuzzy"


class Phase(StrEnum):
    EXACT = "exact"
    FUZZY = "fuzzy"


@dataclass(frozen=True, slots=True)
class SourceTrack:
    """A track from the playlist being transferred.

    ``duration_ms`` of 0 means the duration is unknown. ``cross_ref_code`` is
    an ISRC when the source supplied one or the exact-match stage resolved it.
    """

    source_id: str
    title: str
    artist: str
    duration_ms: int = 0
    cross_ref_code: str | None = None

    def with_cross_ref_code(self, code: str) -> SourceTrack:
        return replace(self, cross_ref_code=code)


@dataclass(frozen=True, slots=True)
class CatalogTrack:
    """A song as returned by the target catalog."""

    catalog_id: str
    title: str
    artist: str
    duration_ms: int = 0
    cross_ref_code: str | None = None


@dataclass(frozen=True, slots=True)
class Matched:
    source: SourceTrack
    catalog_track: CatalogTrack
    method: MatchMethod
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be within [0, 1], got {self.confidence}")
        if self.method is MatchMethod.EXACT and self.confidence != 1.0:
            raise ValueError("Exact matches always carry confidence 1.0")
        if self.method is MatchMethod.FUZZY and self.confidence < ACCEPTANCE_THRESHOLD:
            raise ValueError(
                f"Fuzzy matches need confidence of at least {ACCEPTANCE_THRESHOLD}, "
                f"got {self.confidence}"
            )


@dataclass(frozen=True, slots=True)
class NotFound:
    source: SourceTrack
    reason: str


type MatchOutcome = Matched | NotFound


@dataclass(frozen=True, slots=True)
class SourcePlaylist:
    name: str
    tracks: tuple[SourceTrack, ...] = field(default_factory=tuple)


def outcome_source_id(outcome: MatchOutcome) -> str:
    match outcome:
        case Matched(source=source) | NotFound(source=source):
            return source.source_id
