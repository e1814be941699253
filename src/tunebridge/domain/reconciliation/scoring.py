"""Similarity scoring between a source track and a catalog candidate."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from rapidfuzz.distance import JaroWinkler

from .normalize import extract_primary_title, normalize_artist, normalize_for_comparison

if TYPE_CHECKING:
    from .types import CatalogTrack, SourceTrack

# Titles discriminate between songs better than artist names do.
TITLE_WEIGHT: Final[float] = 0.6
ARTIST_WEIGHT: Final[float] = 0.4
# Fuzzy matches below this score are never accepted; runs may only raise it.
ACCEPTANCE_THRESHOLD: Final[float] = 0.7

EXACT_SCORE: Final[float] = 1.0
CONTAINMENT_SCORE: Final[float] = 0.9
PRIMARY_EXACT_SCORE: Final[float] = 0.95
PRIMARY_CONTAINMENT_SCORE: Final[float] = 0.85

# (max absolute difference in seconds, multiplier), checked in order.
_DURATION_TIERS: Final[tuple[tuple[float, float], ...]] = (
    (5.0, 1.0),
    (15.0, 0.95),
    (30.0, 0.90),
    (60.0, 0.80),
)
_DURATION_FLOOR: Final[float] = 0.70


def title_similarity(a: str, b: str) -> float:
    if not a or not b:
        return 0.0

    normal_a = normalize_for_comparison(a)
    normal_b = normalize_for_comparison(b)

    quick = _quick_similarity(normal_a, normal_b)
    if quick is not None:
        return quick

    primary_a = extract_primary_title(normal_a)
    primary_b = extract_primary_title(normal_b)
    if primary_a == primary_b:
        return PRIMARY_EXACT_SCORE
    if _contains_either(primary_a, primary_b):
        return PRIMARY_CONTAINMENT_SCORE

    return max(
        JaroWinkler.similarity(primary_a, primary_b),
        JaroWinkler.similarity(normal_a, normal_b),
    )


def artist_similarity(a: str, b: str) -> float:
    if not a or not b:
        return 0.0

    normal_a = normalize_artist(a)
    normal_b = normalize_artist(b)

    quick = _quick_similarity(normal_a, normal_b)
    if quick is not None:
        return quick
    return JaroWinkler.similarity(normal_a, normal_b)


def duration_multiplier(duration_a_ms: int, duration_b_ms: int) -> float:
    """Return a penalty in ``[0.7, 1.0]`` for mismatched durations.

    An unknown duration (``<= 0``) on either side is not penalised.
    """

    if duration_a_ms <= 0 or duration_b_ms <= 0:
        return 1.0

    diff_seconds = abs(duration_a_ms - duration_b_ms) / 1000.0
    for max_seconds, multiplier in _DURATION_TIERS:
        if diff_seconds <= max_seconds:
            return multiplier
    return _DURATION_FLOOR


def calculate_similarity(source: SourceTrack, candidate: CatalogTrack) -> float:
    """Weighted title/artist score scaled by the duration multiplier."""

    text_score = (
        TITLE_WEIGHT * title_similarity(source.title, candidate.title)
        + ARTIST_WEIGHT * artist_similarity(source.artist, candidate.artist)
    )
    return text_score * duration_multiplier(source.duration_ms, candidate.duration_ms)


def _quick_similarity(a: str, b: str) -> float | None:
    if a == b:
        return EXACT_SCORE
    if not a or not b:
        return 0.0
    if _contains_either(a, b):
        return CONTAINMENT_SCORE
    return None


def _contains_either(a: str, b: str) -> bool:
    return bool(a and b) and (a in b or b in a)
