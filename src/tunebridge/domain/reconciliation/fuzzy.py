"""Text-search fallback for tracks the exact phase could not place."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from tunebridge.domain.errors import ReconciliationCancelled, TransientCatalogError

from .concurrency import gather_bounded
from .normalize import extract_primary_title, normalize_for_comparison, strip_version_suffix
from .scoring import calculate_similarity
from .settings import ReconciliationSettings
from .types import (
    REASON_BELOW_THRESHOLD,
    REASON_LOOKUP_FAILED,
    Matched,
    MatchMethod,
    NotFound,
    Phase,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tunebridge.domain.ports.catalog import CatalogSearch

    from .concurrency import CancellationToken, ProgressHook
    from .types import CatalogTrack, MatchOutcome, SourceTrack

log = getLogger(__name__)


def build_queries(track: SourceTrack) -> list[str]:
    """Search queries for ``track``, most specific first, without duplicates."""

    stripped = strip_version_suffix(track.title)
    normalized = normalize_for_comparison(stripped)
    primary = extract_primary_title(normalized)

    candidates = [f"{stripped} {track.artist}"]
    if primary != normalized:
        candidates.append(f"{primary} {track.artist}")
    candidates.append(stripped)

    queries: list[str] = []
    for query in candidates:
        query = query.strip()
        if query and query not in queries:
            queries.append(query)
    return queries


def best_candidate(
    track: SourceTrack, candidates: Sequence[CatalogTrack]
) -> tuple[CatalogTrack, float] | None:
    """Highest scoring candidate; ties keep the earlier one."""

    best: tuple[CatalogTrack, float] | None = None
    for candidate in candidates:
        score = calculate_similarity(track, candidate)
        if best is None or score > best[1]:
            best = (candidate, score)
    return best


@dataclass(slots=True)
class FuzzyMatchResolver:
    search: CatalogSearch
    settings: ReconciliationSettings = field(default_factory=ReconciliationSettings)

    async def match(self, track: SourceTrack, *, region: str | None = None) -> MatchOutcome:
        """Try each query in order and accept the first good enough candidate."""

        effective_region = region or self.settings.region
        threshold = self.settings.acceptance_threshold
        queries = build_queries(track)
        failures = 0

        for query in queries:
            try:
                candidates = await self.search.search_catalog(
                    query, effective_region, self.settings.search_limit
                )
            except TransientCatalogError as exc:
                failures += 1
                log.warning("Search failed for %s (query=%r): %s", track.source_id, query, exc)
                continue

            best = best_candidate(track, candidates)
            if best is None:
                log.debug("No candidates for %s (query=%r)", track.source_id, query)
                continue
            catalog_track, score = best
            log.debug(
                "Best candidate for %s (query=%r): %s score=%.3f",
                track.source_id,
                query,
                catalog_track.catalog_id,
                score,
            )
            if score >= threshold:
                return Matched(
                    source=track,
                    catalog_track=catalog_track,
                    method=MatchMethod.FUZZY,
                    confidence=min(score, 1.0),
                )

        if queries and failures == len(queries):
            return NotFound(source=track, reason=REASON_LOOKUP_FAILED)
        return NotFound(source=track, reason=REASON_BELOW_THRESHOLD)

    async def match_all(
        self,
        tracks: Sequence[SourceTrack],
        *,
        region: str | None = None,
        token: CancellationToken | None = None,
        on_progress: ProgressHook | None = None,
    ) -> list[MatchOutcome]:
        async def match_one(track: SourceTrack) -> MatchOutcome:
            return await self.match(track, region=region)

        try:
            outcomes = await gather_bounded(
                tracks,
                match_one,
                limit=self.settings.max_parallelism,
                token=token,
                on_progress=on_progress,
            )
        except ReconciliationCancelled as exc:
            raise ReconciliationCancelled(exc.completed, phase=Phase.FUZZY) from exc

        matched = sum(isinstance(outcome, Matched) for outcome in outcomes)
        log.info("Fuzzy phase: %d/%d matched", matched, len(tracks))
        return outcomes
