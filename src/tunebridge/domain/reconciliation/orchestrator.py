"""Two-stage reconciliation of a source playlist against a target catalog.

Flow:
1) deduplicate input tracks by source id
2) exact phase: resolve cross-reference codes, batch lookup
3) fuzzy phase (optional): text search for the remainder
4) merge both result sets back into input order
5) optionally write the matched catalog ids to a playlist
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from tunebridge.domain.errors import BatchFatalCatalogError, ReconciliationCancelled

from .settings import ReconciliationSettings
from .types import (
    REASON_ABORTED,
    REASON_CANCELLED,
    REASON_SKIPPED,
    Matched,
    MatchMethod,
    NotFound,
    Phase,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from tunebridge.domain.ports.catalog import PlaylistWriter, PlaylistWriteResult

    from .concurrency import CancellationToken, ProgressHook
    from .exact import ExactMatchResolver
    from .fuzzy import FuzzyMatchResolver
    from .types import MatchOutcome, SourceTrack

log = getLogger(__name__)


class RunStatus(StrEnum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    phase: Phase
    current: int
    total: int


type ProgressCallback = Callable[[ProgressEvent], None]


@dataclass(frozen=True, slots=True)
class ReconciliationReport:
    """One outcome per deduplicated input track, in input order."""

    outcomes: tuple[MatchOutcome, ...]
    status: RunStatus = RunStatus.COMPLETED
    cancelled_phase: Phase | None = None

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    @property
    def matched(self) -> list[Matched]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, Matched)]

    @property
    def not_found(self) -> list[NotFound]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, NotFound)]

    def count_by_method(self) -> dict[MatchMethod, int]:
        counts = Counter(outcome.method for outcome in self.matched)
        return {method: counts.get(method, 0) for method in MatchMethod}


@dataclass(frozen=True, slots=True)
class TransferResult:
    report: ReconciliationReport
    playlist: PlaylistWriteResult | None = None


def dedupe_tracks(tracks: Iterable[SourceTrack]) -> list[SourceTrack]:
    """Drop repeated source ids; the first occurrence wins."""

    seen: set[str] = set()
    unique: list[SourceTrack] = []
    for track in tracks:
        if track.source_id in seen:
            continue
        seen.add(track.source_id)
        unique.append(track)
    return unique


def merge_outcomes(
    tracks: Sequence[SourceTrack],
    exact: Mapping[str, Matched],
    fuzzy: Mapping[str, MatchOutcome],
    *,
    fallback_reason: str = REASON_SKIPPED,
) -> tuple[MatchOutcome, ...]:
    """Merge phase results into exactly one outcome per track, in order.

    An exact match wins over a fuzzy outcome; tracks present in neither map
    get ``NotFound(fallback_reason)``.
    """

    merged: list[MatchOutcome] = []
    for track in tracks:
        outcome = exact.get(track.source_id) or fuzzy.get(track.source_id)
        merged.append(outcome or NotFound(source=track, reason=fallback_reason))
    return tuple(merged)


@dataclass(slots=True)
class ReconciliationOrchestrator:
    exact: ExactMatchResolver
    fuzzy: FuzzyMatchResolver
    writer: PlaylistWriter | None = None
    settings: ReconciliationSettings = field(default_factory=ReconciliationSettings)

    async def reconcile(
        self,
        tracks: Iterable[SourceTrack],
        *,
        region: str | None = None,
        fuzzy: bool = True,
        token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ReconciliationReport:
        """Match ``tracks`` against the target catalog.

        A cancelled run returns a report with ``status=CANCELLED``; finished
        tracks keep their outcome and the rest are ``NotFound("cancelled")``.
        Rate-limit and authorization failures are re-raised unchanged, with
        the partial report attached as ``exc.partial``.
        """

        unique = dedupe_tracks(tracks)
        effective_region = region or self.settings.region
        exact_matches: dict[str, Matched] = {}
        fuzzy_outcomes: dict[str, MatchOutcome] = {}

        log.info(
            "Reconciling %d track(s) in region %s (fuzzy=%s)", len(unique), effective_region, fuzzy
        )

        try:
            exact_result = await self.exact.resolve(
                unique,
                region=effective_region,
                token=token,
                on_progress=_phase_hook(Phase.EXACT, on_progress),
            )
            exact_matches = exact_result.matched

            if fuzzy and exact_result.unmatched:
                remaining = exact_result.unmatched
                try:
                    outcomes = await self.fuzzy.match_all(
                        remaining,
                        region=effective_region,
                        token=token,
                        on_progress=_phase_hook(Phase.FUZZY, on_progress),
                    )
                except ReconciliationCancelled as exc:
                    fuzzy_outcomes = _finished_slots(remaining, exc.completed)
                    raise
                except BatchFatalCatalogError as exc:
                    if exc.completed is not None:
                        fuzzy_outcomes = _finished_slots(remaining, exc.completed)
                    raise
                fuzzy_outcomes = {
                    track.source_id: outcome
                    for track, outcome in zip(remaining, outcomes, strict=True)
                }
        except ReconciliationCancelled as exc:
            phase = exc.phase or Phase.EXACT
            log.warning("Reconciliation cancelled during %s phase", phase)
            return ReconciliationReport(
                outcomes=merge_outcomes(
                    unique, exact_matches, fuzzy_outcomes, fallback_reason=REASON_CANCELLED
                ),
                status=RunStatus.CANCELLED,
                cancelled_phase=phase,
            )
        except BatchFatalCatalogError as exc:
            log.error("Reconciliation aborted: %s", exc)
            exc.partial = ReconciliationReport(
                outcomes=merge_outcomes(
                    unique, exact_matches, fuzzy_outcomes, fallback_reason=REASON_ABORTED
                ),
                status=RunStatus.ABORTED,
            )
            raise

        report = ReconciliationReport(
            outcomes=merge_outcomes(unique, exact_matches, fuzzy_outcomes)
        )
        log.info(
            "Reconciliation finished: %d matched, %d not found",
            len(report.matched),
            len(report.not_found),
        )
        return report

    async def transfer(
        self,
        name: str,
        tracks: Iterable[SourceTrack],
        *,
        region: str | None = None,
        fuzzy: bool = True,
        token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> TransferResult:
        """Reconcile ``tracks`` and write the matched subset to a new playlist.

        Nothing is written when the run was cancelled or nothing matched.
        """

        if self.writer is None:
            raise RuntimeError("transfer() requires a playlist writer")

        report = await self.reconcile(
            tracks, region=region, fuzzy=fuzzy, token=token, on_progress=on_progress
        )
        if report.cancelled:
            return TransferResult(report=report)

        catalog_ids = [outcome.catalog_track.catalog_id for outcome in report.matched]
        if not catalog_ids:
            log.warning("No tracks matched; skipping playlist creation for %r", name)
            return TransferResult(report=report)

        log.info("Writing %d track(s) to playlist %r", len(catalog_ids), name)
        playlist = await self.writer.write_playlist(name, catalog_ids)
        if not playlist.success:
            log.warning("Playlist %r was not fully written (id=%s)", name, playlist.playlist_id)
        return TransferResult(report=report, playlist=playlist)


def _finished_slots(
    tracks: Sequence[SourceTrack], completed: Sequence[object | None]
) -> dict[str, MatchOutcome]:
    finished: dict[str, MatchOutcome] = {}
    for track, outcome in zip(tracks, completed, strict=False):
        if isinstance(outcome, Matched | NotFound):
            finished[track.source_id] = outcome
    return finished


def _phase_hook(phase: Phase, callback: ProgressCallback | None) -> ProgressHook | None:
    if callback is None:
        return None

    def hook(current: int, total: int) -> None:
        callback(ProgressEvent(phase=phase, current=current, total=total))

    return hook
