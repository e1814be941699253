"""Exact matching by cross-reference code (ISRC)."""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from tunebridge.domain.errors import ReconciliationCancelled, TransientCatalogError

from .concurrency import gather_bounded
from .settings import ReconciliationSettings
from .types import Matched, MatchMethod, Phase

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tunebridge.domain.ports.catalog import CatalogLookup, CrossRefCodeResolver

    from .concurrency import CancellationToken, ProgressHook
    from .types import CatalogTrack, SourceTrack

log = getLogger(__name__)


@dataclass(slots=True)
class ExactMatchResult:
    """Outcome of the exact phase.

    ``enriched`` holds every input track in input order, with codes attached
    where one was resolved. ``unmatched`` keeps input order as well.
    """

    matched: dict[str, Matched] = field(default_factory=dict[str, "Matched"])
    unmatched: list[SourceTrack] = field(default_factory=list["SourceTrack"])
    enriched: list[SourceTrack] = field(default_factory=list["SourceTrack"])


def code_key(code: str) -> str:
    return code.strip().upper()


@dataclass(slots=True)
class ExactMatchResolver:
    code_resolver: CrossRefCodeResolver
    lookup: CatalogLookup
    settings: ReconciliationSettings = field(default_factory=ReconciliationSettings)

    async def resolve(
        self,
        tracks: Sequence[SourceTrack],
        *,
        region: str | None = None,
        token: CancellationToken | None = None,
        on_progress: ProgressHook | None = None,
    ) -> ExactMatchResult:
        effective_region = region or self.settings.region
        enriched = await self.attach_codes(tracks, token=token, on_progress=on_progress)

        with_code = [track for track in enriched if track.cross_ref_code]
        hits = await self.lookup_codes(
            [track.cross_ref_code for track in with_code if track.cross_ref_code],
            region=effective_region,
            token=token,
        )

        result = ExactMatchResult(enriched=enriched)
        for track in enriched:
            catalog_track = None
            if track.cross_ref_code:
                catalog_track = hits.get(code_key(track.cross_ref_code))
            if catalog_track is None:
                result.unmatched.append(track)
                continue
            result.matched[track.source_id] = Matched(
                source=track,
                catalog_track=catalog_track,
                method=MatchMethod.EXACT,
                confidence=1.0,
            )

        log.info(
            "Exact phase: %d/%d matched (%d with code, %d routed to fuzzy)",
            len(result.matched),
            len(enriched),
            len(with_code),
            len(result.unmatched),
        )
        return result

    async def attach_codes(
        self,
        tracks: Sequence[SourceTrack],
        *,
        token: CancellationToken | None = None,
        on_progress: ProgressHook | None = None,
    ) -> list[SourceTrack]:
        """Resolve codes for tracks that lack one, preserving input order."""

        missing = [index for index, track in enumerate(tracks) if not track.cross_ref_code]
        if not missing:
            return list(tracks)

        async def resolve_one(track: SourceTrack) -> str | None:
            try:
                return await self.code_resolver.resolve_cross_ref_code(track.title, track.artist)
            except TransientCatalogError as exc:
                log.warning("Code lookup failed for %s (%s): %s", track.source_id, track.title, exc)
                return None

        try:
            codes = await gather_bounded(
                [tracks[index] for index in missing],
                resolve_one,
                limit=self.settings.max_parallelism,
                token=token,
                on_progress=on_progress,
            )
        except ReconciliationCancelled as exc:
            raise ReconciliationCancelled(exc.completed, phase=Phase.EXACT) from exc

        enriched = list(tracks)
        for index, code in zip(missing, codes, strict=True):
            if code:
                enriched[index] = tracks[index].with_cross_ref_code(code)
        return enriched

    async def lookup_codes(
        self,
        codes: Sequence[str],
        *,
        region: str,
        token: CancellationToken | None = None,
    ) -> dict[str, CatalogTrack]:
        """Look codes up in sequential batches; keys are upper-cased codes.

        The first catalog hit for a code wins.
        """

        unique: dict[str, str] = {}
        for code in codes:
            unique.setdefault(code_key(code), code.strip())
        batch_size = self.settings.exact_batch_size
        pending = list(unique.values())

        hits: dict[str, CatalogTrack] = {}
        scope = token.bind() if token is not None else nullcontext()
        try:
            async with scope:
                for start in range(0, len(pending), batch_size):
                    batch = pending[start : start + batch_size]
                    try:
                        found = await self.lookup.lookup_by_codes(batch, region)
                    except TransientCatalogError as exc:
                        log.warning(
                            "Code batch %d-%d failed, routing to fuzzy: %s",
                            start,
                            start + len(batch),
                            exc,
                        )
                        continue
                    for code, catalog_track in found.items():
                        hits.setdefault(code_key(code), catalog_track)
        except ReconciliationCancelled as exc:
            raise ReconciliationCancelled([], phase=Phase.EXACT) from exc
        return hits
