from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from tunebridge.domain.errors import (
    CatalogRateLimitedError,
    ReconciliationCancelled,
    TransientCatalogError,
)
from tunebridge.domain.reconciliation.concurrency import CancellationToken
from tunebridge.domain.reconciliation.exact import ExactMatchResolver, code_key
from tunebridge.domain.reconciliation.settings import ReconciliationSettings
from tunebridge.domain.reconciliation.types import CatalogTrack, MatchMethod, Phase, SourceTrack

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class FakeCodeResolver:
    def __init__(
        self,
        codes: Mapping[str, str] | None = None,
        *,
        failing: set[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._codes = dict(codes or {})
        self._failing = failing or set()
        self._error = error
        self.calls: list[str] = []

    async def resolve_cross_ref_code(self, title: str, artist: str) -> str | None:
        del artist
        self.calls.append(title)
        await asyncio.sleep(0)
        if self._error is not None:
            raise self._error
        if title in self._failing:
            raise TransientCatalogError(f"lookup failed for {title}")
        return self._codes.get(title)


class FakeLookup:
    def __init__(
        self, by_code: Mapping[str, CatalogTrack], *, failing_batches: set[int] | None = None
    ) -> None:
        self._by_code = dict(by_code)
        self._failing_batches = failing_batches or set()
        self.batches: list[list[str]] = []
        self.regions: list[str] = []

    async def lookup_by_codes(self, codes: Sequence[str], region: str) -> dict[str, CatalogTrack]:
        index = len(self.batches)
        self.batches.append(list(codes))
        self.regions.append(region)
        if index in self._failing_batches:
            raise TransientCatalogError(f"batch {index} failed")
        return {
            catalog_track.cross_ref_code or code: catalog_track
            for code in codes
            if (catalog_track := self._by_code.get(code.upper())) is not None
        }


def _track(source_id: str, title: str, code: str | None = None) -> SourceTrack:
    return SourceTrack(source_id=source_id, title=title, artist="Artist", cross_ref_code=code)


def _song(catalog_id: str, code: str) -> CatalogTrack:
    return CatalogTrack(catalog_id=catalog_id, title="Song", artist="Artist", cross_ref_code=code)


def test_one_resolvable_code_matches_and_other_routes_to_fuzzy() -> None:
    tracks = [_track("s1", "Known"), _track("s2", "Unknown")]
    resolver = FakeCodeResolver({"Known": "USAAA0000001", "Unknown": "USZZZ9999999"})
    lookup = FakeLookup({"USAAA0000001": _song("am1", "USAAA0000001")})
    exact = ExactMatchResolver(resolver, lookup)

    result = asyncio.run(exact.resolve(tracks))

    assert list(result.matched) == ["s1"]
    matched = result.matched["s1"]
    assert matched.method is MatchMethod.EXACT
    assert matched.confidence == 1.0
    assert matched.catalog_track.catalog_id == "am1"
    assert [track.source_id for track in result.unmatched] == ["s2"]
    assert result.unmatched[0].cross_ref_code == "USZZZ9999999"
    assert lookup.regions == ["us"]


def test_existing_codes_are_not_resolved_again() -> None:
    tracks = [_track("s1", "Has code", "USAAA0000001"), _track("s2", "Needs code")]
    resolver = FakeCodeResolver({"Needs code": "USBBB0000002"})
    lookup = FakeLookup({})

    result = asyncio.run(ExactMatchResolver(resolver, lookup).resolve(tracks))

    assert resolver.calls == ["Needs code"]
    assert [track.cross_ref_code for track in result.enriched] == [
        "USAAA0000001",
        "USBBB0000002",
    ]


def test_codes_are_matched_case_insensitively_and_deduplicated() -> None:
    tracks = [
        _track("s1", "One", "usaaa0000001"),
        _track("s2", "Same recording", "USAAA0000001 "),
    ]
    lookup = FakeLookup({"USAAA0000001": _song("am1", "USAAA0000001")})

    result = asyncio.run(ExactMatchResolver(FakeCodeResolver(), lookup).resolve(tracks))

    assert lookup.batches == [["usaaa0000001"]]
    assert sorted(result.matched) == ["s1", "s2"]


def test_lookup_is_batched_and_failed_batch_routes_to_fuzzy() -> None:
    codes = [f"USAAA{index:07d}" for index in range(5)]
    tracks = [_track(f"s{index}", f"T{index}", code) for index, code in enumerate(codes)]
    lookup = FakeLookup({code: _song(f"am{code[-1]}", code) for code in codes}, failing_batches={1})
    settings = ReconciliationSettings(exact_batch_size=2)

    result = asyncio.run(ExactMatchResolver(FakeCodeResolver(), lookup, settings).resolve(tracks))

    assert [len(batch) for batch in lookup.batches] == [2, 2, 1]
    assert sorted(result.matched) == ["s0", "s1", "s4"]
    assert [track.source_id for track in result.unmatched] == ["s2", "s3"]


def test_transient_code_failure_leaves_track_without_code() -> None:
    tracks = [_track("s1", "Flaky"), _track("s2", "Fine")]
    resolver = FakeCodeResolver({"Fine": "USAAA0000001"}, failing={"Flaky"})
    lookup = FakeLookup({"USAAA0000001": _song("am1", "USAAA0000001")})

    result = asyncio.run(ExactMatchResolver(resolver, lookup).resolve(tracks))

    assert list(result.matched) == ["s2"]
    assert result.unmatched[0].cross_ref_code is None


def test_rate_limit_from_code_resolver_propagates() -> None:
    resolver = FakeCodeResolver(error=CatalogRateLimitedError("Deezer"))

    with pytest.raises(CatalogRateLimitedError):
        asyncio.run(ExactMatchResolver(resolver, FakeLookup({})).resolve([_track("s1", "T")]))


def test_cancelled_token_marks_exact_phase() -> None:
    token = CancellationToken()
    token.cancel()

    with pytest.raises(ReconciliationCancelled) as excinfo:
        asyncio.run(
            ExactMatchResolver(FakeCodeResolver(), FakeLookup({})).resolve(
                [_track("s1", "T")], token=token
            )
        )

    assert excinfo.value.phase is Phase.EXACT


def test_code_key_normalises_case_and_whitespace() -> None:
    assert code_key(" usabc1234567 ") == "USABC1234567"
