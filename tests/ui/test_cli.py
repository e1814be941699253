from __future__ import annotations

import logging

import pytest

from tunebridge.domain.errors import (
    CatalogRateLimitedError,
    CatalogUnauthorizedError,
)
from tunebridge.domain.reconciliation.orchestrator import (
    ReconciliationReport,
    RunStatus,
    TransferResult,
)
from tunebridge.domain.reconciliation.types import (
    REASON_CANCELLED,
    CatalogTrack,
    Matched,
    MatchMethod,
    NotFound,
    Phase,
    SourceTrack,
)
from tunebridge.ui import cli as cli_module

PLAYLIST = "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M"


def _report(status: RunStatus = RunStatus.COMPLETED) -> ReconciliationReport:
    first = SourceTrack("t1", "Dreams", "Fleetwood Mac")
    second = SourceTrack("t2", "Landslide", "Fleetwood Mac")
    matched = Matched(first, CatalogTrack("am1", "Dreams", "Fleetwood Mac"), MatchMethod.EXACT, 1.0)
    if status is RunStatus.CANCELLED:
        return ReconciliationReport(
            outcomes=(matched, NotFound(second, REASON_CANCELLED)),
            status=status,
            cancelled_phase=Phase.FUZZY,
        )
    return ReconciliationReport(outcomes=(matched, NotFound(second, "best match below threshold")))


def _install(
    monkeypatch: pytest.MonkeyPatch,
    *,
    result: TransferResult | None = None,
    error: Exception | None = None,
) -> dict[str, object]:
    captured: dict[str, object] = {}

    async def fake_transfer(links: list[str], **kwargs: object) -> TransferResult:
        captured["links"] = links
        captured.update(kwargs)
        if error is not None:
            raise error
        return result or TransferResult(report=_report())

    monkeypatch.setattr(cli_module, "transfer_playlists", fake_transfer)
    monkeypatch.setattr(cli_module, "load_dotenv", lambda: False)
    levels: list[int] = []
    captured["log_levels"] = levels
    monkeypatch.setattr(
        cli_module,
        "configure_logging",
        lambda *, level=logging.INFO, force=False: levels.append(level),
    )
    return captured


def test_cli_transfer_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install(monkeypatch)

    cli_module.main(["transfer", PLAYLIST])

    assert captured["links"] == [PLAYLIST]
    assert captured["name"] is None
    assert captured["storefront"] is None
    assert captured["fuzzy"] is True
    assert captured["dry_run"] is False
    assert captured["token"] is not None


def test_cli_transfer_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install(monkeypatch)

    cli_module.main(
        [
            "transfer",
            PLAYLIST,
            "spotify:playlist:abc",
            "--name",
            "Road Trip",
            "--storefront",
            "de",
            "--no-fuzzy",
            "--dry-run",
            "--verbose",
        ]
    )

    assert captured["links"] == [PLAYLIST, "spotify:playlist:abc"]
    assert captured["name"] == "Road Trip"
    assert captured["storefront"] == "de"
    assert captured["fuzzy"] is False
    assert captured["dry_run"] is True
    assert captured["log_levels"] == [logging.INFO, logging.DEBUG]


def test_cli_rejects_non_playlist_link(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install(monkeypatch)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["transfer", "https://open.spotify.com/track/abc"])

    assert excinfo.value.code == 2
    assert "links" not in captured


def test_cli_requires_a_link(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["transfer"])

    assert excinfo.value.code == 2


def test_cli_cancelled_run_exits_130(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, result=TransferResult(report=_report(RunStatus.CANCELLED)))

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["transfer", PLAYLIST])

    assert excinfo.value.code == 130


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (CatalogRateLimitedError("Apple Music", retry_after=5), 75),
        (CatalogUnauthorizedError("Apple Music"), 77),
        (RuntimeError("boom"), 1),
    ],
)
def test_cli_error_exit_codes(
    monkeypatch: pytest.MonkeyPatch, error: Exception, code: int
) -> None:
    _install(monkeypatch, error=error)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["transfer", PLAYLIST])

    assert excinfo.value.code == code
