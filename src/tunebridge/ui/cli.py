"""Command line interface for transferring Spotify playlists to Apple Music."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from contextlib import suppress
from signal import SIGINT
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from tunebridge.app import playlist_ids_from_links, transfer_playlists
from tunebridge.config import configure_logging
from tunebridge.domain.errors import CatalogRateLimitedError, CatalogUnauthorizedError
from tunebridge.domain.reconciliation import CancellationToken, MatchMethod

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tunebridge.domain.reconciliation import (
        ProgressEvent,
        ReconciliationReport,
        TransferResult,
    )

log = logging.getLogger(__name__)

EXIT_RUNTIME_ERROR = 1
EXIT_USAGE_ERROR = 2
EXIT_RATE_LIMITED = 75
EXIT_UNAUTHORIZED = 77
EXIT_CANCELLED = 130


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Transfer Spotify playlists to Apple Music")
    subparsers = parser.add_subparsers(dest="command", required=True)

    transfer = subparsers.add_parser(
        "transfer", help="Match playlist tracks and create an Apple Music playlist"
    )
    transfer.add_argument(
        "links",
        nargs="+",
        metavar="PLAYLIST_URL",
        help="Spotify playlist link or spotify:playlist:<id> URI (several are merged)",
    )
    transfer.add_argument(
        "--name",
        type=str,
        help="Name of the created playlist (defaults to the source playlist name)",
    )
    transfer.add_argument(
        "--storefront",
        type=str,
        help="Apple Music storefront, e.g. 'us' or 'de' (defaults to config)",
    )
    transfer.add_argument(
        "--no-fuzzy",
        action="store_true",
        help="Only accept exact ISRC matches",
    )
    transfer.add_argument(
        "--dry-run",
        action="store_true",
        help="Match tracks but do not create the playlist",
    )
    transfer.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log individual search queries and scores",
    )

    return parser.parse_args(list(argv))


def _log_progress(event: ProgressEvent) -> None:
    if event.current == event.total:
        log.info("%s phase: %d/%d done", event.phase, event.current, event.total)
    else:
        log.debug("%s phase: %d/%d", event.phase, event.current, event.total)


def _log_summary(result: TransferResult) -> None:
    report = result.report
    counts = report.count_by_method()
    log.info(
        "Matched %d/%d track(s) (exact=%d, fuzzy=%d)",
        len(report.matched),
        len(report.outcomes),
        counts[MatchMethod.EXACT],
        counts[MatchMethod.FUZZY],
    )
    for outcome in report.not_found:
        log.info(
            "Not found: %s - %s (%s)",
            outcome.source.artist,
            outcome.source.title,
            outcome.reason,
        )
    if result.playlist is not None:
        log.info(
            "Playlist %s written (success=%s)",
            result.playlist.playlist_id,
            result.playlist.success,
        )


def _log_partial(report: ReconciliationReport | None) -> None:
    if report is not None:
        log.info(
            "Aborted after matching %d/%d track(s); no playlist was written",
            len(report.matched),
            len(report.outcomes),
        )


async def _run_transfer(args: argparse.Namespace) -> TransferResult:
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(SIGINT, token.cancel)
    except NotImplementedError:
        log.debug("Signal handlers unsupported; Ctrl+C will abort without a report")
    try:
        return await transfer_playlists(
            args.links,
            name=args.name,
            storefront=args.storefront,
            fuzzy=not args.no_fuzzy,
            dry_run=args.dry_run,
            token=token,
            on_progress=_log_progress,
        )
    finally:
        with suppress(NotImplementedError):
            loop.remove_signal_handler(SIGINT)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        playlist_ids_from_links(parsed_args.links)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE_ERROR)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        result = asyncio.run(_run_transfer(parsed_args))
    except CatalogRateLimitedError as exc:
        log.error("%s", exc)  # noqa: TRY400
        _log_partial(exc.partial)
        sys.exit(EXIT_RATE_LIMITED)
    except CatalogUnauthorizedError as exc:
        log.error("%s", exc)  # noqa: TRY400
        _log_partial(exc.partial)
        sys.exit(EXIT_UNAUTHORIZED)
    except Exception:
        log.exception("Fatal error during transfer")
        sys.exit(EXIT_RUNTIME_ERROR)

    _log_summary(result)
    if result.report.cancelled:
        log.warning("Transfer cancelled during %s phase", result.report.cancelled_phase)
        sys.exit(EXIT_CANCELLED)


if __name__ == "__main__":
    main()
