"""Errors raised across the catalog ports and the reconciliation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tunebridge.domain.reconciliation.orchestrator import ReconciliationReport
    from tunebridge.domain.reconciliation.types import Phase


class CatalogError(RuntimeError):
    """Base class for failures reported by an external catalog."""


class TransientCatalogError(CatalogError):
    """A single request failed (network error, bad status, malformed payload).

    Resolvers downgrade this to a per-track ``NotFound`` and keep going.
    """


class BatchFatalCatalogError(CatalogError):
    """A catalog failure that invalidates the rest of the batch.

    When raised out of a bounded fan-out, ``completed`` is the index-addressed
    result array at the moment of failure; slots whose work did not finish
    are ``None``. When raised through the orchestrator, ``partial`` holds the
    report built from the work that finished before the failure.
    """

    completed: list[object | None] | None = None
    partial: ReconciliationReport | None = None


class CatalogRateLimitedError(BatchFatalCatalogError):
    """The catalog refused further requests; the caller decides when to retry."""

    def __init__(self, catalog: str, *, retry_after: float | None = None) -> None:
        message = f"{catalog} rate limit exhausted"
        if retry_after is not None:
            message = f"{message} (retry after {retry_after:g}s)"
        super().__init__(message)
        self.catalog = catalog
        self.retry_after = retry_after


class CatalogUnauthorizedError(BatchFatalCatalogError):
    """Credentials were rejected or are missing; they must be reacquired."""

    def __init__(self, catalog: str, detail: str | None = None) -> None:
        message = f"{catalog} rejected the request as unauthorized"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.catalog = catalog


class ReconciliationCancelled(Exception):  # noqa: N818
    """Raised by the bounded fan-out when its cancellation token fires.

    ``completed`` is the index-addressed result array at the moment of
    cancellation; slots whose work did not finish are ``None``.
    """

    def __init__(self, completed: list[object | None], *, phase: Phase | None = None) -> None:
        super().__init__("reconciliation cancelled")
        self.completed = completed
        self.phase = phase
