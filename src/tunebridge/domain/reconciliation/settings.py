"""Tunable parameters for a reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass

from .scoring import ACCEPTANCE_THRESHOLD

DEFAULT_ACCEPTANCE_THRESHOLD = ACCEPTANCE_THRESHOLD
DEFAULT_MAX_PARALLELISM = 10
DEFAULT_SEARCH_LIMIT = 10
# External hard limits of the target catalog.
EXACT_LOOKUP_BATCH_SIZE = 25
PLAYLIST_WRITE_BATCH_SIZE = 100


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationSettings:
    acceptance_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD
    max_parallelism: int = DEFAULT_MAX_PARALLELISM
    search_limit: int = DEFAULT_SEARCH_LIMIT
    exact_batch_size: int = EXACT_LOOKUP_BATCH_SIZE
    playlist_batch_size: int = PLAYLIST_WRITE_BATCH_SIZE
    region: str = "us"

    def __post_init__(self) -> None:
        if not ACCEPTANCE_THRESHOLD <= self.acceptance_threshold <= 1.0:
            raise ValueError(
                f"acceptance_threshold must be within [{ACCEPTANCE_THRESHOLD}, 1]"
            )
        for name in ("max_parallelism", "search_limit", "exact_batch_size", "playlist_batch_size"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")
        if not self.region.strip():
            raise ValueError("region must not be blank")
