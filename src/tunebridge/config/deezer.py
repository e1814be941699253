"""Deezer configuration values.

The public search API needs no credentials; only request pacing is configured.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_DEEZER_BASE_URL = "https://api.deezer.com"


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="deezer",
        base_url=DEFAULT_DEEZER_BASE_URL,
        timeout_seconds=15.0,
        ratelimit=RateLimit(min_interval_seconds=0.11),
        retry=RetryPolicy(total=2),
    )


@dataclass(frozen=True, slots=True)
class DeezerConfig:
    resilience: ResilienceConfig = field(default_factory=_default_resilience)


def get_deezer_config() -> DeezerConfig:
    return DeezerConfig()
