"""Apple Music configuration values."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_APPLE_MUSIC_BASE_URL = "https://api.music.apple.com/v1"
DEFAULT_APPLE_MUSIC_STOREFRONT = "us"
# Storefronts are ISO 3166-1 alpha-2 country codes.
_STOREFRONT_PATTERN = re.compile(r"[a-z]{2}")


@dataclass(frozen=True, slots=True)
class AppleMusicConfig:
    developer_token: str
    user_token: str | None
    storefront: str
    resilience: ResilienceConfig


def apple_music_resilience() -> ResilienceConfig:
    # 429 is escalated to the caller, never retried here
    return ResilienceConfig(
        name="apple_music",
        base_url=DEFAULT_APPLE_MUSIC_BASE_URL,
        timeout_seconds=30.0,
        ratelimit=RateLimit(min_interval_seconds=1.0),
        retry=RetryPolicy(total=3),
    )


def get_apple_music_config(*, storefront: str | None = None) -> AppleMusicConfig:
    values = require_env_vars(("APPLE_MUSIC_DEVELOPER_TOKEN",))
    effective_storefront = storefront or optional_env_var(
        "APPLE_MUSIC_STOREFRONT", DEFAULT_APPLE_MUSIC_STOREFRONT
    )
    resolved_storefront = (effective_storefront or DEFAULT_APPLE_MUSIC_STOREFRONT).strip().lower()
    if not _STOREFRONT_PATTERN.fullmatch(resolved_storefront):
        raise ConfigurationError(f"Invalid Apple Music storefront: {resolved_storefront!r}")
    return AppleMusicConfig(
        developer_token=values["APPLE_MUSIC_DEVELOPER_TOKEN"],
        user_token=optional_env_var("APPLE_MUSIC_USER_TOKEN"),
        storefront=resolved_storefront,
        resilience=apple_music_resilience(),
    )
