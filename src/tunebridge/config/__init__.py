"""Application configuration helpers."""

from __future__ import annotations

from tunebridge.common.logging import configure_logging

from .apple_music import AppleMusicConfig, get_apple_music_config
from .deezer import DeezerConfig, get_deezer_config
from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .spotify import SpotifyConfig, get_spotify_config

__all__ = [
    "AppleMusicConfig",
    "ConfigurationError",
    "DeezerConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SpotifyConfig",
    "configure_logging",
    "get_apple_music_config",
    "get_deezer_config",
    "get_spotify_config",
    "optional_env_var",
    "require_env_vars",
]
