from __future__ import annotations

import pytest

from tunebridge.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_apple_music_config,
    get_deezer_config,
    get_spotify_config,
    optional_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "  ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)
    assert exc.value.names == ("MISSING_A", "MISSING_B")


def test_optional_env_var_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLANK_VAR", "")

    assert optional_env_var("BLANK_VAR", "fallback") == "fallback"
    assert optional_env_var("BLANK_VAR") is None


def test_apple_music_config_requires_developer_token() -> None:
    with pytest.raises(MissingConfigurationError, match="APPLE_MUSIC_DEVELOPER_TOKEN"):
        get_apple_music_config()


def test_apple_music_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APPLE_MUSIC_DEVELOPER_TOKEN", "dev")

    config = get_apple_music_config()

    assert config.developer_token == "dev"
    assert config.user_token is None
    assert config.storefront == "us"
    assert config.resilience.ratelimit is not None
    assert config.resilience.ratelimit.min_interval_seconds == 1.0
    assert config.resilience.timeout_seconds == 30.0
    assert 429 not in config.resilience.retry.status_forcelist
    assert "POST" not in config.resilience.retry.allowed_methods


def test_apple_music_storefront_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APPLE_MUSIC_DEVELOPER_TOKEN", "dev")
    monkeypatch.setenv("APPLE_MUSIC_USER_TOKEN", "user")
    monkeypatch.setenv("APPLE_MUSIC_STOREFRONT", "de")

    assert get_apple_music_config().storefront == "de"
    assert get_apple_music_config(storefront="GB").storefront == "gb"
    assert get_apple_music_config().user_token == "user"


@pytest.mark.parametrize("storefront", ["usa", "u1", "de-at"])
def test_apple_music_rejects_malformed_storefront(
    monkeypatch: pytest.MonkeyPatch, storefront: str
) -> None:
    monkeypatch.setenv("APPLE_MUSIC_DEVELOPER_TOKEN", "dev")

    with pytest.raises(ConfigurationError, match="storefront"):
        get_apple_music_config(storefront=storefront)


def test_deezer_config_pacing() -> None:
    resilience = get_deezer_config().resilience

    assert resilience.ratelimit is not None
    assert resilience.ratelimit.min_interval_seconds == pytest.approx(0.11)
    assert resilience.timeout_seconds == 15.0


def test_spotify_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")

    config = get_spotify_config()

    assert (config.client_id, config.client_secret) == ("id", "secret")
