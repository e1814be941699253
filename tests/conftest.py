from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolate_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "APPLE_MUSIC_DEVELOPER_TOKEN",
        "APPLE_MUSIC_USER_TOKEN",
        "APPLE_MUSIC_STOREFRONT",
        "SPOTIFY_CLIENT_ID",
        "SPOTIFY_CLIENT_SECRET",
    ):
        monkeypatch.delenv(name, raising=False)
