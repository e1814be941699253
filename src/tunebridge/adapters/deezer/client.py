"""Cross-reference code lookup through the public Deezer search API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from tunebridge.adapters.http_resilience import ResilientClient
from tunebridge.config.deezer import DeezerConfig
from tunebridge.domain.errors import CatalogRateLimitedError, TransientCatalogError

from .schema import DeezerSearchResponse

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from tunebridge.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

CATALOG_NAME = "Deezer"


class DeezerCodeResolver:
    """Resolve the ISRC of a track from its title and artist.

    One HTTP client is opened lazily and shared by all concurrent lookups so
    that the request pacing applies across them. Call :meth:`aclose` (or use
    the resolver as an async context manager) when done.
    """

    def __init__(
        self,
        *,
        config: DeezerConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config or DeezerConfig()
        self._resilience = self._config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> DeezerCodeResolver:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def resolve_cross_ref_code(self, title: str, artist: str) -> str | None:
        params = {"q": f"{artist} {title}", "limit": "1"}
        try:
            response = await self._http().get(self._url("search"), params=params)
        except httpx.HTTPError as exc:
            raise TransientCatalogError(f"Deezer search failed: {exc}") from exc

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise CatalogRateLimitedError(CATALOG_NAME)
        if not response.is_success:
            log.debug("Deezer search returned HTTP %s for %r", response.status_code, params["q"])
            return None

        try:
            payload = DeezerSearchResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            log.warning("Unexpected Deezer payload for %r", params["q"])
            return None

        if payload.quota_exceeded:
            raise CatalogRateLimitedError(CATALOG_NAME)
        if payload.error is not None:
            log.debug("Deezer search error for %r: %s", params["q"], payload.error.message)
            return None
        if not payload.data:
            return None
        return payload.data[0].isrc or None

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self._client_factory(self._resilience)
        return self._client

    def _url(self, path: str) -> str:
        base_url = self._resilience.base_url or ""
        return f"{base_url.rstrip('/')}/{path}"
