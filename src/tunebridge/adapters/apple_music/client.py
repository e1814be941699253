"""Apple Music catalog and library client."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from tunebridge.adapters.http_resilience import ResilientClient
from tunebridge.domain.errors import (
    CatalogRateLimitedError,
    CatalogUnauthorizedError,
    TransientCatalogError,
)
from tunebridge.domain.ports.catalog import PlaylistWriteResult
from tunebridge.domain.reconciliation.settings import PLAYLIST_WRITE_BATCH_SIZE

from .schema import LibraryPlaylistsResponse, SearchResponse, SongsResponse
from .translator import song_to_catalog_track

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from types import TracebackType

    from pydantic import BaseModel

    from tunebridge.config.apple_music import AppleMusicConfig
    from tunebridge.config.http_resilience import ResilienceConfig
    from tunebridge.domain.reconciliation.types import CatalogTrack

log = getLogger(__name__)

CATALOG_NAME = "Apple Music"
DEFAULT_PLAYLIST_DESCRIPTION = "Imported with tunebridge"


def parse_retry_after(value: str | None, *, now: datetime | None = None) -> float | None:
    """Seconds to wait from a ``Retry-After`` header (delta seconds or HTTP date)."""

    if value is None or not value.strip():
        return None
    value = value.strip()
    if value.isdigit():
        return float(max(1, int(value)))
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    seconds = math.ceil((when - (now or datetime.now(UTC))).total_seconds())
    return float(seconds) if seconds > 0 else None


class AppleMusicCatalog:
    """Catalog lookup, text search and playlist writing against Apple Music.

    Catalog reads need the developer token; library writes additionally need
    the Music-User-Token. 401 and 429 are escalated as batch-fatal errors,
    every other failure stays local to the request.
    """

    def __init__(
        self,
        *,
        config: AppleMusicConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        playlist_batch_size: int = PLAYLIST_WRITE_BATCH_SIZE,
        playlist_description: str = DEFAULT_PLAYLIST_DESCRIPTION,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None
        self._playlist_batch_size = playlist_batch_size
        self._playlist_description = playlist_description

    async def __aenter__(self) -> AppleMusicCatalog:
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

    # catalog reads

    async def lookup_by_codes(
        self, codes: Sequence[str], region: str
    ) -> Mapping[str, CatalogTrack]:
        if not codes:
            return {}
        response = await self._read(
            f"catalog/{region}/songs", params={"filter[isrc]": ",".join(codes)}
        )
        payload = self._validate(SongsResponse, response)

        found: dict[str, CatalogTrack] = {}
        for song in payload.data:
            track = song_to_catalog_track(song)
            if track is None or track.cross_ref_code is None:
                continue
            found.setdefault(track.cross_ref_code, track)
        log.debug("Apple Music ISRC lookup: %d/%d code(s) found", len(found), len(codes))
        return found

    async def search_catalog(self, query: str, region: str, limit: int) -> Sequence[CatalogTrack]:
        response = await self._read(
            f"catalog/{region}/search",
            params={"types": "songs", "limit": str(limit), "term": query},
        )
        payload = self._validate(SearchResponse, response)
        if payload.results.songs is None:
            return []
        tracks = [song_to_catalog_track(song) for song in payload.results.songs.data]
        return [track for track in tracks if track is not None]

    # library writes

    async def write_playlist(self, name: str, catalog_ids: Sequence[str]) -> PlaylistWriteResult:
        playlist_id = await self._create_playlist(name)
        if playlist_id is None:
            return PlaylistWriteResult(playlist_id=None, success=False)

        for start in range(0, len(catalog_ids), self._playlist_batch_size):
            batch = catalog_ids[start : start + self._playlist_batch_size]
            body = {"data": [{"id": catalog_id, "type": "songs"} for catalog_id in batch]}
            response = await self._write(f"me/library/playlists/{playlist_id}/tracks", body)
            if response is None:
                log.warning(
                    "Adding tracks %d-%d to playlist %s failed",
                    start + 1,
                    start + len(batch),
                    playlist_id,
                )
                return PlaylistWriteResult(playlist_id=playlist_id, success=False)

        return PlaylistWriteResult(playlist_id=playlist_id, success=True)

    async def _create_playlist(self, name: str) -> str | None:
        body = {"attributes": {"name": name, "description": self._playlist_description}}
        response = await self._write("me/library/playlists", body)
        if response is None:
            return None
        try:
            payload = LibraryPlaylistsResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            log.warning("Unexpected Apple Music payload when creating playlist %r", name)
            return None
        if not payload.data:
            return None
        return payload.data[0].id

    # transport

    async def _read(self, path: str, *, params: dict[str, str]) -> httpx.Response:
        try:
            response = await self._http().get(
                self._url(path), params=params, headers=self._headers(write=False)
            )
        except httpx.HTTPError as exc:
            raise TransientCatalogError(f"Apple Music request failed: {exc}") from exc
        self._raise_for_fatal_status(response)
        if not response.is_success:
            raise TransientCatalogError(
                f"Apple Music returned HTTP {response.status_code} for {path}"
            )
        return response

    async def _write(self, path: str, body: dict[str, object]) -> httpx.Response | None:
        headers = self._headers(write=True)
        try:
            response = await self._http().post(self._url(path), json=body, headers=headers)
        except httpx.HTTPError as exc:
            log.warning("Apple Music request to %s failed: %s", path, exc)
            return None
        self._raise_for_fatal_status(response)
        if not response.is_success:
            log.warning("Apple Music returned HTTP %s for %s", response.status_code, path)
            return None
        return response

    def _headers(self, *, write: bool) -> dict[str, str]:
        if not self._config.developer_token.strip():
            raise CatalogUnauthorizedError(CATALOG_NAME, "developer token is missing")
        headers = {"Authorization": f"Bearer {self._config.developer_token}"}
        if write:
            user_token = self._config.user_token
            if user_token is None or not user_token.strip():
                raise CatalogUnauthorizedError(CATALOG_NAME, "user token is required to write")
            headers["Music-User-Token"] = user_token
        return headers

    @staticmethod
    def _raise_for_fatal_status(response: httpx.Response) -> None:
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise CatalogUnauthorizedError(CATALOG_NAME, "token may have expired")
        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            raise CatalogRateLimitedError(CATALOG_NAME, retry_after=retry_after)

    @staticmethod
    def _validate[M: BaseModel](model: type[M], response: httpx.Response) -> M:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TransientCatalogError(f"Unexpected Apple Music payload: {exc}") from exc

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self._client_factory(self._resilience)
        return self._client

    def _url(self, path: str) -> str:
        base_url = self._resilience.base_url or ""
        return f"{base_url.rstrip('/')}/{path}"
