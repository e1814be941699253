"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from tunebridge.adapters.apple_music import AppleMusicCatalog
from tunebridge.adapters.deezer import DeezerCodeResolver
from tunebridge.adapters.spotify import SpotifyPlaylistFetcher, SpotifyUrlType, parse_spotify_url
from tunebridge.config.apple_music import get_apple_music_config
from tunebridge.domain.reconciliation import (
    ExactMatchResolver,
    FuzzyMatchResolver,
    ReconciliationOrchestrator,
    ReconciliationSettings,
    TransferResult,
    merge_playlists,
    resolve_playlist_name,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tunebridge.domain.ports.catalog import (
        CrossRefCodeResolver,
        SourcePlaylistFetcher,
        TargetCatalog,
    )
    from tunebridge.domain.reconciliation import CancellationToken
    from tunebridge.domain.reconciliation.orchestrator import ProgressCallback
    from tunebridge.domain.reconciliation.types import SourcePlaylist


log = getLogger(__name__)


def playlist_ids_from_links(links: Sequence[str]) -> list[str]:
    """Extract playlist ids from Spotify links or URIs, rejecting anything else."""

    ids: list[str] = []
    for link in links:
        info = parse_spotify_url(link)
        if info is None:
            raise ValueError(f"Not a Spotify link: {link}")
        if info.type is not SpotifyUrlType.PLAYLIST:
            raise ValueError(f"Not a Spotify playlist link ({info.type}): {link}")
        ids.append(info.id)
    return ids


async def fetch_playlists(
    fetcher: SourcePlaylistFetcher, playlist_ids: Sequence[str]
) -> list[SourcePlaylist]:
    playlists: list[SourcePlaylist] = []
    for playlist_id in playlist_ids:
        # spotipy is blocking
        playlists.append(await asyncio.to_thread(fetcher.fetch_playlist, playlist_id))
    return playlists


async def transfer_playlists(
    links: Sequence[str],
    *,
    name: str | None = None,
    storefront: str | None = None,
    fuzzy: bool = True,
    dry_run: bool = False,
    token: CancellationToken | None = None,
    on_progress: ProgressCallback | None = None,
    fetcher: SourcePlaylistFetcher | None = None,
    code_resolver: CrossRefCodeResolver | None = None,
    catalog: TargetCatalog | None = None,
    settings: ReconciliationSettings | None = None,
) -> TransferResult:
    """Copy one or more Spotify playlists into a single Apple Music playlist.

    With ``dry_run`` the tracks are matched but nothing is written.
    """

    playlist_ids = playlist_ids_from_links(links)
    if not playlist_ids:
        raise ValueError("At least one playlist link is required")

    async with AsyncExitStack() as stack:
        if catalog is None:
            config = get_apple_music_config(storefront=storefront)
            storefront = storefront or config.storefront
            catalog = await stack.enter_async_context(AppleMusicCatalog(config=config))
        if code_resolver is None:
            code_resolver = await stack.enter_async_context(DeezerCodeResolver())
        effective_fetcher = fetcher or SpotifyPlaylistFetcher()

        base_settings = settings or ReconciliationSettings()
        if storefront:
            base_settings = replace(base_settings, region=storefront.lower())

        playlists = await fetch_playlists(effective_fetcher, playlist_ids)
        tracks = merge_playlists(playlists)
        target_name = resolve_playlist_name(playlists, name)
        log.info(
            "Starting transfer of %d track(s) from %d playlist(s) to %r (dry_run=%s)",
            len(tracks),
            len(playlists),
            target_name,
            dry_run,
        )

        orchestrator = ReconciliationOrchestrator(
            exact=ExactMatchResolver(code_resolver, catalog, base_settings),
            fuzzy=FuzzyMatchResolver(catalog, base_settings),
            writer=catalog,
            settings=base_settings,
        )
        if dry_run:
            report = await orchestrator.reconcile(
                tracks, fuzzy=fuzzy, token=token, on_progress=on_progress
            )
            return TransferResult(report=report)
        return await orchestrator.transfer(
            target_name, tracks, fuzzy=fuzzy, token=token, on_progress=on_progress
        )
