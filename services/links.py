import logging
from typing import Optional

import aiohttp

from services.errors import ProviderFetchFailure
from services.models import Failed, FailureReason, Namespace, Origin, Outcome, RequestContext, Selection
from utils.links import SAAVN, SPOTIFY, YOUTUBE, detect_link, spotify_track_id, youtube_video_id

logger = logging.getLogger("links")


class LinkRouter:
    """
    Turns a pasted provider URL into a selection and resolves it.

    Spotify tracks go to Saavn whenever Saavn carries the exact same
    title and artist; only otherwise are they fetched on their own.
    """

    def __init__(self, resolver, catalog, saavn, spotify=None):
        self._resolver = resolver
        self._catalog = catalog
        self._saavn = saavn
        self._spotify = spotify

    async def route(self, url: str, request: RequestContext) -> Optional[Outcome]:
        """None when the URL does not belong to a supported provider."""
        kind = detect_link(url)
        if kind is None:
            return None

        url = url.strip()
        try:
            if kind == YOUTUBE:
                selection = Selection(Origin.LIVE_VIDEO, youtube_video_id(url))
            elif kind == SAAVN:
                selection = Selection(Origin.LIVE_AUDIO, await self._saavn_song_id(url))
            else:
                selection = await self._spotify_selection(url)
        except ProviderFetchFailure as e:
            return Failed(FailureReason.FETCH_ERROR, str(e))
        except (aiohttp.ClientError, RuntimeError) as e:
            logger.error(f"❌ Could not resolve {kind} link {url}: {e}")
            return Failed(FailureReason.FETCH_ERROR, str(e))

        if selection is None:
            return Failed(FailureReason.FETCH_ERROR, "Spotify links are not enabled")
        logger.info(f"🔗 {kind} link -> {selection.origin.value}:{selection.key}")
        return await self._resolver.resolve(selection, request)

    async def _saavn_song_id(self, url: str) -> Optional[str]:
        cached = await self._catalog.find_by_source_url(Namespace.AUDIO, url)
        if cached:
            return cached.provider_id
        return await self._saavn.song_id_from_link(url)

    async def _spotify_selection(self, url: str) -> Optional[Selection]:
        track_id = spotify_track_id(url)
        if not track_id:
            return Selection(Origin.LIVE_STREAM, None)
        if await self._catalog.find_by_provider_id(Namespace.STREAM, track_id):
            return Selection(Origin.LIVE_STREAM, track_id)
        if self._spotify is None:
            return None

        track = await self._spotify.track(track_id)
        saavn_id = await self._saavn.find_exact(track["title"], track["primary_artist"])
        if saavn_id:
            logger.info(f"🟢 Spotify {track_id} matched Saavn song {saavn_id}")
            return Selection(Origin.LIVE_AUDIO, saavn_id)
        return Selection(Origin.LIVE_STREAM, track_id)
