"""
Fetch-convert-publish pipelines, one per catalog namespace.

Every fetcher follows the same steps: gather metadata and a source audio file,
fetch the cover art, re-encode with ffmpeg embedding tags and cover, upload to
the distribution channel and the requester. Whatever goes wrong surfaces as
ProviderFetchFailure; temp files never outlive the call.
"""
import html
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Dict, Optional

import aiohttp

from services.errors import ProviderFetchFailure
from services.models import FetchedTrack, Namespace, RequestContext
from services.providers import SaavnClient, SpotifyClient, YouTubeClient, best_download_url, primary_artists
from utils.downloader import download_audio, download_file, embed_metadata, safe_filename

logger = logging.getLogger("fetchers")


@dataclass
class PreparedAudio:
    source_path: str
    title: str
    artist: str
    duration: int = 0
    cover_url: Optional[str] = None
    source_url: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


class Fetcher:
    namespace: Namespace
    label = "source"

    def __init__(self, publisher, http: aiohttp.ClientSession):
        self._publisher = publisher
        self._http = http

    async def prepare(self, provider_id: str, tmpdir: str) -> PreparedAudio:
        raise NotImplementedError

    async def fetch_and_publish(self, provider_id: str, request: RequestContext) -> FetchedTrack:
        logger.info(f"🎵 Processing {self.label} id {provider_id}")
        tmpdir = tempfile.mkdtemp(prefix=f"{self.namespace.value}_")
        try:
            prepared = await self.prepare(provider_id, tmpdir)
            cover = await self._download_cover(prepared.cover_url, tmpdir)

            out_dir = os.path.join(tmpdir, "out")
            os.makedirs(out_dir, exist_ok=True)
            out_path = os.path.join(out_dir, safe_filename(prepared.title, prepared.artist))
            tags = {
                "title": prepared.title,
                "artist": prepared.artist,
                **prepared.tags,
                "comment": f"Downloaded from {self.label}",
            }
            await embed_metadata(prepared.source_path, out_path, tags, cover)

            distribution_ref = await self._publisher.publish_audio(
                request, out_path, prepared.title, prepared.artist, prepared.duration
            )
        except ProviderFetchFailure:
            raise
        except Exception as e:
            logger.exception(f"❌ {self.label} pipeline failed for {provider_id}")
            raise ProviderFetchFailure(str(e) or e.__class__.__name__) from e
        finally:
            shutil.rmtree(tmpdir, ignore_errors=True)

        return FetchedTrack(
            provider_id=provider_id,
            title=prepared.title,
            artist=prepared.artist,
            distribution_ref=distribution_ref,
            duration=prepared.duration,
            source_url=prepared.source_url,
        )

    async def _download_cover(self, url: Optional[str], tmpdir: str) -> Optional[str]:
        if not url:
            return None
        try:
            return await download_file(url, os.path.join(tmpdir, "cover.jpg"), self._http)
        except Exception as e:
            logger.warning(f"⚠️ Thumbnail download failed, continuing without it: {e}")
            return None


# ───────────────────────────────────────────────
# 🟢 JioSaavn
# ───────────────────────────────────────────────
class SaavnFetcher(Fetcher):
    namespace = Namespace.AUDIO
    label = "Saavn"

    def __init__(self, publisher, http: aiohttp.ClientSession, saavn: SaavnClient):
        super().__init__(publisher, http)
        self._saavn = saavn

    async def prepare(self, provider_id: str, tmpdir: str) -> PreparedAudio:
        song = await self._saavn.song_details(provider_id)
        download_url = best_download_url(song)
        if not download_url:
            raise ProviderFetchFailure("No download URL available")

        source_path = await download_file(download_url, os.path.join(tmpdir, "source.mp4"), self._http)
        images = song.get("image") or []
        album = (song.get("album") or {}).get("name") or ""
        return PreparedAudio(
            source_path=source_path,
            title=html.unescape(song.get("name") or "") or "Unknown Song",
            artist=primary_artists(song),
            duration=int(float(song.get("duration") or 0)),
            cover_url=images[-1].get("url") if images else None,
            source_url=song.get("url") or None,
            tags={
                "album": html.unescape(album),
                "date": str(song.get("year") or ""),
                "genre": song.get("language") or "",
                "publisher": song.get("label") or "",
                "copyright": song.get("copyright") or "",
            },
        )


# ───────────────────────────────────────────────
# 🔴 YouTube
# ───────────────────────────────────────────────
class YouTubeFetcher(Fetcher):
    namespace = Namespace.VIDEO
    label = "YouTube"

    def __init__(self, publisher, http: aiohttp.ClientSession, youtube: YouTubeClient):
        super().__init__(publisher, http)
        self._youtube = youtube

    async def prepare(self, provider_id: str, tmpdir: str) -> PreparedAudio:
        details = await self._youtube.video_details(provider_id)
        source_path = await download_audio(f"https://www.youtube.com/watch?v={provider_id}", tmpdir)
        return PreparedAudio(
            source_path=source_path,
            title=details["title"],
            artist=details["artist"],
            duration=details["duration"],
            cover_url=details["thumbnail"],
        )


# ───────────────────────────────────────────────
# 🎧 Spotify (audio matched on YouTube)
# ───────────────────────────────────────────────
class SpotifyFetcher(Fetcher):
    namespace = Namespace.STREAM
    label = "Spotify"

    def __init__(self, publisher, http: aiohttp.ClientSession, spotify: SpotifyClient):
        super().__init__(publisher, http)
        self._spotify = spotify

    async def prepare(self, provider_id: str, tmpdir: str) -> PreparedAudio:
        track = await self._spotify.track(provider_id)
        query = f"{track['primary_artist'] or track['artist']} - {track['title']}"
        source_path = await download_audio(f"ytsearch1:{query}", tmpdir)
        return PreparedAudio(
            source_path=source_path,
            title=track["title"],
            artist=track["artist"],
            duration=track["duration"],
            cover_url=track["image_url"],
            source_url=f"https://open.spotify.com/track/{provider_id}",
            tags={"album": track["album"], "date": track["year"]},
        )

