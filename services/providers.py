"""
Provider adapters.

Each adapter talks to one external service and normalizes what it returns:
- SaavnClient: JioSaavn JSON API over aiohttp
- YouTubeClient: yt-dlp (search + metadata, no download)
- SpotifyClient: spotipy with client credentials
"""
import asyncio
import html
import logging
from functools import partial
from typing import Dict, List, Optional

import aiohttp
import spotipy
import yt_dlp
from spotipy.oauth2 import SpotifyClientCredentials
from yt_dlp.utils import DownloadError

from services.errors import ProviderFetchFailure
from services.models import Origin, SearchResultItem

logger = logging.getLogger("providers")


# ───────────────────────────────────────────────
# 🟢 JioSaavn
# ───────────────────────────────────────────────
def primary_artists(song: dict) -> str:
    names = [a.get("name") for a in (song.get("artists") or {}).get("primary") or [] if a.get("name")]
    return html.unescape(", ".join(names)) if names else "Unknown Artist"


def _saavn_image(song: dict) -> Optional[str]:
    images = song.get("image") or []
    for image in images:
        if image.get("quality") == "500x500":
            return image.get("url")
    return images[-1].get("url") if images else None


def _seconds(value) -> Optional[int]:
    try:
        return int(float(value)) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def normalize_saavn_song(song: dict) -> Optional[SearchResultItem]:
    if not song.get("id"):
        return None
    return SearchResultItem(
        title=html.unescape(song.get("name") or song.get("title") or "Unknown"),
        artist=primary_artists(song),
        origin=Origin.LIVE_AUDIO,
        selection_key=str(song["id"]),
        duration=_seconds(song.get("duration")),
        image_url=_saavn_image(song),
    )


def best_download_url(song: dict) -> Optional[str]:
    """Highest quality stream the API offers, 320kbps first."""
    urls = song.get("downloadUrl") or []
    for preferred in ("320kbps", "160kbps", "96kbps"):
        for item in urls:
            if item.get("quality") == preferred and item.get("url"):
                return item["url"]
    return urls[-1].get("url") if urls else None


class SaavnClient:
    def __init__(self, session: aiohttp.ClientSession, base_url: str):
        self._session = session
        self._base_url = base_url.rstrip("/")

    async def _get(self, path: str, params: Optional[Dict] = None) -> dict:
        async with self._session.get(f"{self._base_url}{path}", params=params) as resp:
            if resp.status != 200:
                raise RuntimeError(f"Saavn API returned HTTP {resp.status}")
            return await resp.json(content_type=None)

    async def search(self, query: str, limit: int = 10) -> List[SearchResultItem]:
        data = await self._get("/api/search/songs", {"query": query, "page": 0, "limit": limit})
        songs = ((data or {}).get("data") or {}).get("results") or []
        items = [normalize_saavn_song(song) for song in songs]
        return [item for item in items if item][:limit]

    async def song_details(self, song_id: str) -> dict:
        data = await self._get(f"/api/songs/{song_id}")
        songs = (data or {}).get("data") or []
        if not (data or {}).get("success", True) or not songs:
            raise ProviderFetchFailure("Song not found")
        return songs[0]

    async def song_id_from_link(self, url: str) -> Optional[str]:
        data = await self._get("/api/songs", {"link": url})
        songs = (data or {}).get("data") or []
        return str(songs[0]["id"]) if songs and songs[0].get("id") else None

    async def find_exact(self, title: str, artist: str) -> Optional[str]:
        """Song id whose title and first primary artist equal the given ones, ignoring case."""
        data = await self._get("/api/search/songs", {"query": title})
        for song in ((data or {}).get("data") or {}).get("results") or []:
            primary = ((song.get("artists") or {}).get("primary") or [{}])[0].get("name") or ""
            name = html.unescape(song.get("name") or "")
            if name.lower() == title.lower() and html.unescape(primary).lower() == artist.lower():
                return str(song["id"])
        return None


# ───────────────────────────────────────────────
# 🔴 YouTube (yt-dlp)
# ───────────────────────────────────────────────
def normalize_youtube_entry(entry: dict) -> Optional[SearchResultItem]:
    video_id = entry.get("id")
    if not video_id:
        return None
    return SearchResultItem(
        title=entry.get("title") or "Unknown",
        artist=entry.get("artist") or entry.get("channel") or entry.get("uploader") or "Unknown",
        origin=Origin.LIVE_VIDEO,
        selection_key=video_id,
        duration=_seconds(entry.get("duration")),
        image_url=_youtube_thumbnail(entry, video_id),
    )


def _youtube_thumbnail(entry: dict, video_id: str) -> str:
    if entry.get("thumbnail"):
        return entry["thumbnail"]
    thumbnails = entry.get("thumbnails") or []
    if thumbnails and thumbnails[-1].get("url"):
        return thumbnails[-1]["url"]
    return f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"


class YouTubeClient:
    YDL_OPTS = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
    }

    def _extract(self, target: str, flat: bool) -> dict:
        opts = dict(self.YDL_OPTS, extract_flat="in_playlist" if flat else False)
        with yt_dlp.YoutubeDL(opts) as ydl:
            return ydl.extract_info(target, download=False) or {}

    async def _run(self, target: str, flat: bool) -> dict:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self._extract, target, flat))

    async def search(self, query: str, limit: int = 10) -> List[SearchResultItem]:
        info = await self._run(f"ytsearch{limit}:{query}", flat=True)
        items = [normalize_youtube_entry(entry) for entry in info.get("entries") or [] if entry]
        return [item for item in items if item][:limit]

    async def video_details(self, video_id: str) -> dict:
        try:
            info = await self._run(f"https://www.youtube.com/watch?v={video_id}", flat=False)
        except DownloadError as e:
            raise ProviderFetchFailure(f"Video unavailable: {e}") from e
        return {
            "title": info.get("track") or info.get("title") or "Unknown Title",
            "artist": info.get("artist") or info.get("uploader") or "Unknown Artist",
            "duration": _seconds(info.get("duration")) or 0,
            "thumbnail": _youtube_thumbnail(info, video_id),
        }


# ───────────────────────────────────────────────
# 🎧 Spotify (spotipy)
# ───────────────────────────────────────────────
def normalize_spotify_track(track: dict) -> dict:
    artists = [a.get("name") for a in track.get("artists") or [] if a.get("name")]
    album = track.get("album") or {}
    images = album.get("images") or []
    return {
        "title": track.get("name") or "Unknown Title",
        "artist": ", ".join(artists) or "Unknown Artist",
        "primary_artist": artists[0] if artists else "",
        "album": album.get("name") or "",
        "year": (album.get("release_date") or "")[:4],
        "duration": int((track.get("duration_ms") or 0) / 1000),
        "image_url": images[0].get("url") if images else None,
    }


class SpotifyClient:
    def __init__(self, client_id: str, client_secret: str):
        self._spotify = spotipy.Spotify(
            auth_manager=SpotifyClientCredentials(
                client_id=client_id,
                client_secret=client_secret,
            )
        )
        logger.info("🎧 Spotify client initialized.")

    async def track(self, track_id: str) -> dict:
        loop = asyncio.get_running_loop()
        try:
            raw = await loop.run_in_executor(None, self._spotify.track, track_id)
        except spotipy.SpotifyException as e:
            raise ProviderFetchFailure(f"Spotify track lookup failed: {e.msg}") from e
        return normalize_spotify_track(raw)
