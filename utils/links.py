import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

YOUTUBE = "youtube"
SAAVN = "saavn"
SPOTIFY = "spotify"

_YOUTUBE_MARKERS = ("youtube.com", "youtu.be")
_SAAVN_MARKERS = ("jiosaavn.com", "saavn.com")
_SPOTIFY_MARKERS = ("open.spotify.com", "spotify.com")

_YOUTUBE_PATH_ID = re.compile(r"(?:youtu\.be/|/shorts/|/live/|/embed/)([A-Za-z0-9_-]{6,})")
_SPOTIFY_TRACK_ID = re.compile(r"/track/([A-Za-z0-9]+)")


# ───────────────────────────────────────────────
# 🔍 URL detection
# ───────────────────────────────────────────────
def is_url(text: str) -> bool:
    return bool(re.match(r"https?://", (text or "").strip(), re.I))


def detect_link(text: str) -> Optional[str]:
    """Which provider a URL-shaped message belongs to, or None."""
    if not is_url(text):
        return None
    lowered = text.strip().lower()
    if any(marker in lowered for marker in _YOUTUBE_MARKERS):
        return YOUTUBE
    if any(marker in lowered for marker in _SAAVN_MARKERS):
        return SAAVN
    if any(marker in lowered for marker in _SPOTIFY_MARKERS):
        return SPOTIFY
    return None


# ───────────────────────────────────────────────
# 🆔 Provider id extraction
# ───────────────────────────────────────────────
def youtube_video_id(url: str) -> Optional[str]:
    url = url.strip()
    query_id = parse_qs(urlparse(url).query).get("v")
    if query_id and query_id[0]:
        return query_id[0]
    match = _YOUTUBE_PATH_ID.search(url)
    return match.group(1) if match else None


def spotify_track_id(url: str) -> Optional[str]:
    match = _SPOTIFY_TRACK_ID.search(urlparse(url.strip()).path)
    return match.group(1) if match else None
