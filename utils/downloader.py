"""
Media helpers for the fetch pipelines: yt-dlp audio downloads,
plain HTTP downloads through aiohttp and ffmpeg metadata embedding.
"""
import asyncio
import logging
import os
import re
import sys
from typing import Dict, List, Optional

import aiohttp

logger = logging.getLogger("downloader")

# ───────────────────────────────────────────────
# ⚙️ Constants
# ───────────────────────────────────────────────
YTDLP_BIN = sys.executable
YTDLP_ARGS = ["-m", "yt_dlp"]
FFMPEG_BIN = "ffmpeg"
AUDIO_BITRATE = "320k"
HTTP_TIMEOUT = aiohttp.ClientTimeout(total=120)


# ───────────────────────────────────────────────
# ⚙️ Async subprocess runner
# ───────────────────────────────────────────────
async def _run(cmd: List[str]) -> tuple[str, str]:
    """Executes an async subprocess and captures output."""
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()

    if proc.returncode != 0:
        error_msg = stderr.decode(errors="ignore")
        logger.error(f"Command failed: {' '.join(cmd)}\n{error_msg}")
        raise RuntimeError(f"Command failed: {error_msg.strip()[-300:]}")

    return stdout.decode(errors="ignore"), stderr.decode(errors="ignore")


def safe_filename(title: str, artist: str) -> str:
    """'<title> - <artist>.mp3' without characters filesystems reject."""
    clean_title = re.sub(r'[<>:"/\\|?*]', "", title or "").strip()[:100] or "Unknown"
    clean_artist = re.sub(r'[<>:"/\\|?*]', "", artist or "").strip()[:50] or "Unknown"
    return f"{clean_title} - {clean_artist}.mp3"


# ───────────────────────────────────────────────
# 🌐 Plain HTTP download
# ───────────────────────────────────────────────
async def download_file(url: str, dest: str, session: Optional[aiohttp.ClientSession] = None) -> str:
    """Streams url into dest. Redirects are followed by aiohttp."""
    owns_session = session is None
    session = session or aiohttp.ClientSession(timeout=HTTP_TIMEOUT)
    try:
        async with session.get(url) as resp:
            if resp.status != 200:
                raise RuntimeError(f"Failed to download: HTTP {resp.status}")
            with open(dest, "wb") as fh:
                async for chunk in resp.content.iter_chunked(64 * 1024):
                    fh.write(chunk)
    except Exception:
        remove_quietly(dest)
        raise
    finally:
        if owns_session:
            await session.close()
    return dest


# ───────────────────────────────────────────────
# 🎬 yt-dlp audio extraction
# ───────────────────────────────────────────────
async def download_audio(target: str, tmpdir: str, stem: str = "source") -> str:
    """
    Downloads the best audio stream of target as MP3.

    target is anything yt-dlp accepts: a watch URL or a "ytsearch1:<query>" expression.
    Returns the path of the produced MP3.
    """
    logger.info(f"⬇️ Running yt-dlp for: {target}")
    cookies = os.path.join(os.getcwd(), "cookies.txt")
    out_path = os.path.join(tmpdir, f"{stem}.%(ext)s")

    cmd = [
        YTDLP_BIN, *YTDLP_ARGS,
        "-f", "bestaudio/best",
        "-x", "--audio-format", "mp3",
        "--audio-quality", "0",
        "-o", out_path,
        "--no-playlist",
        "--no-warnings",
        "--socket-timeout", "60",
        "--retries", "3",
        "--geo-bypass",
        "--no-color",
    ]
    if os.path.exists(cookies):
        cmd += ["--cookies", cookies]
        logger.info("🍪 Using cookies")
    cmd.append(target)

    try:
        await _run(cmd)
    except RuntimeError as e:
        error_str = str(e).lower()
        if "sign in" in error_str or "bot" in error_str:
            raise RuntimeError("Bot detection. Try: 1) Add cookies.txt, 2) Update yt-dlp") from e
        if "403" in error_str or "forbidden" in error_str:
            raise RuntimeError("Access forbidden. Content may be private or geo-blocked.") from e
        if "timeout" in error_str or "timed out" in error_str:
            raise RuntimeError("Connection timeout. Try again later.") from e
        raise RuntimeError(f"Download failed: {e}") from e

    mp3_path = os.path.join(tmpdir, f"{stem}.mp3")
    if not os.path.exists(mp3_path):
        raise RuntimeError("Audio download failed")
    return mp3_path


# ───────────────────────────────────────────────
# 🔧 ffmpeg metadata + cover embedding
# ───────────────────────────────────────────────
async def embed_metadata(
    in_path: str,
    out_path: str,
    metadata: Dict[str, str],
    cover_path: Optional[str] = None,
) -> str:
    """Re-encodes in_path to a 320k MP3 with ID3v2.3 tags and an optional front cover."""
    cmd = [FFMPEG_BIN, "-y", "-i", in_path]
    if cover_path:
        cmd += ["-i", cover_path, "-map", "0:a", "-map", "1:0", "-c:v", "mjpeg"]
    cmd += ["-c:a", "libmp3lame", "-b:a", AUDIO_BITRATE, "-id3v2_version", "3"]
    if cover_path:
        cmd += ["-metadata:s:v", "title=Album cover", "-metadata:s:v", "comment=Cover (front)"]
    for key, value in metadata.items():
        if value:
            cmd += ["-metadata", f"{key}={_clean_tag(value)}"]
    cmd.append(out_path)

    await _run(cmd)
    if not os.path.exists(out_path):
        raise RuntimeError("FFmpeg conversion failed - file not created")

    size_mb = os.path.getsize(out_path) / (1024 * 1024)
    logger.info(f"✅ Encoded {os.path.basename(out_path)} ({size_mb:.2f}MB)")
    return out_path


def _clean_tag(value) -> str:
    return str(value).replace("\r", " ").replace("\n", " ").strip()


def remove_quietly(path: Optional[str]):
    if not path:
        return
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as e:
        logger.warning(f"⚠️ Could not delete temp file {path}: {e}")
