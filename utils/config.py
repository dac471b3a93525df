import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_SAAVN_API_BASE = "https://saavn.sumit.co"
DEFAULT_MONGO_DB = "lunemusic"


@dataclass(frozen=True)
class Settings:
    bot_token: str
    mongo_uri: str
    channel_id: int
    owner_id: Optional[int] = None
    mongo_db: str = DEFAULT_MONGO_DB
    force_join_channel: Optional[str] = None
    saavn_api_base: str = DEFAULT_SAAVN_API_BASE
    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None
    session_ttl_seconds: int = 1800
    page_size: int = 10
    search_limit: int = 10
    broadcast_delay_seconds: float = 0.05
    caption_footer: str = ""

    @property
    def spotify_enabled(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret)

    @property
    def force_join_enabled(self) -> bool:
        return bool(self.force_join_channel)

    def is_owner(self, user_id: int) -> bool:
        return self.owner_id is not None and user_id == self.owner_id

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()

        required = {
            "TELEGRAM_BOT_TOKEN": os.getenv("TELEGRAM_BOT_TOKEN"),
            "MONGO_URI": os.getenv("MONGO_URI"),
            "CHANNEL_ID": os.getenv("CHANNEL_ID"),
        }
        missing = sorted(key for key, value in required.items() if not value)
        if missing:
            raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

        return cls(
            bot_token=required["TELEGRAM_BOT_TOKEN"],
            mongo_uri=required["MONGO_URI"],
            channel_id=_parse_int(required["CHANNEL_ID"], "CHANNEL_ID"),
            owner_id=_optional_int(os.getenv("OWNER_ID"), "OWNER_ID"),
            mongo_db=os.getenv("MONGO_DB") or DEFAULT_MONGO_DB,
            force_join_channel=(os.getenv("FORCE_JOIN_CHANNEL") or "").strip() or None,
            saavn_api_base=(os.getenv("SAAVN_API_BASE") or DEFAULT_SAAVN_API_BASE).rstrip("/"),
            spotify_client_id=os.getenv("SPOTIFY_CLIENT_ID") or None,
            spotify_client_secret=os.getenv("SPOTIFY_CLIENT_SECRET") or None,
            session_ttl_seconds=max(1, _parse_int(os.getenv("SESSION_TTL_SECONDS", "1800"), "SESSION_TTL_SECONDS")),
            page_size=max(1, _parse_int(os.getenv("PAGE_SIZE", "10"), "PAGE_SIZE")),
            search_limit=max(1, _parse_int(os.getenv("SEARCH_LIMIT", "10"), "SEARCH_LIMIT")),
            broadcast_delay_seconds=_parse_float(
                os.getenv("BROADCAST_DELAY_SECONDS", "0.05"), "BROADCAST_DELAY_SECONDS"
            ),
            caption_footer=os.getenv("CAPTION_FOOTER", ""),
        )


def _parse_int(raw: str, name: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


def _optional_int(raw: Optional[str], name: str) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    return _parse_int(raw, name)


def _parse_float(raw: str, name: str) -> float:
    try:
        return float(raw.strip())
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None
