from __future__ import annotations

import pytest

from utils.config import DEFAULT_SAAVN_API_BASE, Settings

ENV_VARS = (
    "TELEGRAM_BOT_TOKEN",
    "MONGO_URI",
    "CHANNEL_ID",
    "OWNER_ID",
    "MONGO_DB",
    "FORCE_JOIN_CHANNEL",
    "SAAVN_API_BASE",
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "SESSION_TTL_SECONDS",
    "PAGE_SIZE",
    "SEARCH_LIMIT",
    "BROADCAST_DELAY_SECONDS",
    "CAPTION_FOOTER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017")
    monkeypatch.setenv("CHANNEL_ID", "-1001234567890")


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _required(monkeypatch)

    settings = Settings.from_env(dotenv=False)

    assert settings.channel_id == -1001234567890
    assert settings.owner_id is None
    assert settings.mongo_db == "lunemusic"
    assert settings.saavn_api_base == DEFAULT_SAAVN_API_BASE
    assert settings.session_ttl_seconds == 1800
    assert settings.page_size == 10
    assert settings.search_limit == 10
    assert settings.broadcast_delay_seconds == 0.05
    assert settings.spotify_enabled is False
    assert settings.force_join_enabled is False
    assert settings.is_owner(1) is False


def test_optional_values(monkeypatch: pytest.MonkeyPatch) -> None:
    _required(monkeypatch)
    monkeypatch.setenv("OWNER_ID", "555")
    monkeypatch.setenv("FORCE_JOIN_CHANNEL", " @lunemusic ")
    monkeypatch.setenv("SAAVN_API_BASE", "https://saavn.example/")
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
    monkeypatch.setenv("PAGE_SIZE", "5")

    settings = Settings.from_env(dotenv=False)

    assert settings.is_owner(555) is True
    assert settings.force_join_channel == "@lunemusic"
    assert settings.saavn_api_base == "https://saavn.example"
    assert settings.spotify_enabled is True
    assert settings.page_size == 5


def test_missing_required_variables_are_listed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")

    with pytest.raises(RuntimeError, match="CHANNEL_ID, MONGO_URI"):
        Settings.from_env(dotenv=False)


def test_bad_integer_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    _required(monkeypatch)
    monkeypatch.setenv("CHANNEL_ID", "my-channel")

    with pytest.raises(RuntimeError, match="CHANNEL_ID must be an integer"):
        Settings.from_env(dotenv=False)
