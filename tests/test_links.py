from __future__ import annotations

import pytest
from fakes import FakeCatalog

from services.errors import ProviderFetchFailure
from services.links import LinkRouter
from services.models import Failed, FailureReason, Namespace, Origin, Replayed, RequestContext
from utils.links import SAAVN, SPOTIFY, YOUTUBE, detect_link, is_url, spotify_track_id, youtube_video_id

REQUEST = RequestContext(chat_id=1, reply_to_message_id=2)


class RecordingResolver:
    def __init__(self) -> None:
        self.selections = []

    async def resolve(self, selection, request):
        self.selections.append(selection)
        return Replayed(1, None)


class FakeSaavn:
    def __init__(self, link_id=None, exact_id=None) -> None:
        self.link_id = link_id
        self.exact_id = exact_id
        self.link_calls = []
        self.exact_calls = []

    async def song_id_from_link(self, url):
        self.link_calls.append(url)
        return self.link_id

    async def find_exact(self, title, artist):
        self.exact_calls.append((title, artist))
        return self.exact_id


class FakeSpotify:
    def __init__(self, error=None) -> None:
        self.error = error

    async def track(self, track_id):
        if self.error:
            raise ProviderFetchFailure(self.error)
        return {"title": "Believer", "artist": "Imagine Dragons, Lil Wayne", "primary_artist": "Imagine Dragons"}


# ───────────────────────────────────────────────
# URL parsing
# ───────────────────────────────────────────────
def test_detect_link() -> None:
    assert detect_link("https://www.youtube.com/watch?v=abc123") == YOUTUBE
    assert detect_link("https://youtu.be/abc123") == YOUTUBE
    assert detect_link("https://www.jiosaavn.com/song/believer/xyz") == SAAVN
    assert detect_link("https://open.spotify.com/track/4pbJqGIASGPr0ZpGpnWkDn") == SPOTIFY
    assert detect_link("https://example.com/song") is None
    assert detect_link("youtube believer") is None
    assert is_url("http://x.y") is True


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=7wtfhZwyrcc&list=RD",
        "https://youtu.be/7wtfhZwyrcc?si=share",
        "https://www.youtube.com/shorts/7wtfhZwyrcc",
        "https://music.youtube.com/watch?v=7wtfhZwyrcc",
    ],
)
def test_youtube_video_id(url: str) -> None:
    assert youtube_video_id(url) == "7wtfhZwyrcc"


def test_spotify_track_id() -> None:
    assert spotify_track_id("https://open.spotify.com/track/0pqnGHJpmpxLKifKRmU6WP?si=1") == "0pqnGHJpmpxLKifKRmU6WP"
    assert spotify_track_id("https://open.spotify.com/intl-de/track/0pqnGHJpmpxLKifKRmU6WP") == "0pqnGHJpmpxLKifKRmU6WP"
    assert spotify_track_id("https://open.spotify.com/album/0pqnGHJpmpxLKifKRmU6WP") is None


# ───────────────────────────────────────────────
# Routing
# ───────────────────────────────────────────────
@pytest.mark.anyio
async def test_unsupported_link_is_not_routed() -> None:
    resolver = RecordingResolver()
    router = LinkRouter(resolver, FakeCatalog(), FakeSaavn())

    assert await router.route("https://example.com/x", REQUEST) is None
    assert resolver.selections == []


@pytest.mark.anyio
async def test_youtube_link_becomes_live_video_selection() -> None:
    resolver = RecordingResolver()

    await LinkRouter(resolver, FakeCatalog(), FakeSaavn()).route("https://youtu.be/7wtfhZwyrcc", REQUEST)

    assert [(s.origin, s.key) for s in resolver.selections] == [(Origin.LIVE_VIDEO, "7wtfhZwyrcc")]


@pytest.mark.anyio
async def test_saavn_link_uses_catalog_source_url_first() -> None:
    url = "https://www.jiosaavn.com/song/believer/AAA"
    catalog = FakeCatalog()
    catalog.add(Namespace.AUDIO, "saavn-9", "Believer", "Imagine Dragons", ref=3, source_url=url)
    saavn = FakeSaavn(link_id="other")
    resolver = RecordingResolver()

    await LinkRouter(resolver, catalog, saavn).route(url, REQUEST)

    assert [(s.origin, s.key) for s in resolver.selections] == [(Origin.LIVE_AUDIO, "saavn-9")]
    assert saavn.link_calls == []


@pytest.mark.anyio
async def test_saavn_link_falls_back_to_api() -> None:
    saavn = FakeSaavn(link_id="api-id")
    resolver = RecordingResolver()

    await LinkRouter(resolver, FakeCatalog(), saavn).route("https://www.jiosaavn.com/song/x/BBB", REQUEST)

    assert [(s.origin, s.key) for s in resolver.selections] == [(Origin.LIVE_AUDIO, "api-id")]


@pytest.mark.anyio
async def test_spotify_link_prefers_exact_saavn_match() -> None:
    saavn = FakeSaavn(exact_id="saavn-believer")
    resolver = RecordingResolver()

    await LinkRouter(resolver, FakeCatalog(), saavn, FakeSpotify()).route(
        "https://open.spotify.com/track/0pqnGHJpmpxLKifKRmU6WP", REQUEST
    )

    assert saavn.exact_calls == [("Believer", "Imagine Dragons")]
    assert [(s.origin, s.key) for s in resolver.selections] == [(Origin.LIVE_AUDIO, "saavn-believer")]


@pytest.mark.anyio
async def test_spotify_link_without_saavn_match_stays_on_spotify() -> None:
    resolver = RecordingResolver()

    await LinkRouter(resolver, FakeCatalog(), FakeSaavn(), FakeSpotify()).route(
        "https://open.spotify.com/track/0pqnGHJpmpxLKifKRmU6WP", REQUEST
    )

    assert [(s.origin, s.key) for s in resolver.selections] == [(Origin.LIVE_STREAM, "0pqnGHJpmpxLKifKRmU6WP")]


@pytest.mark.anyio
async def test_spotify_disabled_reports_failure() -> None:
    resolver = RecordingResolver()

    outcome = await LinkRouter(resolver, FakeCatalog(), FakeSaavn()).route(
        "https://open.spotify.com/track/0pqnGHJpmpxLKifKRmU6WP", REQUEST
    )

    assert isinstance(outcome, Failed)
    assert outcome.reason is FailureReason.FETCH_ERROR
    assert resolver.selections == []


@pytest.mark.anyio
async def test_spotify_lookup_failure_is_reported() -> None:
    resolver = RecordingResolver()

    outcome = await LinkRouter(resolver, FakeCatalog(), FakeSaavn(), FakeSpotify(error="Spotify track lookup failed")).route(
        "https://open.spotify.com/track/0pqnGHJpmpxLKifKRmU6WP", REQUEST
    )

    assert outcome == Failed(FailureReason.FETCH_ERROR, "Spotify track lookup failed")
    assert resolver.selections == []
