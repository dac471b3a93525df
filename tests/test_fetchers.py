from __future__ import annotations

import os

import pytest

from services.errors import ProviderFetchFailure
from services.fetchers import Fetcher, PreparedAudio
from services.models import Namespace, RequestContext
from utils.downloader import safe_filename

REQUEST = RequestContext(chat_id=7, reply_to_message_id=3)


class UploadingPublisher:
    def __init__(self) -> None:
        self.uploads = []

    async def publish_audio(self, request, path, title, artist, duration):
        self.uploads.append((os.path.basename(path), os.path.exists(path), title, artist, duration))
        return 321


class LocalFetcher(Fetcher):
    namespace = Namespace.AUDIO
    label = "Local"

    def __init__(self, publisher, fail_with=None) -> None:
        super().__init__(publisher, http=None)
        self.fail_with = fail_with
        self.tmpdirs = []

    async def prepare(self, provider_id: str, tmpdir: str) -> PreparedAudio:
        self.tmpdirs.append(tmpdir)
        if self.fail_with:
            raise self.fail_with
        source = os.path.join(tmpdir, "source.mp4")
        with open(source, "wb") as f:
            f.write(b"audio")
        return PreparedAudio(
            source_path=source,
            title="Believer",
            artist="Imagine Dragons",
            duration=204,
            source_url="https://www.jiosaavn.com/song/believer/x",
            tags={"album": "Evolve"},
        )


@pytest.fixture
def fake_encoder(monkeypatch: pytest.MonkeyPatch):
    calls = []

    async def fake_embed(in_path, out_path, metadata, cover_path=None):
        calls.append(metadata)
        with open(out_path, "wb") as f:
            f.write(b"mp3")
        return out_path

    monkeypatch.setattr("services.fetchers.embed_metadata", fake_embed)
    return calls


@pytest.mark.anyio
async def test_fetch_and_publish(fake_encoder) -> None:
    publisher = UploadingPublisher()
    fetcher = LocalFetcher(publisher)

    track = await fetcher.fetch_and_publish("song-1", REQUEST)

    assert track.provider_id == "song-1"
    assert track.distribution_ref == 321
    assert track.duration == 204
    assert track.source_url == "https://www.jiosaavn.com/song/believer/x"
    assert publisher.uploads == [(safe_filename("Believer", "Imagine Dragons"), True, "Believer", "Imagine Dragons", 204)]
    assert fake_encoder[0]["album"] == "Evolve"
    assert fake_encoder[0]["comment"] == "Downloaded from Local"
    assert not os.path.exists(fetcher.tmpdirs[0])


@pytest.mark.anyio
async def test_unexpected_errors_become_fetch_failures(fake_encoder) -> None:
    fetcher = LocalFetcher(UploadingPublisher(), fail_with=RuntimeError("Audio download failed"))

    with pytest.raises(ProviderFetchFailure, match="Audio download failed"):
        await fetcher.fetch_and_publish("song-1", REQUEST)

    assert not os.path.exists(fetcher.tmpdirs[0])


def test_safe_filename() -> None:
    assert safe_filename("Believer", "Imagine Dragons") == "Believer - Imagine Dragons.mp3"
