from __future__ import annotations

from fakes import result

from services.models import Origin, Selection
from templates.buttons import CANCEL_SEARCH, PageCallback, PlayCallback, result_label, search_results_kb
from utils.pagination import paginate


def _callbacks(markup) -> list[str]:
    return [button.callback_data for row in markup.inline_keyboard for button in row]


def test_video_results_get_red_icon() -> None:
    label = result_label(1, result("Believer", Origin.LIVE_VIDEO, duration=204))

    assert label == "1. 🔴 Believer - Artist [3:24]"


def test_audio_and_stream_results_get_green_icon() -> None:
    assert result_label(2, result("Song", Origin.CATALOG_AUDIO)).startswith("2. 🟢 ")
    assert result_label(3, result("Song", Origin.CATALOG_STREAM)).startswith("3. 🟢 ")


def test_label_without_duration_has_no_brackets() -> None:
    assert result_label(1, result("Song", Origin.LIVE_AUDIO)) == "1. 🟢 Song - Artist"


def test_long_labels_are_capped() -> None:
    label = result_label(1, result("A" * 80, Origin.LIVE_AUDIO, duration=100))

    assert len(label) == 60
    assert label.endswith("...")


def test_keyboard_numbers_items_globally() -> None:
    items = [result(f"Song {i}", key=f"id{i}") for i in range(15)]
    markup = search_results_kb(paginate(items, 2, 10))

    first = markup.inline_keyboard[0][0]
    assert first.text.startswith("11. ")
    assert first.callback_data == "play|saavan_api|id10"


def test_keyboard_navigation_rows() -> None:
    items = [result(f"Song {i}", key=f"id{i}") for i in range(25)]

    middle = _callbacks(search_results_kb(paginate(items, 2, 10)))
    assert "page|1" in middle
    assert "page|3" in middle
    assert middle[-1] == CANCEL_SEARCH

    single = _callbacks(search_results_kb(paginate(items[:3], 1, 10)))
    assert not any(data.startswith("page|") for data in single)
    assert single[-1] == CANCEL_SEARCH


def test_play_callback_round_trip() -> None:
    packed = PlayCallback(origin=Origin.CATALOG_VIDEO, key="65f0c0ffee").pack()

    assert packed == "play|youtube|65f0c0ffee"
    assert PlayCallback.unpack(packed).to_selection() == Selection(Origin.CATALOG_VIDEO, "65f0c0ffee")


def test_placeholder_key_decodes_to_invalid_selection() -> None:
    selection = PlayCallback.unpack("play|saavan_api|undefined").to_selection()

    assert selection.origin is Origin.LIVE_AUDIO
    assert selection.has_valid_key is False


def test_page_callback() -> None:
    assert PageCallback(page=4).pack() == "page|4"
    assert PageCallback.unpack("page|2").page == 2
