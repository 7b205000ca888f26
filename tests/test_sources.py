import base64

import pytest

from conftest import FakeResponse, image_bytes, lorcast_card
from lorcana_proxy_printer.errors import CardSourceError, ImageLoadError
from lorcana_proxy_printer.models import CardOrigin
from lorcana_proxy_printer.sources import (
    entries_from_files,
    entry_from_search_result,
    entry_from_url,
    import_decklist,
    search,
)

TAILOR_URL = "https://img.example/tailor.avif"
MICKEY_RESULTS = [
    lorcast_card("Mickey Mouse", "Steamboat Pilot", "https://img.example/steamboat.avif"),
    lorcast_card("Mickey Mouse", "Brave Little Tailor", TAILOR_URL),
]


def test_search_shows_at_most_twelve_results(http):
    many = [lorcast_card(f"Card {i}", None, f"https://img.example/{i}.png") for i in range(30)]
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": many})
    assert search("card") == many[:12]


def test_entry_from_search_result_keeps_original_url():
    entry = entry_from_search_result(MICKEY_RESULTS[1])
    assert entry.image_source == TAILOR_URL
    assert entry.origin is CardOrigin.SEARCH
    assert entry.display_name == "Mickey Mouse"
    assert entry.set_name == "The First Chapter"
    assert entry.version_name == "Brave Little Tailor"


def test_entry_from_search_result_without_image():
    with pytest.raises(CardSourceError):
        entry_from_search_result({"name": "Broken", "image_uris": {}})


def test_clipboard_import_picks_matching_version(http):
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": MICKEY_RESULTS})
    result = import_decklist("2 Mickey Mouse - Brave Little Tailor")
    assert len(result.entries) == 2
    assert all(e.image_source == TAILOR_URL for e in result.entries)
    assert all(e.origin is CardOrigin.IMPORT for e in result.entries)
    assert result.entries[0].id != result.entries[1].id
    assert http[0][1]["params"] == {"q": "Mickey Mouse"}
    assert result.skipped == []


@pytest.mark.parametrize("line", ["0 Mickey Mouse", "-2 Mickey Mouse", "abc Mickey Mouse", "x2 Mickey Mouse"])
def test_clipboard_import_rejects_bad_quantity(http, line):
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": MICKEY_RESULTS})
    result = import_decklist(line)
    assert result.entries == []
    assert len(result.skipped) == 1
    assert http == []


def test_clipboard_import_skips_failed_lines_and_keeps_order(http):
    stitch = lorcast_card("Stitch", "Rock Star", "https://img.example/stitch.png")

    def handler(url, **kwargs):
        query = kwargs["params"]["q"]
        if query == "Stitch":
            return FakeResponse(json_data={"results": [stitch]})
        if query == "Offline Card":
            return FakeResponse(503)
        if query == "Mickey Mouse":
            return FakeResponse(json_data={"results": MICKEY_RESULTS})
        return FakeResponse(json_data={"results": []})

    http.handler = handler
    text = "1 Stitch\nnonsense\n3 Offline Card\n1 Nobody\n\n1 Mickey Mouse - Brave Little Tailor\n"
    result = import_decklist(text)
    assert [e.image_source for e in result.entries] == ["https://img.example/stitch.png", TAILOR_URL]
    assert [q[1]["params"]["q"] for q in http] == ["Stitch", "Offline Card", "Nobody", "Mickey Mouse"]
    assert len(result.skipped) == 3


def test_clipboard_import_skips_cards_without_image(http):
    card = {"name": "Ghost", "version": None, "set": {"name": "Set"}, "image_uris": None}
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": [card]})
    result = import_decklist("2 Ghost")
    assert result.entries == []
    assert result.skipped == [("2 Ghost", "card has no image")]


def test_clipboard_import_empty_text():
    with pytest.raises(CardSourceError, match="Clipboard is empty."):
        import_decklist("  \n ")
    with pytest.raises(CardSourceError, match="No valid lines"):
        import_decklist("# just a comment")


def test_entry_from_url_blank():
    with pytest.raises(CardSourceError, match="Please enter a valid URL"):
        entry_from_url("   ", probe=lambda url: pytest.fail("must not probe"))


def test_entry_from_url_probes_and_keeps_stripped_url():
    probed = []
    entry = entry_from_url("  https://img.example/card.png ", probe=probed.append)
    assert probed == ["https://img.example/card.png"]
    assert entry.image_source == "https://img.example/card.png"
    assert entry.origin is CardOrigin.URL


def test_entry_from_url_rejects_undecodable_image(http):
    http.handler = lambda url, **kwargs: FakeResponse(200, content=b"<html>not an image</html>")
    with pytest.raises(CardSourceError, match="Error loading the image"):
        entry_from_url("https://img.example/card.png")


def test_entry_from_url_accepts_real_image(http):
    http.handler = lambda url, **kwargs: FakeResponse(200, content=image_bytes())
    entry = entry_from_url("https://img.example/card.png")
    assert http[0][0] == "https://img.example/card.png"
    assert entry.image_source == "https://img.example/card.png"


def test_entry_from_url_probe_error_leaves_nothing():
    def failing_probe(url):
        raise ImageLoadError("404")
    with pytest.raises(CardSourceError):
        entry_from_url("https://img.example/missing.png", probe=failing_probe)


def test_entries_from_files_is_per_file(tmp_path):
    good = tmp_path / "elsa.png"
    good.write_bytes(image_bytes())
    missing = tmp_path / "missing.png"
    result = entries_from_files([str(good), str(missing)])
    assert len(result.entries) == 1
    entry = result.entries[0]
    assert entry.origin is CardOrigin.FILE
    assert entry.display_name == "elsa.png"
    header, payload = entry.image_source.split(",", 1)
    assert header == "data:image/png;base64"
    assert base64.b64decode(payload) == good.read_bytes()
    assert [path for path, _ in result.failures] == [str(missing)]
