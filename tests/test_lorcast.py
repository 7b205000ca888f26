import requests

from conftest import FakeResponse, lorcast_card
from lorcana_proxy_printer.lorcast import find_card, search_cards

MICKEY_RESULTS = [
    lorcast_card("Mickey Mouse", "Steamboat Pilot", "https://img.example/steamboat.avif"),
    lorcast_card("Mickey Mouse", "Brave Little Tailor", "https://img.example/tailor.avif"),
]


def test_blank_query_makes_no_request(http):
    assert search_cards("   ") == []
    assert search_cards("") == []
    assert http == []


def test_search_sends_query_and_returns_results(http):
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": MICKEY_RESULTS})
    results = search_cards("  Mickey Mouse ", search_url="https://search.example/cards")
    assert results == MICKEY_RESULTS
    url, kwargs = http[0]
    assert url == "https://search.example/cards"
    assert kwargs["params"] == {"q": "Mickey Mouse"}
    assert "User-Agent" in kwargs["headers"]


def test_non_2xx_is_treated_as_no_results(http):
    http.handler = lambda url, **kwargs: FakeResponse(500, json_data={"results": MICKEY_RESULTS})
    assert search_cards("Mickey Mouse") == []


def test_transport_error_is_treated_as_no_results(http):
    def boom(url, **kwargs):
        raise requests.ConnectionError("unreachable")
    http.handler = boom
    assert search_cards("Mickey Mouse") == []


def test_unreadable_body_is_treated_as_no_results(http):
    http.handler = lambda url, **kwargs: FakeResponse(200, json_data=None)
    assert search_cards("Mickey Mouse") == []
    http.handler = lambda url, **kwargs: FakeResponse(200, json_data={"results": "nope"})
    assert search_cards("Mickey Mouse") == []


def test_find_card_matches_version_case_insensitively(http):
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": MICKEY_RESULTS})
    assert find_card("Mickey Mouse", "brave LITTLE tailor") == MICKEY_RESULTS[1]


def test_find_card_falls_back_to_first_result(http):
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": MICKEY_RESULTS})
    assert find_card("Mickey Mouse", "Unknown Version") == MICKEY_RESULTS[0]
    assert find_card("Mickey Mouse") == MICKEY_RESULTS[0]


def test_find_card_without_results(http):
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": []})
    assert find_card("Nobody") is None


def test_find_card_ignores_non_string_versions(http):
    odd = [lorcast_card("Mickey Mouse", 7, "https://img.example/seven.avif"),
           lorcast_card("Mickey Mouse", None, "https://img.example/none.avif")] + MICKEY_RESULTS
    http.handler = lambda url, **kwargs: FakeResponse(json_data={"results": odd})
    assert find_card("Mickey Mouse", "Brave Little Tailor") == MICKEY_RESULTS[1]
    assert find_card("Mickey Mouse", "7") == odd[0]
