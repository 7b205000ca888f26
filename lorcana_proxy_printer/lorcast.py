import logging

import requests
from requests.exceptions import Timeout, RequestException

from .config import CONNECT_TIMEOUT, READ_TIMEOUT, SEARCH_URL, USER_AGENT

logger = logging.getLogger(__name__)


def search_cards(query, search_url=None):
    """
    Search the Lorcast card database.

    A blank query returns no results without touching the network. Any transport
    error, non-2xx status or unreadable body is logged and treated as zero results.
    """
    if not query or not query.strip():
        return []

    url = search_url or SEARCH_URL
    try:
        response = requests.get(
            url,
            params={"q": query.strip()},
            headers={"User-Agent": USER_AGENT},
            timeout=(CONNECT_TIMEOUT, READ_TIMEOUT)
        )
        response.raise_for_status()
        data = response.json()
    except Timeout:
        logger.warning("Timeout searching Lorcast for %r", query)
        return []
    except RequestException as e:
        logger.warning("Search error for %r: %s", query, e)
        return []
    except ValueError as e:
        logger.warning("Unreadable search response for %r: %s", query, e)
        return []

    # The API returns results inside the 'results' object
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        return []
    return [card for card in results if isinstance(card, dict)]


def find_card(name, version=None, search_url=None):
    """Pick the result whose version matches (case-insensitive), else the first result."""
    results = search_cards(name, search_url)
    if version:
        wanted = version.casefold()
        for card in results:
            if isinstance(card.get("version"), str) and card["version"].casefold() == wanted:
                return card
    return results[0] if results else None
