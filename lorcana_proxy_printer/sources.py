"""
The four ways cards get into the collection.

Each function builds CardEntry objects and leaves committing them to the caller,
so the GUI can add them to the store from its own thread (with the generation it
captured) and the CLI can add them directly.
"""
import base64
import logging
import mimetypes
import os

from .config import MAX_SEARCH_RESULTS
from .decklist_parser import parse_decklist
from .errors import CardSourceError, ImageLoadError
from .image_loader import probe_image
from .lorcast import find_card, search_cards
from .models import CardEntry, CardOrigin, card_image_url

logger = logging.getLogger(__name__)


class FileImportResult:
    def __init__(self):
        self.entries = []
        self.failures = []  # (path, error message)


class ImportResult:
    def __init__(self):
        self.entries = []
        self.skipped = []  # (line, reason)


def search(query, search_url=None):
    """Results to show for a query; at most MAX_SEARCH_RESULTS, [] for blank or failed searches."""
    return search_cards(query, search_url)[:MAX_SEARCH_RESULTS]


def entry_from_search_result(card_data):
    entry = CardEntry.from_search_result(card_data, CardOrigin.SEARCH)
    if entry is None:
        raise CardSourceError(f"No image available for {card_data.get('name', 'this card')}")
    return entry


def entry_from_url(url, probe=probe_image):
    """Validate and probe a direct image URL; the stored source is the URL itself, unproxied."""
    url = (url or "").strip()
    if not url:
        raise CardSourceError("Please enter a valid URL")
    try:
        probe(url)
    except ImageLoadError as e:
        logger.warning("Direct URL rejected: %s", e)
        raise CardSourceError("Error loading the image") from e
    return CardEntry(image_source=url, origin=CardOrigin.URL)


def file_to_data_uri(path):
    mime, _ = mimetypes.guess_type(path)
    with open(path, "rb") as f:
        payload = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime or 'application/octet-stream'};base64,{payload}"


def entries_from_files(paths):
    """Encode each file independently; one unreadable file does not affect the others."""
    result = FileImportResult()
    for path in paths:
        try:
            source = file_to_data_uri(path)
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            result.failures.append((path, str(e)))
            continue
        result.entries.append(
            CardEntry(image_source=source, origin=CardOrigin.FILE, display_name=os.path.basename(path))
        )
    return result


def import_decklist(text, search_url=None, lookup=find_card):
    """
    Bulk import "<quantity> <name>[ - <version>]" lines, one search at a time.

    Lines that do not parse, whose search fails or finds nothing, or whose card has
    no image are skipped and listed in ImportResult.skipped.
    """
    if not text or not text.strip():
        raise CardSourceError("Clipboard is empty.")

    lines, errors = parse_decklist(text)
    result = ImportResult()
    for error in errors:
        result.skipped.append((error.line, error.reason))
    if not lines:
        if not errors:
            raise CardSourceError("No valid lines found in clipboard.")
        return result

    for line in lines:
        card = lookup(line.name, line.version, search_url=search_url)
        if card is None:
            logger.info("No match for %r", line.name)
            result.skipped.append((f"{line.quantity} {line.name}", "no matching card"))
            continue
        if not card_image_url(card):
            result.skipped.append((f"{line.quantity} {line.name}", "card has no image"))
            continue
        for _ in range(line.quantity):
            result.entries.append(CardEntry.from_search_result(card, CardOrigin.IMPORT))
    return result
