import logging

from .config import CARDS_PER_PAGE

logger = logging.getLogger(__name__)


class CardStore:
    """Ordered, in-memory collection of CardEntry objects.

    Insertion order is the print order. Entries are never modified; they are
    added, removed by id, or dropped all at once by clear().

    Work started before a clear() should commit through add_entries() with the
    generation it captured, so late results for a cleared collection are dropped.
    """

    def __init__(self):
        self._entries = []
        self.generation = 0
        self.current_page = 1

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self):
        return list(self._entries)

    @property
    def page_count(self):
        return max(1, -(-len(self._entries) // CARDS_PER_PAGE))

    def add(self, entry, generation=None):
        return self.add_entries([entry], generation) == 1

    def add_entries(self, entries, generation=None):
        """Append entries; returns how many were added (0 if the generation is stale)."""
        if generation is not None and generation != self.generation:
            logger.info("Discarding %d card(s) from before the collection was cleared", len(entries))
            return 0
        known = {entry.id for entry in self._entries}
        added = 0
        for entry in entries:
            if entry.id in known:
                continue
            self._entries.append(entry)
            known.add(entry.id)
            added += 1
        return added

    def remove(self, card_id):
        before = len(self._entries)
        self._entries = [entry for entry in self._entries if entry.id != card_id]
        self.current_page = min(self.current_page, self.page_count)
        return len(self._entries) != before

    def clear(self):
        self._entries = []
        self.generation += 1
        self.current_page = 1

    def go_to_page(self, page):
        self.current_page = min(max(1, page), self.page_count)
        return self.current_page

    def go_to_last_page(self):
        return self.go_to_page(self.page_count)

    def page_slots(self, page=None):
        """Entries shown on a 1-based page, padded with None to CARDS_PER_PAGE."""
        page = page or self.current_page
        start = (page - 1) * CARDS_PER_PAGE
        slots = self._entries[start:start + CARDS_PER_PAGE]
        return slots + [None] * (CARDS_PER_PAGE - len(slots))
