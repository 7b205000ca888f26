import random
import time
from dataclasses import dataclass
from enum import Enum


class CardOrigin(Enum):
    SEARCH = "search"
    URL = "url"
    FILE = "file"
    IMPORT = "import"


def new_card_id():
    """Timestamp plus a random tie-break, so ids created in the same tick differ."""
    return f"{time.time_ns():x}-{random.getrandbits(32):08x}"


@dataclass(frozen=True)
class CardEntry:
    image_source: str
    origin: CardOrigin
    display_name: str = None
    set_name: str = None
    version_name: str = None
    id: str = None

    def __post_init__(self):
        if self.id is None:
            object.__setattr__(self, "id", new_card_id())

    @classmethod
    def from_search_result(cls, card_data, origin=CardOrigin.SEARCH):
        """Build an entry from a search API card object, keeping the unproxied image URL."""
        image_url = card_image_url(card_data)
        if not image_url:
            return None
        return cls(
            image_source=image_url,
            origin=origin,
            display_name=card_data.get("name"),
            set_name=(card_data.get("set") or {}).get("name") or None,
            version_name=card_data.get("version") or None,
        )

    @property
    def label(self):
        if self.display_name and self.version_name:
            return f"{self.display_name} - {self.version_name}"
        return self.display_name or self.image_source[:60]


def card_image_url(card_data):
    try:
        return card_data["image_uris"]["digital"]["normal"]
    except (KeyError, TypeError):
        return None
