import os
from urllib.parse import quote

# Add timeout constants
CONNECT_TIMEOUT = 5  # seconds
READ_TIMEOUT = 10    # seconds

USER_AGENT = "LorcanaProxyPrinter/1.0"

SEARCH_URL = os.environ.get(
    "LORCAST_SEARCH_URL", "https://api.lorcast.com/v0/cards/search"
)
MAX_SEARCH_RESULTS = 12

# Relays are tried in this order, rotating on each failed attempt
CORS_RELAYS = (
    lambda url: f"https://api.allorigins.win/raw?url={quote(url, safe='')}",
    lambda url: f"https://corsproxy.io/?{quote(url, safe='')}",
    lambda url: f"https://thingproxy.freeboard.io/fetch/{url}",
)
LOAD_RETRIES = 5
RETRY_DELAY = 0.4  # seconds

CARDS_PER_ROW = 3
CARDS_PER_COL = 3
CARDS_PER_PAGE = CARDS_PER_ROW * CARDS_PER_COL

# Lorcana card dimensions (64x89mm)
CARD_WIDTH_MM = 64
CARD_HEIGHT_MM = 89
SPACING_MM = 0

# Letter size: 8.5 x 11 inches = 215.9 x 279.4 mm
PAGE_WIDTH_MM = 215.9
PAGE_HEIGHT_MM = 279.4

DPI = 150
JPEG_QUALITY = 92


class PrintSettings:
    """Layout parameters for one PDF render."""

    def __init__(self, dpi=DPI, retries=LOAD_RETRIES, retry_delay=RETRY_DELAY,
                 relays=CORS_RELAYS, page_size_mm=(PAGE_WIDTH_MM, PAGE_HEIGHT_MM),
                 card_size_mm=(CARD_WIDTH_MM, CARD_HEIGHT_MM), spacing_mm=SPACING_MM,
                 max_workers=8):
        self.dpi = dpi
        self.retries = retries
        self.retry_delay = retry_delay
        self.relays = tuple(relays)
        self.page_width_mm, self.page_height_mm = page_size_mm
        self.card_width_mm, self.card_height_mm = card_size_mm
        self.spacing_mm = spacing_mm
        self.max_workers = max_workers

    def mm_to_px(self, mm):
        return round(mm / 25.4 * self.dpi)

    @property
    def page_size_px(self):
        return self.mm_to_px(self.page_width_mm), self.mm_to_px(self.page_height_mm)

    @property
    def grid_margin_mm(self):
        """Offset that centres the card grid on the page (never negative)."""
        grid_width = self.card_width_mm * CARDS_PER_ROW + self.spacing_mm * (CARDS_PER_ROW - 1)
        grid_height = self.card_height_mm * CARDS_PER_COL + self.spacing_mm * (CARDS_PER_COL - 1)
        return (
            max(0, (self.page_width_mm - grid_width) / 2),
            max(0, (self.page_height_mm - grid_height) / 2),
        )
