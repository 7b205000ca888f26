"""
Lorcana Proxy Printer: collect card images and print them 3x3 per page.

Modules:
    - lorcast: card database search
    - decklist_parser: "<quantity> <name>[ - <version>]" records
    - sources: search result, direct URL, local file and clipboard adapters
    - image_loader: image loading with relay rotation and retry
    - pdf_generator: page layout, rasterization and PDF assembly
    - card_store: the in-memory card collection
    - gui: Tk application
"""

__version__ = "1.0.0"

from .card_store import CardStore
from .errors import (
    CardSourceError,
    DecklistParseError,
    EmptyCollectionError,
    ImageLoadError,
    ProxyPrinterError,
)
from .models import CardEntry, CardOrigin
from .pdf_generator import RenderState, generate_pdf

__all__ = [
    "CardStore",
    "CardEntry",
    "CardOrigin",
    "RenderState",
    "generate_pdf",
    "ProxyPrinterError",
    "CardSourceError",
    "DecklistParseError",
    "EmptyCollectionError",
    "ImageLoadError",
]
