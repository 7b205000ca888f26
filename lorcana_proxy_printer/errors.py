class ProxyPrinterError(Exception):
    pass


class CardSourceError(ProxyPrinterError):
    """Raised when a card source cannot produce an entry; shown to the user."""
    pass


class DecklistParseError(ProxyPrinterError):
    def __init__(self, reason, line=None, line_number=None):
        self.reason = reason
        self.line = line
        self.line_number = line_number
        if line_number is not None:
            super().__init__(f"Line {line_number}: {reason} ({line!r})")
        else:
            super().__init__(reason)


class ImageLoadError(ProxyPrinterError):
    pass


class EmptyCollectionError(ProxyPrinterError):
    pass
