import re

from .errors import DecklistParseError

# "<quantity> <name>[ - <version>]"; the first spaced hyphen splits name and version
_QUANTITY = re.compile(r'^(\S+)\s+(.*)$')
_VERSION_SEPARATOR = re.compile(r'\s+-\s*|\s*-\s+')


class DecklistLine:
    def __init__(self, quantity, name, version=None, line_number=None):
        self.quantity = quantity
        self.name = name
        self.version = version
        self.line_number = line_number

    def __eq__(self, other):
        if not isinstance(other, DecklistLine):
            return NotImplemented
        return (self.quantity, self.name, self.version) == (other.quantity, other.name, other.version)

    def __repr__(self):
        return f"DecklistLine({self.quantity!r}, {self.name!r}, {self.version!r})"


def parse_line(line, line_number=None):
    """
    Parse a single decklist record.

    Returns None for blank lines and '#' comments. Raises DecklistParseError
    for anything else that is not "<positive integer> <name>[ - <version>]".
    Example: "2 Mickey Mouse - Brave Little Tailor" -> (2, "Mickey Mouse", "Brave Little Tailor")
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    match = _QUANTITY.match(line)
    if not match:
        if line.isdigit():
            raise DecklistParseError("missing card name", line, line_number)
        raise DecklistParseError("missing quantity", line, line_number)

    quantity_token, rest = match.group(1), match.group(2).strip()
    if not quantity_token.isascii() or not quantity_token.isdigit() or int(quantity_token) < 1:
        raise DecklistParseError("quantity must be a positive integer", line, line_number)

    version = None
    parts = _VERSION_SEPARATOR.split(rest, maxsplit=1)
    name = parts[0].strip()
    if len(parts) == 2:
        version = parts[1].strip()
        if not version:
            raise DecklistParseError("empty version", line, line_number)

    if not name:
        raise DecklistParseError("missing card name", line, line_number)

    return DecklistLine(int(quantity_token), name, version, line_number)


def parse_decklist(text):
    """Parse multi-line text, returning (lines, errors); malformed lines never stop the parse."""
    entries = []
    errors = []
    for number, raw in enumerate(text.splitlines(), start=1):
        try:
            parsed = parse_line(raw, number)
        except DecklistParseError as e:
            errors.append(e)
            continue
        if parsed is not None:
            entries.append(parsed)
    return entries, errors
