import pytest

from lorcana_proxy_printer.decklist_parser import DecklistLine, parse_decklist, parse_line
from lorcana_proxy_printer.errors import DecklistParseError


@pytest.mark.parametrize("line, expected", [
    ("2 Mickey Mouse - Brave Little Tailor", DecklistLine(2, "Mickey Mouse", "Brave Little Tailor")),
    ("4 Mickey Mouse", DecklistLine(4, "Mickey Mouse")),
    ("1 Half-Hexwell Crown", DecklistLine(1, "Half-Hexwell Crown")),
    ("3   Stitch -  Rock Star  ", DecklistLine(3, "Stitch", "Rock Star")),
    ("1 Stitch - Carefree Surfer - Alt Art", DecklistLine(1, "Stitch", "Carefree Surfer - Alt Art")),
    ("\t10\tBe Prepared", DecklistLine(10, "Be Prepared")),
])
def test_parse_valid_lines(line, expected):
    assert parse_line(line) == expected


@pytest.mark.parametrize("line", ["", "   ", "# sideboard"])
def test_blank_and_comment_lines_are_ignored(line):
    assert parse_line(line) is None


@pytest.mark.parametrize("line, reason", [
    ("0 Mickey Mouse", "quantity must be a positive integer"),
    ("-1 Mickey Mouse", "quantity must be a positive integer"),
    ("two Mickey Mouse", "quantity must be a positive integer"),
    ("2x Mickey Mouse", "quantity must be a positive integer"),
    ("Mickey", "missing quantity"),
    ("3", "missing card name"),
    ("2 - Brave Little Tailor", "missing card name"),
    ("2 Mickey Mouse -", "empty version"),
])
def test_malformed_lines(line, reason):
    with pytest.raises(DecklistParseError) as exc:
        parse_line(line, line_number=7)
    assert exc.value.reason == reason
    assert exc.value.line_number == 7


def test_parse_decklist_collects_errors_per_line():
    text = "2 Mickey Mouse\n\nnot a card\n0 Stitch\n1 Maui - Hero to All\r\n"
    lines, errors = parse_decklist(text)
    assert lines == [DecklistLine(2, "Mickey Mouse"), DecklistLine(1, "Maui", "Hero to All")]
    assert [e.line_number for e in errors] == [3, 4]
