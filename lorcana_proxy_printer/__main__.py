"""CLI entry point for lorcana_proxy_printer."""
import argparse
import logging
import sys

from .card_store import CardStore
from .config import DPI, LOAD_RETRIES, PrintSettings
from .errors import CardSourceError, EmptyCollectionError
from .pdf_generator import generate_pdf
from .sources import entries_from_files, entry_from_url, import_decklist

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Lorcana Proxy Printer - print card images 3x3 per Letter page"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("gui", help="Open the desktop application (default)")

    build_cmd = subparsers.add_parser(
        "build",
        help="Build a PDF without the GUI from a decklist, image URLs and local files"
    )
    build_cmd.add_argument(
        "decklist",
        nargs="?",
        default=None,
        help='Text file with one "<quantity> <name>[ - <version>]" per line.',
    )
    build_cmd.add_argument("--url", action="append", default=[], help="Direct image URL (repeatable).")
    build_cmd.add_argument("--file", action="append", default=[], help="Local image file (repeatable).")
    build_cmd.add_argument(
        "-o", "--output",
        default="lorcana_proxies_print.pdf",
        help="Path to output file (default: lorcana_proxies_print.pdf).",
    )
    build_cmd.add_argument("--dpi", type=int, default=DPI, help=f"Page raster resolution (default: {DPI}).")
    build_cmd.add_argument(
        "--retries", type=int, default=LOAD_RETRIES,
        help=f"Retries per image through the relays (default: {LOAD_RETRIES}).",
    )
    build_cmd.add_argument("--no-auto-print", action="store_true", help="Do not open the print dialog on open.")
    return parser


def run_build(args):
    store = CardStore()

    if args.decklist:
        with open(args.decklist, "r", encoding="utf-8") as f:
            text = f.read()
        try:
            result = import_decklist(text)
        except CardSourceError as e:
            print(f"Decklist: {e}")
        else:
            store.add_entries(result.entries)
            for line, reason in result.skipped:
                print(f"Skipped '{line}': {reason}")

    for url in args.url:
        try:
            store.add(entry_from_url(url))
        except CardSourceError as e:
            print(f"{e}: {url}")

    files = entries_from_files(args.file)
    store.add_entries(files.entries)
    for path, error in files.failures:
        print(f"Could not read {path}: {error}")

    settings = PrintSettings(dpi=args.dpi, retries=args.retries)
    try:
        report = generate_pdf(store.entries, args.output, settings, auto_print=not args.no_auto_print)
    except EmptyCollectionError as e:
        print(e)
        return 1

    print(f"PDF generated: {report.output_pdf} ({len(store)} cards, {report.page_count} pages)")
    for source in report.failed_sources:
        print(f"Image not found: {source}")
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "build":
        return run_build(args)

    from .gui import main as run_gui
    run_gui()
    return 0


if __name__ == "__main__":
    sys.exit(main())
