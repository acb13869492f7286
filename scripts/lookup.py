#!/usr/bin/env python3
"""
scripts/lookup.py — Look up food rescue content from the command line.

Finds the topics for a product barcode or a category name and prints them.

Usage:
    python scripts/lookup.py "4000176 5"
    python scripts/lookup.py dairy --format docbook
    python scripts/lookup.py "can so" --complete 5

Options:
    --db PATH              Content database (default: $FOODRESCUE_CONTENT_DB
                           or foodrescue-content.sqlite3)
    --format FORMAT        "html" | "docbook" (default: html)
    --complete N           Print up to N category name completions instead
    --verbose              Show debug logging
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.content.errors import StoreUnavailable
from src.content.models import ContentFormat
from src.services.content_service import ContentConfig, ContentService


def main():
    ap = argparse.ArgumentParser(
        description="Look up food rescue topics for a barcode or category.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    ap.add_argument("term", help="Product barcode digits or a category name")
    ap.add_argument(
        "--db",
        default=os.environ.get("FOODRESCUE_CONTENT_DB", "foodrescue-content.sqlite3"),
        help="Content database path",
    )
    ap.add_argument(
        "--format",
        default=ContentFormat.HTML.value,
        choices=[f.value for f in ContentFormat],
        help="Output format (default: html)",
    )
    ap.add_argument("--complete", type=int, metavar="N", help="Print up to N completions")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    service = ContentService(ContentConfig(db_path=args.db))
    if not service.available:
        print(f"ERROR: content database {args.db} is not available.")
        sys.exit(1)

    try:
        if args.complete is not None:
            completions = service.complete(args.term, max(args.complete, 1))
            for name in completions:
                print(name)
            if not completions:
                sys.exit(1)
            return

        term = service.normalize(args.term)
        content = service.lookup(term, ContentFormat(args.format))
    except StoreUnavailable as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)
    finally:
        service.close()

    if content is None:
        print(f"No content found for {term!r}.")
        sys.exit(1)
    print(content)


if __name__ == "__main__":
    main()
