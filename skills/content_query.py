"""
skills/content_query.py — Topic lookup and search term completion.

Wraps src.services.content_service.ContentService.
"""

from typing import Optional

from src.content.models import ContentFormat
from src.services.content_service import ContentConfig, ContentService


def open_content(db_path: str = "foodrescue-content.sqlite3") -> ContentService:
    """Open the content database and create a query service.

    An unavailable database is logged here; lookups then raise
    StoreUnavailable.
    """
    return ContentService(ContentConfig(db_path=db_path))


def normalize(service: ContentService, term: str) -> str:
    """Normalize a raw search term."""
    return service.normalize(term)


def complete(service: ContentService, fragments: str, limit: int = 10) -> list:
    """Category names completing the given fragments, shortest first."""
    return service.complete(fragments, limit)


def lookup(
    service: ContentService,
    term: str,
    output_format: str = "html",
) -> Optional[str]:
    """Topics for a product code or category name.

    Args:
        service: Service from open_content().
        term: Barcode digits or a category name.
        output_format: "docbook" or "html".

    Returns:
        The document text, or None if nothing matches.
    """
    return service.lookup(term, ContentFormat(output_format))
