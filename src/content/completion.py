"""
src/content/completion.py — Search term completion

Completes partial input to category names. Completion is advisory: a
failing database yields no completions, never an error.
"""

from __future__ import annotations

import logging

from src.content.errors import QueryFailure, StoreUnavailable
from src.content.store import ContentStore

logger = logging.getLogger(__name__)


class CompletionIndex:
    """Ranks category names matching space-separated fragments.

    Usage:
        index = CompletionIndex(store)
        index.complete("can sou", limit=5)  # -> ["Canned Soup", ...]
    """

    # TODO: Use a full-text index once the content database ships one.
    _SQL = """SELECT name FROM categories
              WHERE lang LIKE ? AND name LIKE ? ESCAPE '\\'
              ORDER BY LENGTH(name), name
              LIMIT ?"""

    def __init__(self, store: ContentStore, lang: str = "en"):
        self.store = store
        self.lang = lang

    def complete(self, fragments: str, limit: int = 10) -> list[str]:
        """
        Find category names containing all fragments in order.

        Args:
            fragments: Space-separated substrings, matched case-insensitively.
            limit: Max completions to return.

        Returns:
            Names ordered shortest first, at most `limit` of them.
        """
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        parts = fragments.split()
        if not parts:
            return []

        pattern = "%" + "%".join(_escape_like(p) for p in parts) + "%"
        try:
            rows = self.store.query(self._SQL, (f"{self.lang}%", pattern, limit))
        except StoreUnavailable:
            return []  # reported once when the store was opened
        except QueryFailure as exc:
            logger.warning("Completion for %r failed: %s", fragments, exc)
            return []
        return [r["name"] for r in rows]


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
