"""
src/services/content_service.py — Content Query Orchestrator

Coordinates the full flow:
  search term → normalize → category closure → topics → document → DocBook
                                                                 ↓
                                                          display format
                                                          (HTML converter)

This is the whole query surface a UI needs: normalize(), complete()
and lookup().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from src.content.aggregator import TopicAggregator
from src.content.closure import CategoryClosureResolver
from src.content.completion import CompletionIndex
from src.content.docbook import DocbookSerializer, format_xml, render
from src.content.errors import QueryFailure, StoreUnavailable
from src.content.models import ContentFormat, TopicDocument
from src.content.normalizer import normalize
from src.content.store import ContentStore
from src.renderer.format_plugins import FormatConverter, get_converter

logger = logging.getLogger(__name__)


@dataclass
class ContentConfig:
    """Configuration for content queries."""

    # Database
    db_path: str = "foodrescue-content.sqlite3"

    # Completion
    completion_lang: str = "en"  # language prefix of completable category names

    # Closure
    category_lang: Optional[str] = None  # restrict name lookups to a language prefix
    max_categories: int = 10_000

    # Output
    default_format: ContentFormat = ContentFormat.HTML


class ContentService:
    """
    Answers search terms with topic documents.

    Usage:
        service = ContentService(ContentConfig(db_path="foodrescue-content.sqlite3"))
        html = service.lookup("4000176 5")
        docbook = service.lookup("dairy", ContentFormat.DOCBOOK)
    """

    def __init__(
        self,
        config: ContentConfig,
        store: Optional[ContentStore] = None,
        converter: Optional[FormatConverter] = None,
    ):
        self.config = config
        self.store = store or ContentStore(config.db_path)
        self.converter = converter
        self.resolver = CategoryClosureResolver(
            self.store,
            max_categories=config.max_categories,
            category_lang=config.category_lang,
        )
        self.aggregator = TopicAggregator(self.store)
        self.completion_index = CompletionIndex(self.store, lang=config.completion_lang)
        self.serializer = DocbookSerializer()

        self.completions: list[str] = []
        self._completion_listeners: list[Callable[[list[str]], None]] = []

        try:
            self.store.open()
        except StoreUnavailable:
            pass  # logged by the store; lookups raise it again

    @property
    def available(self) -> bool:
        return self.store.available

    # ── Query surface ──────────────────────────────────────────────

    def normalize(self, term: str) -> str:
        return normalize(term)

    def complete(self, fragments: str, limit: int = 10) -> list[str]:
        """Category names completing `fragments`, shortest first."""
        return self.completion_index.complete(fragments, limit)

    def lookup(self, term: str, fmt: Optional[ContentFormat] = None) -> Optional[str]:
        """
        Find all topics for a product code or category name.

        Args:
            term: Search term; normalized again here.
            fmt: Output format; defaults to config.default_format.

        Returns:
            The document text, or None if the term matches no topics or
            a query failed.

        Raises:
            StoreUnavailable: if the content database could not be opened.
        """
        fmt = fmt or self.config.default_format
        docbook = self.docbook(term)
        if docbook is None or fmt == ContentFormat.DOCBOOK:
            return docbook

        logger.debug("Content in DocBook format:\n%s", format_xml(docbook))
        try:
            converter = self.converter or get_converter(fmt)
            converted = converter.convert(docbook)
        except Exception as exc:
            logger.warning("Could not convert content to %s, returning DocBook: %s", fmt.value, exc)
            return docbook
        logger.debug("Content in %s format:\n%s", fmt.value, format_xml(converted))
        return converted

    def docbook(self, term: str) -> Optional[str]:
        """Topics for `term` serialized as a DocBook book."""
        document = self.topics(term)
        if document is None:
            return None
        return self.serializer.serialize(document)

    def topics(self, term: str) -> Optional[TopicDocument]:
        """Topics for `term` as a structured document."""
        normalized = normalize(term)
        try:
            closure = self.resolver.resolve(normalized)
            records = self.aggregator.aggregate(closure)
        except QueryFailure as exc:
            logger.warning("Content query for %r failed: %s", normalized, exc)
            return None

        logger.debug(
            "Search term %r: %d categories, %d topics", normalized, len(closure), len(records)
        )
        return render(records)

    # ── Completion model ───────────────────────────────────────────

    def on_completions_changed(self, callback: Callable[[list[str]], None]):
        """Register a callback receiving the completion list after each change."""
        self._completion_listeners.append(callback)

    def update_completions(self, fragments: str, limit: int = 10) -> list[str]:
        """Replace the current completions with those for `fragments`."""
        self.completions = self.complete(fragments, limit)
        self._notify_completions()
        return self.completions

    def clear_completions(self):
        self.completions = []
        self._notify_completions()

    def _notify_completions(self):
        for callback in self._completion_listeners:
            callback(list(self.completions))

    def close(self):
        self.store.close()
