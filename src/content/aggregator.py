"""
src/content/aggregator.py — Topic Aggregator

Joins a category closure against the topic tables and returns each
reachable topic once, ordered by topic id.
"""

from __future__ import annotations

import logging
from typing import AbstractSet

from src.content.models import TopicRecord
from src.content.store import ContentStore, batched, placeholders

logger = logging.getLogger(__name__)


class TopicAggregator:
    """Collects the topics attached to any category of a closure."""

    def __init__(self, store: ContentStore):
        self.store = store

    def aggregate(self, closure: AbstractSet[int]) -> list[TopicRecord]:
        """
        Topics linked to the closure categories, deduplicated by topic id.

        A topic reachable through several closure categories is attributed
        to the one with the lowest category id.
        """
        if not closure:
            return []

        rows: list[dict] = []
        for chunk in batched(sorted(closure)):
            rows.extend(
                self.store.query(
                    f"""SELECT topics.id AS topic_id,
                               topic_contents.title,
                               topics.section,
                               topics.version,
                               topic_contents.content,
                               categories.id AS category_id,
                               categories.name AS category_name,
                               topic_contents.rowid AS content_rowid
                        FROM topic_categories
                            INNER JOIN topics ON topics.id = topic_categories.topic_id
                            INNER JOIN topic_contents ON topic_contents.topic_id = topics.id
                            INNER JOIN categories ON categories.id = topic_categories.category_id
                        WHERE topic_categories.category_id IN ({placeholders(len(chunk))})""",
                    chunk,
                )
            )

        # Batches can interleave, so order everything here rather than in SQL.
        rows.sort(key=lambda r: (r["topic_id"], r["category_id"], r["content_rowid"]))

        records: dict[int, TopicRecord] = {}
        for row in rows:
            if row["topic_id"] in records:
                continue
            records[row["topic_id"]] = TopicRecord(
                topic_id=row["topic_id"],
                title=_text(row["title"]),
                section=_text(row["section"]),
                version=_text(row["version"]),
                content=_text(row["content"]),
                category_name=row["category_name"],
            )

        logger.debug(
            "Aggregated %d topics from %d rows over %d categories",
            len(records),
            len(rows),
            len(closure),
        )
        return list(records.values())


def _text(value) -> str:
    return "" if value is None else str(value)
