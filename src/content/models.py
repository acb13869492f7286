"""
src/content/models.py — Pydantic data models for content query results

Everything the aggregator produces flows through these models: the
aggregator emits TopicRecords, the renderer wraps them into a
TopicDocument, and the serializer turns that into DocBook text.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ──────────────────────────────────────────────────────────


class ContentFormat(str, Enum):
    DOCBOOK = "docbook"  # structured format
    HTML = "html"  # display format


# ── Topics ─────────────────────────────────────────────────────────


class TopicRecord(BaseModel):
    """One content topic reached through a category closure."""

    model_config = ConfigDict(frozen=True)

    topic_id: int
    title: str = ""
    section: str = ""  # rendered as the DocBook topic type
    version: str = ""  # edition date, e.g. "2020-03-05"
    content: str = ""  # DocBook body markup
    category_name: Optional[str] = None  # closure member the topic was reached through


# ── Document ───────────────────────────────────────────────────────


class TopicDocument(BaseModel):
    """Ordered, format-agnostic container of topic records."""

    topics: list[TopicRecord] = Field(default_factory=list)

    @property
    def topic_ids(self) -> list[int]:
        return [t.topic_id for t in self.topics]
