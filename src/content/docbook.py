"""
src/content/docbook.py — Topic document rendering and DocBook serialization

render() wraps aggregated topics into a TopicDocument; DocbookSerializer
turns that into a DocBook 5.1 "book" with one <topic> per record:

  <book xmlns="http://docbook.org/ns/docbook" version="5.1">
    <topic type="{section}">
      <info><title>…</title><edition><date>…</date></edition></info>
      {content}
    </topic>
  </book>

The XML is built as an ElementTree, so titles, sections and dates are
always escaped, and code points XML 1.0 forbids are dropped from every
field. Topic bodies are DocBook markup already: HTML named entities such
as &nbsp; are turned into character references, then a well-formed body
is kept as markup and anything else is carried as text in a <para>.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from html.entities import html5
from typing import Optional, Sequence

from src.content.models import TopicDocument, TopicRecord

logger = logging.getLogger(__name__)

DOCBOOK_NS = "http://docbook.org/ns/docbook"
DOCBOOK_VERSION = "5.1"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Code points XML 1.0 does not allow, even as character references.
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")
_ENTITY_REF = re.compile(r"&([A-Za-z][A-Za-z0-9]*);")
_XML_ENTITIES = {"amp", "lt", "gt", "quot", "apos"}

ET.register_namespace("xlink", XLINK_NS)


def render(records: Sequence[TopicRecord]) -> Optional[TopicDocument]:
    """Wrap records into a document, or None if there is nothing to show."""
    if not records:
        return None
    return TopicDocument(topics=list(records))


class DocbookSerializer:
    """Converts a TopicDocument to DocBook XML text."""

    def serialize(self, document: TopicDocument) -> str:
        return ET.tostring(self.to_element(document), encoding="unicode")

    def to_element(self, document: TopicDocument) -> ET.Element:
        book = ET.Element("book", {"xmlns": DOCBOOK_NS, "version": DOCBOOK_VERSION})
        for record in document.topics:
            book.append(self._topic(record))
        return book

    # ── Topic ──────────────────────────────────────────────────────

    def _topic(self, record: TopicRecord) -> ET.Element:
        topic = ET.Element("topic", {"type": xml_text(record.section)})
        info = ET.SubElement(topic, "info")
        ET.SubElement(info, "title").text = xml_text(record.title)
        edition = ET.SubElement(info, "edition")
        ET.SubElement(edition, "date").text = xml_text(record.version)
        self._body(topic, info, record)
        return topic

    def _body(self, topic: ET.Element, info: ET.Element, record: TopicRecord):
        content = xml_text(record.content)
        if not content:
            return
        try:
            fragment = ET.fromstring(
                f'<body xmlns:xlink="{XLINK_NS}">{_resolve_entities(content)}</body>'
            )
        except ET.ParseError as exc:
            logger.debug("Topic %d body is not well-formed (%s), keeping as text", record.topic_id, exc)
            ET.SubElement(topic, "para").text = content
            return
        info.tail = fragment.text
        topic.extend(list(fragment))


# ── Utilities ──────────────────────────────────────────────────────


def xml_text(value: str) -> str:
    """Drop code points that an XML 1.0 document cannot carry."""
    return _XML_ILLEGAL.sub("", value)


def _resolve_entities(markup: str) -> str:
    """Replace HTML named entities by numeric character references.

    The five XML entities stay as they are; unknown names are escaped so
    they survive as literal text.
    """

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name in _XML_ENTITIES:
            return match.group(0)
        chars = html5.get(f"{name};")
        if chars is None:
            return f"&amp;{name};"
        return "".join(f"&#{ord(c)};" for c in chars)

    return _ENTITY_REF.sub(replace, markup)


def format_xml(text: str) -> str:
    """Indented form of an XML document for log output.

    Returns the text unchanged if it is not well-formed XML.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        return text
    ET.indent(root)
    namespace = root.tag[1:].split("}", 1)[0] if root.tag.startswith("{") else None
    try:
        return ET.tostring(root, encoding="unicode", default_namespace=namespace)
    except ValueError:
        # Mixed qualified and unqualified tags.
        return ET.tostring(root, encoding="unicode")
