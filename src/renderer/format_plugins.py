"""
src/renderer/format_plugins.py — Display Format Converter Plugin System

Converters turn a serialized DocBook document into a display format.
They are pure: same input, same output. A converter that cannot handle
its input raises ConversionFailure; callers fall back to DocBook.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Optional, Protocol, Union

from src.content.docbook import XLINK_NS
from src.content.errors import ConversionFailure
from src.content.models import ContentFormat


class FormatConverter(Protocol):
    """Plugin interface for display format converters."""

    def can_convert(self, target_format: str) -> bool: ...
    def convert(self, docbook: str) -> str: ...


class HtmlConverter:
    """Converts DocBook topic books → simple HTML for rich text widgets."""

    # DocBook element → HTML element. Unlisted elements are unwrapped.
    TAGS = {
        "para": "p",
        "simpara": "p",
        "formalpara": "div",
        "itemizedlist": "ul",
        "orderedlist": "ol",
        "listitem": "li",
        "section": "div",
        "title": "h3",
        "note": "blockquote",
        "tip": "blockquote",
        "warning": "blockquote",
        "caution": "blockquote",
        "important": "blockquote",
        "literal": "code",
        "programlisting": "pre",
        "quote": "q",
        "subscript": "sub",
        "superscript": "sup",
    }

    def can_convert(self, target_format: str) -> bool:
        return target_format.lower() == ContentFormat.HTML.value

    def convert(self, docbook: str) -> str:
        try:
            book = ET.fromstring(docbook)
        except ET.ParseError as exc:
            raise ConversionFailure(f"malformed DocBook input: {exc}") from exc
        if _local(book.tag) != "book":
            raise ConversionFailure(f"expected a DocBook book, got <{_local(book.tag)}>")

        html = ET.Element("html")
        body = ET.SubElement(html, "body")
        for child in book:
            if _local(child.tag) == "topic":
                self._topic(body, child)
            else:
                self._node(body, child)
        return ET.tostring(html, encoding="unicode", method="html")

    # ── Topic ──────────────────────────────────────────────────────

    def _topic(self, out: ET.Element, topic: ET.Element):
        div = ET.SubElement(out, "div", {"class": "topic"})
        if topic.get("type"):
            div.set("data-type", topic.get("type"))
        _append_text(div, topic.text)
        for child in topic:
            if _local(child.tag) == "info":
                self._info(div, child)
                _append_text(div, child.tail)
            else:
                self._node(div, child)

    def _info(self, out: ET.Element, info: ET.Element):
        title = _find(info, "title")
        if title is not None:
            ET.SubElement(out, "h2").text = "".join(title.itertext())
        date = _find(info, "edition", "date")
        if date is not None and date.text:
            ET.SubElement(out, "p", {"class": "edition"}).text = date.text

    # ── Body markup ────────────────────────────────────────────────

    def _node(self, out: ET.Element, node: ET.Element):
        name = _local(node.tag)
        tag, attrs = self._map(name, node)
        target = ET.SubElement(out, tag, attrs) if tag else out
        _append_text(target, node.text)
        for child in node:
            self._node(target, child)
        _append_text(out, node.tail)

    def _map(self, name: str, node: ET.Element) -> tuple[Optional[str], dict]:
        if name == "emphasis":
            role = (node.get("role") or "").lower()
            return ("strong" if role in ("bold", "strong") else "em"), {}
        if name in ("link", "ulink"):
            href = node.get(f"{{{XLINK_NS}}}href") or node.get("url")
            if href is None and node.get("linkend"):
                href = f"#{node.get('linkend')}"
            return "a", ({"href": href} if href else {})
        return self.TAGS.get(name), {}


def get_converter(target_format: Union[str, ContentFormat]) -> FormatConverter:
    """Get the appropriate converter for a display format."""
    if isinstance(target_format, ContentFormat):
        target_format = target_format.value
    converters: list[FormatConverter] = [HtmlConverter()]
    for c in converters:
        if c.can_convert(target_format):
            return c
    raise ValueError(f"No converter available for format: {target_format}")


# ── Helpers ────────────────────────────────────────────────────────


def _local(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _find(node: ET.Element, *path: str) -> Optional[ET.Element]:
    for name in path:
        node = next((c for c in node if _local(c.tag) == name), None)
        if node is None:
            return None
    return node


def _append_text(parent: ET.Element, text: Optional[str]):
    """Append text after the last child of parent, or as its leading text."""
    if not text:
        return
    if len(parent):
        last = parent[-1]
        last.tail = (last.tail or "") + text
    else:
        parent.text = (parent.text or "") + text
