"""
tests/test_docbook.py — Tests for document rendering and DocBook serialization
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from src.content.docbook import DOCBOOK_NS, XLINK_NS, DocbookSerializer, format_xml, render
from src.content.models import TopicDocument, TopicRecord

NS = {"db": DOCBOOK_NS}


def _record(topic_id: int, **kwargs) -> TopicRecord:
    fields = {
        "title": f"Topic {topic_id}",
        "section": "storage",
        "version": "2020-01-01",
        "content": "<para>Body.</para>",
    }
    fields.update(kwargs)
    return TopicRecord(topic_id=topic_id, **fields)


@pytest.fixture
def serializer():
    return DocbookSerializer()


def _parse(serializer: DocbookSerializer, *records: TopicRecord) -> ET.Element:
    return ET.fromstring(serializer.serialize(render(list(records))))


# ── render ───────────────────────────────────────────────────────────


class TestRender:
    def test_no_records_is_none(self):
        assert render([]) is None

    def test_keeps_order(self):
        doc = render([_record(3), _record(1), _record(2)])
        assert isinstance(doc, TopicDocument)
        assert doc.topic_ids == [3, 1, 2]


# ── serialize ────────────────────────────────────────────────────────


class TestSerialize:
    def test_book_root(self, serializer):
        root = _parse(serializer, _record(1))
        assert root.tag == f"{{{DOCBOOK_NS}}}book"
        assert root.get("version") == "5.1"

    def test_topic_metadata(self, serializer):
        root = _parse(serializer, _record(1, title="Milk", section="risks", version="2021-06-30"))
        topic = root.find("db:topic", NS)
        assert topic.get("type") == "risks"
        assert topic.find("db:info/db:title", NS).text == "Milk"
        assert topic.find("db:info/db:edition/db:date", NS).text == "2021-06-30"

    def test_topics_in_order(self, serializer):
        root = _parse(serializer, _record(2, title="B"), _record(1, title="A"))
        titles = [t.text for t in root.findall("db:topic/db:info/db:title", NS)]
        assert titles == ["B", "A"]

    def test_metadata_escaped(self, serializer):
        text = serializer.serialize(render([_record(1, title="Fish & Chips <fresh>")]))
        assert "Fish &amp; Chips &lt;fresh&gt;" in text
        root = ET.fromstring(text)
        assert root.find("db:topic/db:info/db:title", NS).text == "Fish & Chips <fresh>"

    def test_body_markup_kept(self, serializer):
        root = _parse(serializer, _record(1, content="<para>Keep <emphasis>cold</emphasis>.</para>"))
        para = root.find("db:topic/db:para", NS)
        assert para.text == "Keep "
        assert para.find("db:emphasis", NS).text == "cold"

    def test_body_leading_text_kept(self, serializer):
        root = _parse(serializer, _record(1, content="Intro <para>More</para>"))
        info = root.find("db:topic/db:info", NS)
        assert info.tail == "Intro "

    def test_body_with_xlink(self, serializer):
        content = '<para><link xlink:href="https://example.org">source</link></para>'
        root = _parse(serializer, _record(1, content=content))
        link = root.find("db:topic/db:para/db:link", NS)
        assert link.get(f"{{{XLINK_NS}}}href") == "https://example.org"

    def test_malformed_body_carried_as_text(self, serializer):
        root = _parse(serializer, _record(1, content="Boil & stir <well"))
        para = root.find("db:topic/db:para", NS)
        assert para.text == "Boil & stir <well"

    def test_control_characters_dropped(self, serializer):
        record = _record(
            1,
            title="Fresh\x0bmilk",
            section="ris\x01ks",
            version="2021-06-30\x0c",
            content="<para>Keep\x0b cold.</para>",
        )
        root = _parse(serializer, record)
        topic = root.find("db:topic", NS)
        assert topic.get("type") == "risks"
        assert topic.find("db:info/db:title", NS).text == "Freshmilk"
        assert topic.find("db:info/db:edition/db:date", NS).text == "2021-06-30"
        assert topic.find("db:para", NS).text == "Keep cold."

    def test_malformed_body_with_control_characters(self, serializer):
        root = _parse(serializer, _record(1, content="Boil\x00 & stir <well"))
        assert root.find("db:topic/db:para", NS).text == "Boil & stir <well"

    def test_html_entities_keep_markup(self, serializer):
        root = _parse(serializer, _record(1, content="<para>a&nbsp;b <emphasis>c</emphasis></para>"))
        para = root.find("db:topic/db:para", NS)
        assert para.text == "a\xa0b "
        assert para.find("db:emphasis", NS).text == "c"

    def test_xml_entities_unchanged(self, serializer):
        root = _parse(serializer, _record(1, content="<para>Fish &amp; chips &lt;3</para>"))
        assert root.find("db:topic/db:para", NS).text == "Fish & chips <3"

    def test_unknown_entity_kept_as_text(self, serializer):
        root = _parse(serializer, _record(1, content="<para>x &bogus; y</para>"))
        assert root.find("db:topic/db:para", NS).text == "x &bogus; y"

    def test_empty_body(self, serializer):
        root = _parse(serializer, _record(1, content=""))
        topic = root.find("db:topic", NS)
        assert [child.tag for child in topic] == [f"{{{DOCBOOK_NS}}}info"]

    def test_deterministic(self, serializer):
        doc = render([_record(1), _record(2, content="a & b")])
        assert serializer.serialize(doc) == serializer.serialize(doc)


# ── format_xml ───────────────────────────────────────────────────────


class TestFormatXml:
    def test_indents(self):
        pretty = format_xml("<a><b>x</b></a>")
        assert pretty == "<a>\n  <b>x</b>\n</a>"

    def test_keeps_default_namespace(self):
        pretty = format_xml(f'<book xmlns="{DOCBOOK_NS}"><topic/></book>')
        assert pretty.startswith(f'<book xmlns="{DOCBOOK_NS}">')
        assert "ns0" not in pretty

    def test_malformed_unchanged(self):
        assert format_xml("<a><b></a>") == "<a><b></a>"
