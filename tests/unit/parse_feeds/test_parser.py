"""Tests for feed_ingest.parse_feeds.parser module."""

import pytest

from feed_ingest.errors import ParseError
from feed_ingest.parse_feeds.parser import element_to_value, find_items, parse_document, parse_feed
from fixtures.feeds import ATOM_FEED, ATOM_XHTML_FEED, EMPTY_RSS_FEED, RDF_FEED, RSS_FEED, UNKNOWN_FEED


class TestParseDocument:
    def test_root_is_keyed_by_tag(self) -> None:
        document = parse_document(RSS_FEED)
        assert list(document) == ["rss"]
        assert document["rss"]["$"] == {"version": "2.0"}

    def test_prefixed_tags_keep_prefix(self) -> None:
        item = parse_document(RSS_FEED)["rss"]["channel"][0]["item"][0]
        assert item["dc:creator"] == ["Ada Lovelace"]
        assert item["content:encoded"] == ["<p>How we   ship <b>neural</b> ranking.</p>"]

    def test_element_with_attributes_keeps_text(self) -> None:
        item = parse_document(RSS_FEED)["rss"]["channel"][0]["item"][0]
        assert item["guid"] == [{"$": {"isPermaLink": "false"}, "_": "post-1"}]

    def test_default_namespace_uses_local_name(self) -> None:
        document = parse_document(ATOM_FEED)
        assert "feed" in document
        entry = document["feed"]["entry"][0]
        assert entry["author"] == [{"name": ["Bruce"]}]
        assert entry["category"] == [{"$": {"term": "Advisories"}}]

    def test_accepts_str_payload(self) -> None:
        document = parse_document("<rss><channel><item><title>T</title></item></channel></rss>")
        assert document["rss"]["channel"][0]["item"] == [{"title": ["T"]}]

    def test_text_is_trimmed(self) -> None:
        document = parse_document(b"<root><title>\n   Spaced   \n</title></root>")
        assert document["root"]["title"] == ["Spaced"]

    def test_empty_leaf_is_empty_string(self) -> None:
        document = parse_document(b"<root><title/></root>")
        assert document["root"]["title"] == [""]

    def test_mixed_content_keeps_text_after_inline_tags(self) -> None:
        document = parse_document(b"<item><description>Intro <b>bold</b> and the rest</description></item>")
        description = document["item"]["description"][0]
        assert description["_"] == "Intro bold and the rest"
        assert description["b"] == ["bold"]

    def test_mixed_content_starting_with_tag(self) -> None:
        document = parse_document(b"<item><description><i>Lead</i> continues here</description></item>")
        assert document["item"]["description"][0]["_"] == "Lead continues here"

    def test_atom_xhtml_content_keeps_descendant_text(self) -> None:
        document = parse_document(ATOM_XHTML_FEED)
        content = document["feed"]["entry"][0]["content"][0]
        assert content["$"] == {"type": "xhtml"}
        assert " ".join(content["_"].split()) == "Hello xhtml world"

    def test_structural_children_get_no_text(self) -> None:
        entry = parse_document(ATOM_FEED)["feed"]["entry"][0]
        assert "_" not in entry
        assert "_" not in entry["author"][0]

    def test_malformed_xml_raises_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_document(b"<rss><channel><item></rss>")

    def test_empty_payload_raises_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_document(b"   ")

    def test_html_page_raises_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_document(b"<!DOCTYPE html><html><body><p>Not a feed<br></body></html>")


class TestFindItems:
    def test_rss_items(self) -> None:
        items = find_items(parse_document(RSS_FEED))
        assert len(items) == 4
        assert items[0]["title"] == ["Scaling neural search with Docker"]

    def test_atom_entries(self) -> None:
        items = find_items(parse_document(ATOM_FEED))
        assert len(items) == 2

    def test_atom_used_when_rss_empty(self) -> None:
        document = {
            "rss": {"channel": [{"title": ["Empty"]}]},
            "feed": {"entry": [{"title": ["From atom"]}]},
        }
        assert find_items(document) == [{"title": ["From atom"]}]

    def test_first_title_bearing_list_is_used(self) -> None:
        items = find_items(parse_document(RDF_FEED))
        assert items == [{"title": ["RDF item"], "link": ["https://rdf.example.com/1"]}]

    def test_channel_is_never_an_item_list(self) -> None:
        assert find_items(parse_document(EMPTY_RSS_FEED)) == []

    def test_unknown_shape_yields_no_items(self) -> None:
        assert find_items(parse_document(UNKNOWN_FEED)) == []


class TestParseFeed:
    def test_returns_items(self) -> None:
        assert len(parse_feed(RSS_FEED, "Example")) == 4

    def test_unknown_shape_logs_warning(self, caplog) -> None:
        with caplog.at_level("WARNING"):
            assert parse_feed(UNKNOWN_FEED, "Catalog") == []
        assert "No items found in feed for Catalog" in caplog.text

    def test_malformed_propagates_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_feed(b"not xml at all", "Broken")


class TestElementToValue:
    def test_nested_children_become_lists(self) -> None:
        from lxml import etree

        element = etree.fromstring(b"<item><tag>a</tag><tag>b</tag></item>")
        assert element_to_value(element) == {"tag": ["a", "b"]}
