"""Tolerant RSS/Atom parsing into generic item records."""

import logging
from typing import Any

from lxml import etree

from feed_ingest.errors import ParseError
from feed_ingest.models import GenericItem

logger = logging.getLogger(__name__)

# Containers that carry feed metadata, never items
_NON_ITEM_KEYS = {"channel"}


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
        huge_tree=False,
    )


def _tag_name(element) -> str:
    """Tag as written in the document: prefixed tags keep their prefix,
    default-namespace tags use the bare local name."""
    qname = etree.QName(element)
    if element.prefix:
        return f"{element.prefix}:{qname.localname}"
    return qname.localname


def _attr_name(element, key: str) -> str:
    if not key.startswith("{"):
        return key
    qname = etree.QName(key)
    for prefix, uri in (element.nsmap or {}).items():
        if uri == qname.namespace and prefix:
            return f"{prefix}:{qname.localname}"
    return qname.localname


def _has_inline_markup(element, children) -> bool:
    if element.get("type") == "xhtml":
        return True
    if (element.text or "").strip():
        return True
    return any((child.tail or "").strip() for child in children)


def element_to_value(element) -> Any:
    """Convert an element to the generic record shape.

    Leaf elements without attributes become their trimmed text. Anything
    else becomes a dict with "$" (attributes), "_" (text) and one list per
    child tag.

    Mixed content (text around child tags, as in unescaped HTML in a
    description) and Atom xhtml constructs keep the full text of the
    element and its descendants in "_".
    """
    text = (element.text or "").strip()
    children = [child for child in element if isinstance(child.tag, str)]
    if not children and not element.attrib:
        return text
    if children and _has_inline_markup(element, children):
        text = "".join(element.itertext()).strip()

    record: dict[str, Any] = {}
    if element.attrib:
        record["$"] = {_attr_name(element, k): v for k, v in element.attrib.items()}
    if text:
        record["_"] = text
    for child in children:
        record.setdefault(_tag_name(child), []).append(element_to_value(child))
    return record


def parse_document(raw: bytes | str) -> dict[str, Any]:
    """Parse raw XML into {root_tag: root_record}.

    Raises:
        ParseError: If the payload is empty or not well-formed XML.
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    if not raw or not raw.strip():
        raise ParseError("Empty feed payload")
    try:
        root = etree.fromstring(raw, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        raise ParseError(f"Malformed feed XML: {e}") from e
    return {_tag_name(root): element_to_value(root)}


def _looks_like_items(values: Any) -> bool:
    return (
        isinstance(values, list)
        and bool(values)
        and any(isinstance(v, dict) and v.get("title") for v in values)
    )


def _rss_items(document: dict[str, Any]) -> list[GenericItem]:
    rss = document.get("rss")
    if not isinstance(rss, dict):
        return []
    channels = rss.get("channel") or []
    if not channels or not isinstance(channels[0], dict):
        return []
    items = channels[0].get("item") or []
    return [item for item in items if isinstance(item, dict)]


def _atom_entries(document: dict[str, Any]) -> list[GenericItem]:
    feed = document.get("feed")
    if not isinstance(feed, dict):
        return []
    entries = feed.get("entry") or []
    return [entry for entry in entries if isinstance(entry, dict)]


def _first_item_like_list(document: dict[str, Any]) -> list[GenericItem]:
    for root in document.values():
        if not isinstance(root, dict):
            continue
        for key, values in root.items():
            if key in _NON_ITEM_KEYS or key == "$":
                continue
            if _looks_like_items(values):
                return [v for v in values if isinstance(v, dict)]
    return []


def find_items(document: dict[str, Any]) -> list[GenericItem]:
    """Pick the item list out of a parsed document.

    RSS 2.0 first, then Atom, then the first list under the root whose
    elements carry a title.
    """
    items = _rss_items(document)
    if items:
        return items
    items = _atom_entries(document)
    if items:
        return items
    return _first_item_like_list(document)


def parse_feed(raw: bytes | str, source_label: str) -> list[GenericItem]:
    """Parse a feed payload into generic item records.

    An unrecognized but well-formed document yields an empty list.
    """
    document = parse_document(raw)
    items = find_items(document)
    if not items:
        logger.warning("No items found in feed for %s", source_label)
    else:
        logger.debug("Parsed %d items for %s", len(items), source_label)
    return items
