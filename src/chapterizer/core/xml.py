"""Namespace-agnostic lxml helpers.

EPUB producers disagree on namespace prefixes, so lookups here match on
local names only.
"""

from typing import Iterator

from lxml import etree


def parse_xml(content: bytes) -> etree._Element:
    """Parse XML bytes, recovering from minor well-formedness errors."""
    parser = etree.XMLParser(recover=True, resolve_entities=False, no_network=True)
    root = etree.fromstring(content, parser)
    if root is None:
        raise etree.XMLSyntaxError("empty document", None, 0, 0)
    return root


def local_name(element: etree._Element) -> str:
    """Tag name without namespace ("" for comments and processing instructions)."""
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def iter_local(element: etree._Element, name: str) -> Iterator[etree._Element]:
    """Iterate descendants (and self) whose local name matches."""
    for child in element.iter():
        if local_name(child) == name:
            yield child


def find_local(element: etree._Element, name: str) -> etree._Element | None:
    """First descendant (or self) whose local name matches."""
    return next(iter_local(element, name), None)


def children_local(element: etree._Element, name: str) -> list[etree._Element]:
    """Direct children whose local name matches."""
    return [child for child in element if local_name(child) == name]


def text_of(element: etree._Element | None) -> str | None:
    """Whitespace-normalized text content, or None when empty."""
    if element is None:
        return None
    text = " ".join("".join(element.itertext()).split())
    return text or None


def get_attr(element: etree._Element, name: str) -> str | None:
    """Attribute lookup by local name, ignoring any namespace."""
    value = element.get(name)
    if value is not None:
        return value
    for key, val in element.attrib.items():
        if etree.QName(key).localname == name:
            return val
    return None
