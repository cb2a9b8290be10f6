"""HTML tree adapter.

Thin helpers over BeautifulSoup that every filter and extractor shares:
parsing, detaching, serialization, visible text, attribute access, and an
lxml element view of a parsed document so XPath 1.0 expressions can run
against the same tree the CSS backend sees.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from bs4 import BeautifulSoup
from bs4.element import CData, Comment, NavigableString, PageElement, PreformattedString, Tag
from lxml import etree

from htmldistill.logger import logger

# Only plain strings count as visible text; comments, doctypes and
# script/style/template contents have their own NavigableString subclasses.
_VISIBLE_STRING_TYPES = (NavigableString, CData)

_XML_NAME = re.compile(r"[A-Za-z_][\w.-]*\Z", re.ASCII)
_XML_NAME_INVALID_CHARS = re.compile(r"[^\w.-]", re.ASCII)
_XML_INVALID_CHARS = re.compile(
    r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)

FRAGMENT_ROOT = "fragment"


def parse_html(html: str | bytes) -> BeautifulSoup:
    """Parse an HTML document or fragment into a mutable tree.

    Bytes are decoded as UTF-8, replacing undecodable sequences. Parsing
    follows browser recovery rules: implied end tags close unclosed
    ``<p>``/``<li>`` elements, and missing ``<html>``/``<body>`` wrappers
    are synthesized, so fragments always end up inside a body.
    """
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    return BeautifulSoup(html, "lxml")


def find_body(soup: BeautifulSoup) -> Tag:
    """Return ``<body>``, or the whole document when it is empty."""
    body = soup.find("body")
    return body if isinstance(body, Tag) else soup


def is_visible_text(node: PageElement) -> bool:
    return type(node) in _VISIBLE_STRING_TYPES


def iter_visible_strings(node: Tag) -> Iterator[str]:
    """Yield every visible text string under ``node`` in document order."""
    for descendant in node.descendants:
        if is_visible_text(descendant):
            yield str(descendant)


def normalized_text(node: Tag) -> str:
    """Trimmed visible text fragments joined by single spaces."""
    return " ".join(s.strip() for s in iter_visible_strings(node) if s.strip())


def remove_comments(soup: BeautifulSoup) -> int:
    comments = soup.find_all(string=lambda text: isinstance(text, Comment))
    for comment in comments:
        comment.extract()
    return len(comments)


def detach(node: PageElement) -> None:
    """Remove ``node`` (and its subtree) from its parent."""
    node.extract()


def serialize(node: PageElement) -> str:
    return str(node)


def serialize_children(node: Tag) -> str:
    return "".join(str(child) for child in node.contents)


def byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


def attribute_value(tag: Tag, name: str) -> str | None:
    """Return an attribute as a string; multi-valued attributes are space-joined."""
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _is_character_data(node: PageElement) -> bool:
    # Script and style contents are element text too; comments and
    # declarations are not.
    if not isinstance(node, NavigableString):
        return False
    return type(node) is CData or not isinstance(node, PreformattedString)


def _xml_safe(text: str) -> str:
    return _XML_INVALID_CHARS.sub("", text)


def _xml_name(name: str) -> str:
    if _XML_NAME.match(name):
        return name
    cleaned = _XML_NAME_INVALID_CHARS.sub("_", name)
    if not cleaned or not (cleaned[0].isalpha() or cleaned[0] == "_"):
        cleaned = f"_{cleaned}"
    return cleaned


class XmlView:
    """Strict XML view of a parsed HTML document for XPath queries.

    Element names, attributes and document order are preserved. Names that
    are not valid XML are sanitized, attributes with such names are dropped,
    and characters XML cannot carry are removed. Comments are not copied.
    When the document does not have exactly one top-level element, the
    top-level nodes are wrapped in a synthetic ``<fragment>`` root that maps
    back to no tag.

    XPath results are mapped back to the BeautifulSoup tags they were built
    from, so values are always read from the original tree.
    """

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup
        self._to_xml: dict[int, etree._Element] = {}
        self._to_tag: dict[etree._Element, Tag] = {}
        self._tree = etree.ElementTree(self._build())

    def _build(self) -> etree._Element:
        top_level = [child for child in self._soup.contents if isinstance(child, Tag)]
        stray_text = any(
            is_visible_text(child) and child.strip() for child in self._soup.contents
        )

        pending: list[tuple[Tag, etree._Element]]
        if len(top_level) == 1 and not stray_text:
            root = self._copy_element(top_level[0], None)
            pending = [(top_level[0], root)]
        else:
            root = etree.Element(FRAGMENT_ROOT)
            pending = [(self._soup, root)]
        self._to_xml[id(self._soup)] = root

        # Each parent's children are appended in one pass, so document order
        # holds regardless of the order parents are expanded in.
        while pending:
            tag, element = pending.pop()
            previous: etree._Element | None = None
            for child in tag.children:
                if isinstance(child, Tag):
                    previous = self._copy_element(child, element)
                    pending.append((child, previous))
                elif _is_character_data(child):
                    text = _xml_safe(str(child))
                    if previous is None:
                        element.text = (element.text or "") + text
                    else:
                        previous.tail = (previous.tail or "") + text
        return root

    def _copy_element(self, tag: Tag, parent: etree._Element | None) -> etree._Element:
        name = _xml_name(tag.name)
        element = etree.Element(name) if parent is None else etree.SubElement(parent, name)
        for attr_name in tag.attrs:
            if not _XML_NAME.match(attr_name) or attr_name.startswith("xmlns"):
                continue
            value = attribute_value(tag, attr_name) or ""
            try:
                element.set(attr_name, _xml_safe(value))
            except ValueError:
                logger.debug("Dropping attribute %r not representable in XML", attr_name)
        self._to_xml[id(tag)] = element
        self._to_tag[element] = tag
        return element

    @property
    def document(self) -> BeautifulSoup:
        return self._soup

    @property
    def xml_root(self) -> etree._Element:
        return self._tree.getroot()

    def select(self, node: Tag, xpath: str) -> list[Tag]:
        """Evaluate ``xpath`` with ``node`` as context; return matching tags.

        The document itself evaluates against the whole tree. Invalid
        expressions and non-element results yield nothing.
        """
        context = self._to_xml.get(id(node))
        if context is None:
            return []
        try:
            if node is self._soup:
                results = self._tree.xpath(xpath)
            else:
                results = context.xpath(xpath)
        except etree.XPathError as e:
            logger.debug("Invalid XPath %r: %s", xpath, e)
            return []
        if not isinstance(results, list):
            return []
        return [
            self._to_tag[result]
            for result in results
            if isinstance(result, etree._Element) and result in self._to_tag
        ]
