"""CSS selector backend for schema extraction."""

from bs4 import BeautifulSoup
from bs4.element import Tag
from soupsieve import SelectorSyntaxError

from htmldistill.dom import parse_html
from htmldistill.extraction.base import JsonExtractionStrategy
from htmldistill.logger import logger


class CssQuery:
    """CSS selectors evaluated by BeautifulSoup (soupsieve)."""

    def __init__(self, document: BeautifulSoup) -> None:
        self.document = document

    def select(self, node: Tag, selector: str) -> list[Tag]:
        try:
            return list(node.select(selector))
        except SelectorSyntaxError as e:
            logger.debug("Invalid CSS selector %r: %s", selector, e)
            return []


class JsonCssExtractionStrategy(JsonExtractionStrategy):
    """Schema extraction with CSS selectors.

    Selectors match descendants of the current element, never the element
    itself.
    """

    def _build_query(self, html: str) -> CssQuery:
        return CssQuery(parse_html(html))
