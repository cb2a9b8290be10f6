"""XPath 1.0 backend for schema extraction."""

from htmldistill.dom import XmlView, parse_html
from htmldistill.extraction.base import JsonExtractionStrategy


class JsonXPathExtractionStrategy(JsonExtractionStrategy):
    """Schema extraction with XPath 1.0 expressions.

    Relative expressions are evaluated with the current element as context,
    so ``.//h2`` finds descendants and ``@href`` style steps are not needed:
    attribute fields read the attribute off the matched element.
    """

    def _build_query(self, html: str) -> XmlView:
        return XmlView(parse_html(html))
