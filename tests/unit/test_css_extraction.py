"""Unit tests for CSS schema extraction."""

import json

import pytest

from htmldistill.extraction import JsonCssExtractionStrategy

PRODUCTS_HTML = """
<html>
  <body>
    <div class="product" data-sku="A1">
      <h2> Product 1 </h2>
      <span class="price">$10</span>
      <a class="link" href="/p/1">details</a>
      <ul class="tags"><li>New</li><li>Sale</li></ul>
    </div>
    <div class="product" data-sku="B2">
      <h2>Product 2</h2>
      <span class="price">$20</span>
      <ul class="tags"></ul>
    </div>
  </body>
</html>
"""

EXPECTED_PRODUCTS = 2


class TestJsonCssExtractionStrategy:
    """Test JsonCssExtractionStrategy."""

    def test_one_record_per_base_match(self) -> None:
        """Each base selector match becomes one record, in document order."""
        schema = {
            "baseSelector": ".product",
            "fields": [
                {"name": "name", "selector": "h2", "type": "text"},
                {"name": "price", "selector": ".price", "type": "text"},
            ],
        }

        records = JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML)

        assert len(records) == EXPECTED_PRODUCTS
        assert records == [
            {"name": "Product 1", "price": "$10"},
            {"name": "Product 2", "price": "$20"},
        ]

    def test_missing_values_use_default_or_are_omitted(self) -> None:
        """Absent targets fall back to the default, or leave the field out."""
        schema = {
            "baseSelector": ".product",
            "fields": [
                {"name": "url", "selector": ".link", "type": "attribute", "attribute": "href"},
                {"name": "rating", "selector": ".rating", "type": "text", "default": "n/a"},
                {"name": "stock", "selector": ".stock", "type": "text"},
            ],
        }

        records = JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML)

        assert records[0] == {"url": "/p/1", "rating": "n/a"}
        assert records[1] == {"rating": "n/a"}

    def test_base_fields_and_current_node(self) -> None:
        """Base fields read the matched element; fields override them."""
        schema = {
            "baseSelector": ".product",
            "baseFields": [
                {"name": "sku", "type": "attribute", "attribute": "data-sku"},
                {"name": "name", "type": "text", "default": "base"},
            ],
            "fields": [{"name": "name", "selector": "h2", "type": "text"}],
        }

        records = JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML)

        assert records[0] == {"sku": "A1", "name": "Product 1"}

    def test_transforms_and_regex(self) -> None:
        """Regex fields yield the first group; transforms apply to strings."""
        schema = {
            "baseSelector": ".product",
            "fields": [
                {"name": "amount", "selector": ".price", "type": "regex", "pattern": r"\$(\d+)"},
                {"name": "upper", "selector": "h2", "type": "text", "transform": "uppercase"},
                {"name": "lower", "selector": "h2", "type": "text", "transform": "lowercase"},
                {"name": "whole", "selector": ".price", "type": "regex", "pattern": r"\d+"},
            ],
        }

        record = JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML)[0]

        assert record == {"amount": "10", "upper": "PRODUCT 1", "lower": "product 1", "whole": "10"}

    def test_html_field(self) -> None:
        """Html fields serialize the target element."""
        schema = {
            "baseSelector": ".product",
            "fields": [{"name": "price_html", "selector": ".price", "type": "html"}],
        }

        record = JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML)[0]

        assert record["price_html"] == '<span class="price">$10</span>'

    def test_nested_and_list(self) -> None:
        """Nested fields give one sub-record; list fields give one per match."""
        schema = {
            "baseSelector": ".product",
            "fields": [
                {
                    "name": "tags",
                    "selector": ".tags li",
                    "type": "list",
                    "fields": [{"name": "tag", "type": "text"}],
                },
                {
                    "name": "meta",
                    "type": "nested",
                    "fields": [{"name": "sku", "type": "attribute", "attribute": "data-sku"}],
                },
            ],
        }

        records = JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML)

        assert records[0]["tags"] == [{"tag": "New"}, {"tag": "Sale"}]
        assert records[1]["tags"] == []
        assert records[0]["meta"] == {"sku": "A1"}

    def test_nested_selector(self) -> None:
        """Nested fields resolve their sub-fields against the selected element."""
        html = (
            '<div class="item"><div class="details">'
            '<span class="info">Info</span></div></div>'
        )
        schema = {
            "baseSelector": ".item",
            "fields": [
                {
                    "name": "details",
                    "selector": ".details",
                    "type": "nested",
                    "fields": [{"name": "info", "selector": ".info", "type": "text"}],
                }
            ],
        }

        assert JsonCssExtractionStrategy(schema).extract(html) == [{"details": {"info": "Info"}}]

    def test_missing_nested_target_is_omitted(self) -> None:
        """A nested field without a target is left out, even with a default."""
        schema = {
            "baseSelector": ".product",
            "fields": [
                {
                    "name": "details",
                    "selector": ".missing",
                    "type": "nested",
                    "default": {"x": 1},
                    "fields": [{"name": "info", "type": "text"}],
                }
            ],
        }

        assert JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML) == [{}, {}]

    def test_unclosed_list_items(self) -> None:
        """Items closed only by the next item yield their own text."""
        schema = {"baseSelector": "li", "fields": [{"name": "v", "type": "text"}]}

        records = JsonCssExtractionStrategy(schema).extract("<ul><li>one<li>two</ul>")

        assert records == [{"v": "one"}, {"v": "two"}]

    def test_invalid_selector_degrades(self) -> None:
        """A malformed field selector yields no value instead of an error."""
        schema = {
            "baseSelector": ".product",
            "fields": [
                {"name": "broken", "selector": "h2[", "type": "text", "default": "-"},
                {"name": "name", "selector": "h2", "type": "text"},
            ],
        }

        records = JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML)

        assert records[1] == {"broken": "-", "name": "Product 2"}

    def test_invalid_base_selector(self) -> None:
        """A malformed base selector matches nothing."""
        schema = {"baseSelector": "div[", "fields": [{"name": "t", "type": "text"}]}

        assert JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML) == []

    @pytest.mark.parametrize("schema", ['{"baseSelector": ', {"fields": []}])
    def test_malformed_schema_returns_empty(self, schema: object) -> None:
        """A malformed schema never raises; extraction just yields nothing."""
        strategy = JsonCssExtractionStrategy(schema)  # type: ignore[arg-type]

        assert strategy.schema is None
        assert strategy.extract(PRODUCTS_HTML) == []

    def test_records_are_json_serializable(self) -> None:
        """Records serialize cleanly for the pipeline."""
        schema = {"baseSelector": "h2", "fields": [{"name": "t", "type": "text"}]}
        records = JsonCssExtractionStrategy(schema).extract(PRODUCTS_HTML)

        assert json.loads(json.dumps(records)) == [{"t": "Product 1"}, {"t": "Product 2"}]
