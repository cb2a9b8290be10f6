"""Unit tests for extraction schema validation."""

import pytest

from htmldistill.exceptions import SchemaError
from htmldistill.extraction.schema import ExtractionSchema, FieldKind, parse_schema


class TestParseSchema:
    """Test schema parsing."""

    def test_json_keys(self) -> None:
        """The usual JSON spelling of keys is accepted."""
        schema = parse_schema(
            {
                "name": "Products",
                "baseSelector": ".product",
                "baseFields": [{"name": "sku", "type": "attribute", "attribute": "data-sku"}],
                "fields": [{"name": "title", "selector": "h2", "type": "text"}],
            }
        )

        assert schema.base_selector == ".product"
        assert schema.base_fields[0].kind is FieldKind.ATTRIBUTE
        assert schema.fields[0].selector == "h2"

    def test_json_string(self) -> None:
        """A JSON document parses the same as a mapping."""
        raw = '{"baseSelector": "li", "fields": [{"name": "t", "type": "text"}]}'

        assert parse_schema(raw) == parse_schema(
            {"baseSelector": "li", "fields": [{"name": "t", "type": "text"}]}
        )

    def test_model_passes_through(self) -> None:
        """An already validated schema is returned as is."""
        schema = ExtractionSchema(base_selector="li", fields=[])

        assert parse_schema(schema) is schema

    @pytest.mark.parametrize(
        "field",
        [
            {"name": "href", "type": "attribute"},
            {"name": "code", "type": "regex"},
            {"name": "child", "type": "nested", "selector": ".c"},
            {"name": "items", "type": "list", "selector": "li", "fields": []},
            {"name": "what", "type": "computed"},
        ],
    )
    def test_invalid_fields(self, field: dict) -> None:
        """Kind-specific requirements are enforced."""
        with pytest.raises(SchemaError):
            parse_schema({"baseSelector": "div", "fields": [field]})

    @pytest.mark.parametrize("raw", ["{not json", '{"fields": []}', "[]"])
    def test_malformed_documents(self, raw: str) -> None:
        """Broken JSON and missing keys are schema errors."""
        with pytest.raises(SchemaError):
            parse_schema(raw)
