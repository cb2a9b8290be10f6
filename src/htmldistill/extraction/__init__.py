"""Structured extraction: schema-driven (CSS, XPath) and regex scraping."""

from htmldistill.extraction.base import JsonExtractionStrategy
from htmldistill.extraction.css import JsonCssExtractionStrategy
from htmldistill.extraction.regex import PatternFamily, RegexExtractionStrategy
from htmldistill.extraction.schema import ExtractionSchema, FieldKind, SchemaField, parse_schema
from htmldistill.extraction.xpath import JsonXPathExtractionStrategy

ExtractionStrategy = JsonExtractionStrategy | RegexExtractionStrategy

__all__ = [
    "ExtractionSchema",
    "ExtractionStrategy",
    "FieldKind",
    "JsonCssExtractionStrategy",
    "JsonExtractionStrategy",
    "JsonXPathExtractionStrategy",
    "PatternFamily",
    "RegexExtractionStrategy",
    "SchemaField",
    "parse_schema",
]
