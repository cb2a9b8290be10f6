"""Schema-driven structured extraction shared by the CSS and XPath backends."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Protocol

from bs4 import BeautifulSoup
from bs4.element import Tag

from htmldistill.dom import attribute_value
from htmldistill.exceptions import SchemaError
from htmldistill.extraction.schema import ExtractionSchema, FieldKind, SchemaField, parse_schema
from htmldistill.logger import logger

Record = dict[str, Any]
SchemaInput = ExtractionSchema | Mapping[str, Any] | str | bytes


class DocumentQuery(Protocol):
    """Selector engine bound to one parsed document."""

    @property
    def document(self) -> BeautifulSoup: ...

    def select(self, node: Tag, selector: str) -> list[Tag]: ...


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning("Invalid field pattern %r: %s", pattern, e)
        return None


def regex_first(pattern: str, text: str) -> str | None:
    """First match of ``pattern`` in ``text``: group 1 if the pattern has groups."""
    compiled = _compile(pattern)
    if compiled is None:
        return None
    match = compiled.search(text)
    if match is None:
        return None
    return match.group(1) if compiled.groups else match.group(0)


def apply_transform(value: str, transform: str | None) -> str:
    match transform:
        case "lowercase":
            return value.lower()
        case "uppercase":
            return value.upper()
        case _:
            return value


class JsonExtractionStrategy(ABC):
    """Turns every element matching the schema's base selector into a record.

    Subclasses supply the selector language. An invalid schema is logged once
    at construction; extraction then yields no records instead of failing.
    """

    def __init__(self, schema: SchemaInput) -> None:
        self.schema: ExtractionSchema | None
        try:
            self.schema = parse_schema(schema)
        except SchemaError as e:
            logger.warning("%s; extraction disabled", e)
            self.schema = None

    @abstractmethod
    def _build_query(self, html: str) -> DocumentQuery:
        """Parse ``html`` and bind a selector engine to it."""

    def extract(self, html: str) -> list[Record]:
        """Extract one record per base-selector match, in document order.

        Args:
            html: HTML document or fragment.

        Returns:
            The records; an empty list when the schema is invalid or nothing
            matches.

        """
        if self.schema is None:
            return []

        query = self._build_query(html)
        records: list[Record] = []
        for element in query.select(query.document, self.schema.base_selector):
            record = self._extract_item(query, element, self.schema.base_fields)
            record.update(self._extract_item(query, element, self.schema.fields))
            records.append(record)

        logger.debug(
            "Extracted %d record(s) with schema %r", len(records), self.schema.name or "<unnamed>"
        )
        return records

    def _extract_item(self, query: DocumentQuery, node: Tag, fields: list[SchemaField]) -> Record:
        item: Record = {}
        for field in fields:
            value = self._extract_field(query, node, field)
            if value is not None:
                item[field.name] = value
        return item

    def _extract_field(self, query: DocumentQuery, node: Tag, field: SchemaField) -> Any:
        match field.kind:
            case FieldKind.NESTED:
                # No sub-record and no default without a target
                target = self._first(query, node, field.selector)
                if target is None:
                    return None
                return self._extract_item(query, target, field.fields)
            case FieldKind.LIST | FieldKind.NESTED_LIST:
                if field.selector is None:
                    return None
                return [
                    self._extract_item(query, element, field.fields)
                    for element in query.select(node, field.selector)
                ]
            case _:
                target = self._first(query, node, field.selector)
                value = None if target is None else self._read_value(target, field)
                if value is None:
                    return field.default
                return apply_transform(value, field.transform)

    @staticmethod
    def _first(query: DocumentQuery, node: Tag, selector: str | None) -> Tag | None:
        if selector is None:
            return node
        matches = query.select(node, selector)
        return matches[0] if matches else None

    @staticmethod
    def _read_value(target: Tag, field: SchemaField) -> str | None:
        match field.kind:
            case FieldKind.TEXT:
                return target.get_text().strip()
            case FieldKind.ATTRIBUTE:
                return attribute_value(target, field.attribute or "")
            case FieldKind.HTML:
                return str(target)
            case FieldKind.REGEX:
                return regex_first(field.pattern or "", target.get_text())
            case _:
                return None
