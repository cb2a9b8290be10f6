"""Extraction schema models.

A schema names a base selector (one record per match) and the fields to
pull out of every matched element. Field keys follow the usual JSON
spelling (``baseSelector``, ``baseFields``, ``type``).
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from htmldistill.exceptions import SchemaError


class FieldKind(StrEnum):
    """How a field turns its target element into a value."""

    TEXT = "text"
    ATTRIBUTE = "attribute"
    HTML = "html"
    REGEX = "regex"
    NESTED = "nested"
    LIST = "list"
    NESTED_LIST = "nested_list"


RECORD_KINDS = frozenset({FieldKind.NESTED, FieldKind.LIST, FieldKind.NESTED_LIST})


class SchemaField(BaseModel):
    """One field of an extraction schema.

    Attributes:
        name: Key of the value in the produced record
        selector: Selector relative to the current element; the current
            element itself is the target when omitted
        kind: Extraction kind (JSON key ``type``)
        attribute: Attribute to read, for ``attribute`` fields
        pattern: Regular expression, for ``regex`` fields
        transform: ``lowercase`` or ``uppercase``; applied to string values
        default: Value used when nothing could be extracted
        fields: Sub-fields, for ``nested``/``list``/``nested_list`` fields

    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    selector: str | None = None
    kind: FieldKind = Field(alias="type")
    attribute: str | None = None
    pattern: str | None = None
    transform: str | None = None
    default: Any = None
    fields: list["SchemaField"] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_kind_requirements(self) -> "SchemaField":
        if self.kind is FieldKind.ATTRIBUTE and not self.attribute:
            raise ValueError(f"Field {self.name!r}: attribute fields need 'attribute'")
        if self.kind is FieldKind.REGEX and not self.pattern:
            raise ValueError(f"Field {self.name!r}: regex fields need 'pattern'")
        if self.kind in RECORD_KINDS and not self.fields:
            raise ValueError(f"Field {self.name!r}: {self.kind} fields need 'fields'")
        return self


class ExtractionSchema(BaseModel):
    """Top-level extraction schema."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str | None = None
    base_selector: str = Field(alias="baseSelector")
    base_fields: list[SchemaField] = Field(default_factory=list, alias="baseFields")
    fields: list[SchemaField]


def parse_schema(raw: ExtractionSchema | Mapping[str, Any] | str | bytes) -> ExtractionSchema:
    """Validate a schema given as a model, a mapping, or a JSON document.

    Raises:
        SchemaError: If the JSON is invalid or does not describe a schema.

    """
    if isinstance(raw, ExtractionSchema):
        return raw
    try:
        if isinstance(raw, (str, bytes)):
            return ExtractionSchema.model_validate_json(raw)
        return ExtractionSchema.model_validate(raw)
    except ValidationError as e:
        raise SchemaError(f"Invalid extraction schema: {e}") from e
