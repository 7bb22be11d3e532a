"""Schema entities."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

COMPONENT_PREFIX = "#/components/schemas/"

LiteralValue = str | int | float | bool | None


class SchemaKind(str, Enum):
    """Structural kind of a schema."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ONE_OF = "oneOf"


@dataclass(frozen=True)
class Schema:  # pylint: disable=too-many-instance-attributes
    """JSON-Schema-like description of one type.

    Properties keep declaration order; `required` lists names in the same order.
    """

    kind: SchemaKind
    format: str | None = None
    items: SchemaRef | None = None
    prefix_items: tuple[SchemaRef, ...] = ()
    min_items: int | None = None
    max_items: int | None = None
    properties: tuple[tuple[str, SchemaRef], ...] = ()
    required: tuple[str, ...] = ()
    additional_properties: SchemaRef | None = None
    enum: tuple[LiteralValue, ...] = ()
    one_of: tuple[SchemaRef, ...] = ()
    description: str | None = None

    @property
    def property_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.properties)

    def property(self, name: str) -> SchemaRef | None:
        for property_name, schema_ref in self.properties:
            if property_name == name:
                return schema_ref
        return None

    def with_description(self, description: str | None) -> Schema:
        if description is None:
            return self
        return replace(self, description=description)


@dataclass(frozen=True)
class InlineSchema:
    """Schema written in place."""

    schema: Schema


@dataclass(frozen=True)
class SchemaReference:
    """Pointer to a named component schema."""

    name: str
    description: str | None = None

    @property
    def pointer(self) -> str:
        return f"{COMPONENT_PREFIX}{self.name}"


SchemaRef = InlineSchema | SchemaReference


def inline(kind: SchemaKind, **attributes) -> InlineSchema:
    """Shorthand for an inline schema of the given kind."""
    return InlineSchema(Schema(kind=kind, **attributes))


def describe(schema_ref: SchemaRef, description: str | None) -> SchemaRef:
    """Attach a description to a schema position."""
    if description is None:
        return schema_ref
    if isinstance(schema_ref, InlineSchema):
        return InlineSchema(schema_ref.schema.with_description(description))
    return SchemaReference(name=schema_ref.name, description=description)
