"""Conversion between schema entities and JSON-compatible mappings."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from routescribe.diagnostics.build_errors import SerializationError

from .schema_models import (
    COMPONENT_PREFIX,
    InlineSchema,
    Schema,
    SchemaKind,
    SchemaRef,
    SchemaReference,
)


def schema_ref_to_dict(schema_ref: SchemaRef) -> dict[str, Any]:
    """Render one schema position."""
    if isinstance(schema_ref, SchemaReference):
        rendered: dict[str, Any] = {"$ref": schema_ref.pointer}
        if schema_ref.description is not None:
            rendered["description"] = schema_ref.description
        return rendered
    return schema_to_dict(schema_ref.schema)


def schema_to_dict(schema: Schema) -> dict[str, Any]:
    """Render a schema with a fixed key order."""
    rendered: dict[str, Any] = {}
    if schema.kind is SchemaKind.ONE_OF:
        rendered["oneOf"] = [schema_ref_to_dict(option) for option in schema.one_of]
    else:
        rendered["type"] = schema.kind.value
    if schema.format is not None:
        rendered["format"] = schema.format
    if schema.description is not None:
        rendered["description"] = schema.description
    if schema.enum:
        rendered["enum"] = list(schema.enum)
    if schema.items is not None:
        rendered["items"] = schema_ref_to_dict(schema.items)
    if schema.prefix_items:
        rendered["prefixItems"] = [schema_ref_to_dict(item) for item in schema.prefix_items]
    if schema.min_items is not None:
        rendered["minItems"] = schema.min_items
    if schema.max_items is not None:
        rendered["maxItems"] = schema.max_items
    if schema.properties:
        rendered["properties"] = {
            name: schema_ref_to_dict(child) for name, child in schema.properties
        }
    if schema.required:
        rendered["required"] = list(schema.required)
    if schema.additional_properties is not None:
        rendered["additionalProperties"] = schema_ref_to_dict(schema.additional_properties)
    return rendered


def schema_ref_from_dict(node: Any) -> SchemaRef:
    """Parse one schema position."""
    if not isinstance(node, Mapping):
        raise SerializationError("Schema nodes must be objects.")
    pointer = node.get("$ref")
    if pointer is not None:
        if not isinstance(pointer, str) or not pointer.startswith(COMPONENT_PREFIX):
            raise SerializationError(f"Unsupported schema reference: {pointer!r}")
        return SchemaReference(
            name=pointer[len(COMPONENT_PREFIX) :], description=node.get("description")
        )
    return InlineSchema(schema_from_dict(node))


def schema_from_dict(node: Any) -> Schema:
    """Parse a schema rendered by `schema_to_dict`."""
    if not isinstance(node, Mapping):
        raise SerializationError("Schema nodes must be objects.")
    if "oneOf" in node:
        kind = SchemaKind.ONE_OF
    else:
        try:
            kind = SchemaKind(node.get("type"))
        except ValueError as exc:
            raise SerializationError(f"Unsupported schema type: {node.get('type')!r}") from exc

    properties = node.get("properties") or {}
    if not isinstance(properties, Mapping):
        raise SerializationError("Schema properties must be an object.")
    return Schema(
        kind=kind,
        format=node.get("format"),
        items=_optional_ref(node.get("items")),
        prefix_items=tuple(schema_ref_from_dict(item) for item in node.get("prefixItems", ())),
        min_items=node.get("minItems"),
        max_items=node.get("maxItems"),
        properties=tuple(
            (name, schema_ref_from_dict(child)) for name, child in properties.items()
        ),
        required=tuple(node.get("required", ())),
        additional_properties=_optional_ref(node.get("additionalProperties")),
        enum=tuple(node.get("enum", ())),
        one_of=tuple(schema_ref_from_dict(option) for option in node.get("oneOf", ())),
        description=node.get("description"),
    )


def _optional_ref(node: Any) -> SchemaRef | None:
    if node is None:
        return None
    return schema_ref_from_dict(node)
