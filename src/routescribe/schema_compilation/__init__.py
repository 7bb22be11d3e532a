"""Schema compilation exports."""

from .schema_codec import schema_from_dict, schema_ref_from_dict, schema_ref_to_dict, schema_to_dict
from .schema_compiler import SchemaCompiler, UnknownTypePolicy
from .schema_models import InlineSchema, Schema, SchemaKind, SchemaRef, SchemaReference
from .schema_registry import DeclarationCatalog, SchemaRegistry

__all__ = [
    "DeclarationCatalog",
    "InlineSchema",
    "Schema",
    "SchemaCompiler",
    "SchemaKind",
    "SchemaRef",
    "SchemaReference",
    "SchemaRegistry",
    "UnknownTypePolicy",
    "schema_from_dict",
    "schema_ref_from_dict",
    "schema_ref_to_dict",
    "schema_to_dict",
]
