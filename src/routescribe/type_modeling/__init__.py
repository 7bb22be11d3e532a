"""Type modeling exports."""

from .field_extraction import (
    derive_declaration,
    extract_fields,
    extract_variants,
    resolve_declaration,
)
from .rename_rules import CASE_STYLES, apply_case_style
from .type_models import (
    DeclarationKind,
    Default,
    DerivedFrom,
    EnumTagging,
    FieldDescriptor,
    FieldDirective,
    Flatten,
    RawField,
    RawVariant,
    Rename,
    RenameAll,
    Skip,
    StructMetadata,
    TaggingMode,
    TypeDeclaration,
    TypeExpr,
    VariantDescriptor,
    VariantShape,
)

__all__ = [
    "CASE_STYLES",
    "DeclarationKind",
    "Default",
    "DerivedFrom",
    "EnumTagging",
    "FieldDescriptor",
    "FieldDirective",
    "Flatten",
    "RawField",
    "RawVariant",
    "Rename",
    "RenameAll",
    "Skip",
    "StructMetadata",
    "TaggingMode",
    "TypeDeclaration",
    "TypeExpr",
    "VariantDescriptor",
    "VariantShape",
    "apply_case_style",
    "derive_declaration",
    "extract_fields",
    "extract_variants",
    "resolve_declaration",
]
