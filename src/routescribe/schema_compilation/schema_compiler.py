"""Compilation of type descriptors into schemas."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from enum import Enum

from routescribe.diagnostics.build_errors import (
    DirectiveError,
    NamingCollisionError,
    SourceLocation,
    TypeResolutionError,
)
from routescribe.type_modeling.field_extraction import derive_declaration, resolve_declaration
from routescribe.type_modeling.type_models import (
    ELLIPSIS,
    LITERAL,
    OPTIONAL,
    TUPLE,
    UNION,
    DeclarationKind,
    EnumTagging,
    FieldDescriptor,
    StructMetadata,
    TaggingMode,
    TypeExpr,
    VariantDescriptor,
    VariantShape,
)

from .schema_models import (
    InlineSchema,
    Schema,
    SchemaKind,
    SchemaRef,
    SchemaReference,
    describe,
    inline,
)
from .schema_registry import DeclarationCatalog, SchemaRegistry

_LOGGER = logging.getLogger(__name__)

PRIMITIVE_TYPES: dict[str, tuple[SchemaKind, str | None]] = {
    "str": (SchemaKind.STRING, None),
    "int": (SchemaKind.INTEGER, "int64"),
    "float": (SchemaKind.NUMBER, "double"),
    "bool": (SchemaKind.BOOLEAN, None),
    "bytes": (SchemaKind.STRING, "binary"),
    "bytearray": (SchemaKind.STRING, "binary"),
    "datetime": (SchemaKind.STRING, "date-time"),
    "date": (SchemaKind.STRING, "date"),
    "time": (SchemaKind.STRING, "time"),
    "timedelta": (SchemaKind.STRING, "duration"),
    "UUID": (SchemaKind.STRING, "uuid"),
    "Decimal": (SchemaKind.STRING, "decimal"),
    "EmailStr": (SchemaKind.STRING, "email"),
    "AnyUrl": (SchemaKind.STRING, "uri"),
    "HttpUrl": (SchemaKind.STRING, "uri"),
    "Any": (SchemaKind.OBJECT, None),
    "object": (SchemaKind.OBJECT, None),
}

SEQUENCE_TYPES = frozenset(
    {
        "list",
        "List",
        "set",
        "Set",
        "frozenset",
        "FrozenSet",
        "AbstractSet",
        "MutableSet",
        "Sequence",
        "MutableSequence",
        "Collection",
        "Iterable",
        "Iterator",
        "deque",
    }
)

MAPPING_TYPES = frozenset(
    {"dict", "Dict", "Mapping", "MutableMapping", "OrderedDict", "defaultdict"}
)


class UnknownTypePolicy(str, Enum):
    """What to do with a type that cannot be resolved."""

    LENIENT = "lenient"
    STRICT = "strict"


class SchemaCompiler:
    """Turns type descriptors into schema positions.

    Declared types compile to component references and are registered in the
    shared `SchemaRegistry`. The visiting set is local to one compiler, so
    concurrent workers each own a compiler and share the registry.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        catalog: DeclarationCatalog,
        *,
        policy: UnknownTypePolicy = UnknownTypePolicy.LENIENT,
    ) -> None:
        self._registry = registry
        self._catalog = catalog
        self._policy = policy
        self._visiting: set[str] = set()
        self._flattening: set[str] = set()
        self._locations: list[SourceLocation | None] = []

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    @property
    def catalog(self) -> DeclarationCatalog:
        return self._catalog

    def compile(self, type_expr: TypeExpr, *, location: SourceLocation | None = None) -> SchemaRef:
        """Compile one type position.

        Raises:
          TypeResolutionError: Only under the strict policy, for unresolvable types.
        """
        self._locations.append(location)
        try:
            return self._compile(type_expr)
        finally:
            self._locations.pop()

    def compile_named(self, name: str, metadata: StructMetadata) -> SchemaRef:
        """Compile a resolved declaration and register it under `name`.

        Compiling the same definition twice yields the same reference; a
        different definition under the same name raises `NamingCollisionError`.
        """
        if name in self._visiting:
            return SchemaReference(name)
        self._visiting.add(name)
        self._locations.append(metadata.location)
        try:
            if metadata.kind is DeclarationKind.STRUCT:
                schema = self._compile_struct(metadata.fields, metadata.description)
            else:
                schema = self._compile_enum(
                    metadata.variants, metadata.tagging, metadata.description
                )
        finally:
            self._locations.pop()
            self._visiting.discard(name)
        try:
            self._registry.insert(name, schema)
        except NamingCollisionError as exc:
            exc.at(metadata.location)
            raise
        return SchemaReference(name)

    def resolve_metadata(self, type_expr: TypeExpr) -> StructMetadata | None:
        """Resolve a declared (possibly generic) type into its metadata.

        Returns None when the type is not a declared type or the number of
        type arguments does not match the declaration.
        """
        target = type_expr.unwrap_optional()
        declaration = self._catalog.get(target.name)
        if declaration is None or len(target.args) != len(declaration.generic_params):
            return None
        declaration = derive_declaration(declaration, self._catalog.get)
        bindings = dict(zip(declaration.generic_params, target.args))
        key = declaration.registry_name
        if target.args:
            key = "_".join([key] + [arg.registry_name() for arg in target.args])
        return resolve_declaration(declaration, key=key, bindings=bindings)

    def expand_fields(self, metadata: StructMetadata) -> tuple[FieldDescriptor, ...]:
        """Return the struct's fields with flattened members inlined."""
        expanded: list[FieldDescriptor] = []
        for field in metadata.fields:
            if field.flatten:
                nested = self._flattened_fields(field)
                if isinstance(nested, tuple):
                    expanded.extend(
                        replace(member, required=member.required and field.required)
                        for member in nested
                    )
                    continue
            expanded.append(replace(field, flatten=False))
        return tuple(expanded)

    def can_resolve(self, type_expr: TypeExpr) -> bool:
        """Return True when the type is statically known without degradation."""
        name = type_expr.name
        if name in (OPTIONAL, UNION):
            return all(arg.is_none or self.can_resolve(arg) for arg in type_expr.args)
        if name == LITERAL:
            return bool(type_expr.literals)
        if name in PRIMITIVE_TYPES:
            return True
        if name in SEQUENCE_TYPES or name in MAPPING_TYPES or name == TUPLE:
            return all(arg.name == ELLIPSIS or self.can_resolve(arg) for arg in type_expr.args)
        declaration = self._catalog.get(name)
        if declaration is None or len(type_expr.args) != len(declaration.generic_params):
            return False
        return all(self.can_resolve(arg) for arg in type_expr.args)

    def _compile(self, type_expr: TypeExpr) -> SchemaRef:
        name = type_expr.name
        if name == OPTIONAL:
            if not type_expr.args:
                return self._unresolved(type_expr, "Optional requires one type argument.")
            return self._compile(type_expr.args[0])
        if name == UNION:
            return self._compile_union(type_expr)
        if name == LITERAL:
            return self._compile_literal(type_expr)
        if name in PRIMITIVE_TYPES and not type_expr.args:
            kind, schema_format = PRIMITIVE_TYPES[name]
            return inline(kind, format=schema_format)
        if name in SEQUENCE_TYPES:
            element = type_expr.args[0] if type_expr.args else TypeExpr("Any")
            return inline(SchemaKind.ARRAY, items=self._compile(element))
        if name in MAPPING_TYPES:
            value = type_expr.args[1] if len(type_expr.args) == 2 else TypeExpr("Any")
            return inline(SchemaKind.OBJECT, additional_properties=self._compile(value))
        if name == TUPLE:
            return self._compile_tuple(type_expr)
        if name in self._catalog:
            return self._compile_declared(type_expr)
        return self._unresolved(type_expr, f"Unsupported type: {type_expr.display()}")

    def _compile_declared(self, type_expr: TypeExpr) -> SchemaRef:
        metadata = self.resolve_metadata(type_expr)
        if metadata is None:
            declaration = self._catalog.get(type_expr.name)
            expected = len(declaration.generic_params) if declaration else 0
            return self._unresolved(
                type_expr,
                f"Type '{type_expr.name}' expects {expected} type argument(s), "
                f"got {len(type_expr.args)}.",
            )
        if metadata.key in self._visiting or metadata.key in self._registry:
            return SchemaReference(metadata.key)
        return self.compile_named(metadata.key, metadata)

    def _compile_union(self, type_expr: TypeExpr) -> SchemaRef:
        options = [arg for arg in type_expr.args if not arg.is_none]
        if not options:
            return self._unresolved(type_expr, "Union must contain a non-None member.")
        if len(options) == 1:
            return self._compile(options[0])
        return inline(
            SchemaKind.ONE_OF, one_of=tuple(self._compile(option) for option in options)
        )

    def _compile_literal(self, type_expr: TypeExpr) -> SchemaRef:
        literals = type_expr.literals
        if not literals:
            return self._unresolved(type_expr, "Literal requires at least one value.")
        if all(isinstance(value, bool) for value in literals):
            kind = SchemaKind.BOOLEAN
        elif all(isinstance(value, int) and not isinstance(value, bool) for value in literals):
            kind = SchemaKind.INTEGER
        elif all(
            isinstance(value, (int, float)) and not isinstance(value, bool) for value in literals
        ):
            kind = SchemaKind.NUMBER
        elif all(isinstance(value, str) for value in literals):
            kind = SchemaKind.STRING
        else:
            return self._unresolved(type_expr, "Literal values must share one kind.")
        return inline(kind, enum=tuple(literals))

    def _compile_tuple(self, type_expr: TypeExpr) -> SchemaRef:
        args = type_expr.args
        if len(args) == 2 and args[1].name == ELLIPSIS:
            return inline(SchemaKind.ARRAY, items=self._compile(args[0]))
        return inline(
            SchemaKind.ARRAY,
            prefix_items=tuple(self._compile(arg) for arg in args),
            min_items=len(args),
            max_items=len(args),
        )

    def _compile_struct(
        self, fields: Sequence[FieldDescriptor], description: str | None
    ) -> Schema:
        properties: list[tuple[str, SchemaRef]] = []
        required: list[str] = []
        self._collect_fields(fields, properties, required, parent_required=True)
        return Schema(
            kind=SchemaKind.OBJECT,
            properties=tuple(properties),
            required=tuple(required),
            description=description,
        )

    def _collect_fields(
        self,
        fields: Sequence[FieldDescriptor],
        properties: list[tuple[str, SchemaRef]],
        required: list[str],
        *,
        parent_required: bool,
    ) -> None:
        for field in fields:
            field_required = parent_required and field.required
            if field.flatten:
                nested = self._flattened_fields(field)
                if isinstance(nested, tuple):
                    self._collect_fields(
                        nested, properties, required, parent_required=field_required
                    )
                    continue
                schema_ref: SchemaRef = nested
            else:
                schema_ref = describe(self._compile(field.type_expr), field.description)
            if any(name == field.name for name, _ in properties):
                raise DirectiveError(
                    f"Property '{field.name}' is defined more than once after flattening.",
                    self._current_location(),
                )
            properties.append((field.name, schema_ref))
            if field_required:
                required.append(field.name)

    def _flattened_fields(self, field: FieldDescriptor) -> tuple[FieldDescriptor, ...] | SchemaRef:
        metadata = self.resolve_metadata(field.type_expr)
        if metadata is None or metadata.kind is not DeclarationKind.STRUCT:
            return self._unresolved(
                field.type_expr,
                f"Flattened field '{field.source_name}' must reference a declared struct.",
            )
        if metadata.key in self._flattening:
            return self._unresolved(
                field.type_expr, f"Flattening '{metadata.key}' into itself is cyclic."
            )
        self._flattening.add(metadata.key)
        try:
            resolved: list[FieldDescriptor] = []
            for nested in metadata.fields:
                if nested.flatten:
                    inner = self._flattened_fields(nested)
                    if isinstance(inner, tuple):
                        resolved.extend(
                            replace(member, required=member.required and nested.required)
                            for member in inner
                        )
                        continue
                    nested = replace(nested, flatten=False)
                resolved.append(nested)
            return tuple(resolved)
        finally:
            self._flattening.discard(metadata.key)

    def _compile_enum(
        self,
        variants: Sequence[VariantDescriptor],
        tagging: EnumTagging,
        description: str | None,
    ) -> Schema:
        if all(variant.shape is VariantShape.UNIT for variant in variants):
            return Schema(
                kind=SchemaKind.STRING,
                enum=tuple(variant.name for variant in variants),
                description=description,
            )
        return Schema(
            kind=SchemaKind.ONE_OF,
            one_of=tuple(self._compile_variant(variant, tagging) for variant in variants),
            description=description,
        )

    def _compile_variant(self, variant: VariantDescriptor, tagging: EnumTagging) -> SchemaRef:
        if tagging.mode is TaggingMode.INTERNAL:
            return self._compile_internal_variant(variant, tagging.tag or "type")

        payload = self._variant_payload(variant)
        if tagging.mode is TaggingMode.ADJACENT:
            tag = tagging.tag or "type"
            content = tagging.content or "content"
            properties: list[tuple[str, SchemaRef]] = [(tag, self._tag_value(variant))]
            if payload is not None:
                properties.append((content, payload))
            return InlineSchema(
                Schema(
                    kind=SchemaKind.OBJECT,
                    properties=tuple(properties),
                    required=tuple(name for name, _ in properties),
                    description=variant.description,
                )
            )

        if payload is None:
            return inline(
                SchemaKind.STRING, enum=(variant.name,), description=variant.description
            )
        return inline(
            SchemaKind.OBJECT,
            properties=((variant.name, payload),),
            required=(variant.name,),
            description=variant.description,
        )

    def _compile_internal_variant(self, variant: VariantDescriptor, tag: str) -> SchemaRef:
        fields: tuple[FieldDescriptor, ...] = ()
        if variant.shape is VariantShape.STRUCT:
            fields = variant.fields
        elif variant.shape is VariantShape.TUPLE:
            metadata = (
                self.resolve_metadata(variant.elements[0]) if len(variant.elements) == 1 else None
            )
            if metadata is None or metadata.kind is not DeclarationKind.STRUCT:
                return self._unresolved(
                    TypeExpr(TUPLE, variant.elements),
                    f"Internally tagged variant '{variant.source_name}' must carry "
                    "named fields or a single struct.",
                )
            fields = metadata.fields

        properties: list[tuple[str, SchemaRef]] = [(tag, self._tag_value(variant))]
        required: list[str] = [tag]
        self._collect_fields(fields, properties, required, parent_required=True)
        if sum(1 for name, _ in properties if name == tag) > 1:
            raise DirectiveError(
                f"Variant '{variant.source_name}' has a field named like the tag '{tag}'.",
                self._current_location(),
            )
        return InlineSchema(
            Schema(
                kind=SchemaKind.OBJECT,
                properties=tuple(properties),
                required=tuple(required),
                description=variant.description,
            )
        )

    def _variant_payload(self, variant: VariantDescriptor) -> SchemaRef | None:
        if variant.shape is VariantShape.UNIT:
            return None
        if variant.shape is VariantShape.STRUCT:
            return InlineSchema(self._compile_struct(variant.fields, None))
        if len(variant.elements) == 1:
            return self._compile(variant.elements[0])
        return self._compile_tuple(TypeExpr(TUPLE, variant.elements))

    @staticmethod
    def _tag_value(variant: VariantDescriptor) -> SchemaRef:
        return inline(SchemaKind.STRING, enum=(variant.name,))

    def _unresolved(self, type_expr: TypeExpr, reason: str) -> SchemaRef:
        location = self._current_location()
        if self._policy is UnknownTypePolicy.STRICT:
            raise TypeResolutionError(reason, location)
        _LOGGER.warning("%s%s; documenting it as a generic object.", _prefix(location), reason)
        return inline(SchemaKind.OBJECT, description=f"Unsupported type: {type_expr.display()}")

    def _current_location(self) -> SourceLocation | None:
        for location in reversed(self._locations):
            if location is not None:
                return location
        return None


def _prefix(location: SourceLocation | None) -> str:
    return f"{location}: " if location is not None else ""
