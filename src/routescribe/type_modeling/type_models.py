"""Type modeling entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from routescribe.diagnostics.build_errors import SourceLocation

OPTIONAL = "Optional"
UNION = "Union"
LITERAL = "Literal"
TUPLE = "tuple"
NONE = "None"
ELLIPSIS = "..."


@dataclass(frozen=True)
class TypeExpr:
    """Canonical descriptor of one type position.

    `name` is the last segment of the referenced type name, `args` are its
    subscript arguments in order and `literals` holds the values of a
    `Literal[...]` type.
    """

    name: str
    args: tuple[TypeExpr, ...] = ()
    literals: tuple[str | int | float | bool, ...] = ()

    @property
    def is_optional(self) -> bool:
        return self.name == OPTIONAL

    @property
    def is_none(self) -> bool:
        return self.name == NONE

    def unwrap_optional(self) -> TypeExpr:
        """Return the inner type of one optional wrapper level."""
        if self.is_optional and self.args:
            return self.args[0]
        return self

    def display(self) -> str:
        """Render the type the way it reads in source."""
        if self.name == LITERAL:
            return f"Literal[{', '.join(repr(value) for value in self.literals)}]"
        if not self.args:
            return "()" if self.name == TUPLE else self.name
        return f"{self.name}[{', '.join(arg.display() for arg in self.args)}]"

    def registry_name(self) -> str:
        """Render the type as a registry-safe name (`Page_list_User`)."""
        if not self.args:
            return self.name.replace(".", "")
        parts = [self.name] + [arg.registry_name() for arg in self.args]
        return "_".join(part for part in parts if part)

    def substitute(self, bindings: dict[str, TypeExpr]) -> TypeExpr:
        """Replace generic parameter names with their bound concrete types."""
        if not self.args and self.name in bindings:
            return bindings[self.name]
        if not self.args:
            return self
        return TypeExpr(
            name=self.name,
            args=tuple(arg.substitute(bindings) for arg in self.args),
            literals=self.literals,
        )


def optional_of(inner: TypeExpr) -> TypeExpr:
    return TypeExpr(name=OPTIONAL, args=(inner,))


@dataclass(frozen=True)
class Rename:
    """Use `name` instead of the source name."""

    name: str


@dataclass(frozen=True)
class RenameAll:
    """Apply a case style to every member name."""

    style: str


@dataclass(frozen=True)
class Default:
    """Field may be omitted on the wire."""


@dataclass(frozen=True)
class Skip:
    """Field never appears on the wire."""


@dataclass(frozen=True)
class Flatten:
    """Inline the nested struct's fields into the parent."""


FieldDirective = Rename | RenameAll | Default | Skip | Flatten


class DeclarationKind(str, Enum):
    """Shape of a type declaration."""

    STRUCT = "struct"
    ENUM = "enum"


class VariantShape(str, Enum):
    """Payload shape of one enum variant."""

    UNIT = "unit"
    TUPLE = "tuple"
    STRUCT = "struct"


class TaggingMode(str, Enum):
    """Wire representation of data-carrying enums."""

    EXTERNAL = "external"
    INTERNAL = "internal"
    ADJACENT = "adjacent"


@dataclass(frozen=True)
class EnumTagging:
    """Tagging configuration applied identically to every variant."""

    mode: TaggingMode = TaggingMode.EXTERNAL
    tag: str | None = None
    content: str | None = None


@dataclass(frozen=True)
class RawField:
    """Field as declared in source, before directives are resolved."""

    source_name: str
    type_expr: TypeExpr
    directives: tuple[FieldDirective, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class RawVariant:
    """Enum variant as declared in source."""

    source_name: str
    shape: VariantShape
    fields: tuple[RawField, ...] = ()
    elements: tuple[TypeExpr, ...] = ()
    directives: tuple[FieldDirective, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class DerivedFrom:
    """Fields taken from another struct, optionally filtered.

    `pick` keeps only the named fields and `omit` drops the named fields;
    both match a field by its source name or its wire name.
    """

    source: str
    pick: tuple[str, ...] = ()
    omit: tuple[str, ...] = ()


@dataclass(frozen=True)
class TypeDeclaration:  # pylint: disable=too-many-instance-attributes
    """One declared struct or enum, as handed over by the source frontend."""

    name: str
    kind: DeclarationKind
    definition: str
    schema_name: str | None = None
    fields: tuple[RawField, ...] = ()
    variants: tuple[RawVariant, ...] = ()
    generic_params: tuple[str, ...] = ()
    rename_all: str | None = None
    tagging: EnumTagging = field(default_factory=EnumTagging)
    description: str | None = None
    location: SourceLocation | None = None
    derived_from: DerivedFrom | None = None

    @property
    def registry_name(self) -> str:
        """Component name; a custom schema name wins over the class name."""
        return self.schema_name or self.name


@dataclass(frozen=True)
class FieldDescriptor:
    """Resolved field: post-rename name, unwrapped type and requiredness."""

    source_name: str
    name: str
    type_expr: TypeExpr
    required: bool
    description: str | None = None
    flatten: bool = False


@dataclass(frozen=True)
class VariantDescriptor:
    """Resolved enum variant."""

    source_name: str
    name: str
    shape: VariantShape
    fields: tuple[FieldDescriptor, ...] = ()
    elements: tuple[TypeExpr, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class StructMetadata:  # pylint: disable=too-many-instance-attributes
    """Resolved declaration ready for schema compilation."""

    key: str
    definition: str
    kind: DeclarationKind
    members: tuple[FieldDescriptor, ...] | tuple[VariantDescriptor, ...]
    tagging: EnumTagging = field(default_factory=EnumTagging)
    description: str | None = None
    location: SourceLocation | None = None

    @property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(member for member in self.members if isinstance(member, FieldDescriptor))

    @property
    def variants(self) -> tuple[VariantDescriptor, ...]:
        return tuple(member for member in self.members if isinstance(member, VariantDescriptor))
