"""Resolution of declared members into canonical descriptors."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace

from routescribe.diagnostics.build_errors import DirectiveError

from .rename_rules import apply_case_style
from .type_models import (
    DeclarationKind,
    Default,
    DerivedFrom,
    FieldDescriptor,
    FieldDirective,
    Flatten,
    RawField,
    RawVariant,
    Rename,
    RenameAll,
    Skip,
    StructMetadata,
    TypeDeclaration,
    TypeExpr,
    VariantDescriptor,
    VariantShape,
)


def resolve_declaration(
    declaration: TypeDeclaration,
    *,
    key: str | None = None,
    bindings: Mapping[str, TypeExpr] | None = None,
) -> StructMetadata:
    """Resolve directives of one declaration into a `StructMetadata`.

    Args:
      declaration: Declaration handed over by the source frontend.
      key: Registry key; defaults to the declared name.
      bindings: Concrete types for the declaration's generic parameters.

    Raises:
      DirectiveError: If a directive is malformed or two members share a wire name.
    """
    resolved_bindings = dict(bindings or {})
    try:
        if declaration.kind is DeclarationKind.STRUCT:
            members: tuple = extract_fields(
                declaration.fields, declaration.rename_all, resolved_bindings
            )
        else:
            members = extract_variants(
                declaration.variants, declaration.rename_all, resolved_bindings
            )
    except DirectiveError as exc:
        exc.at(declaration.location)
        raise
    return StructMetadata(
        key=key or declaration.registry_name,
        definition=declaration.definition,
        kind=declaration.kind,
        members=members,
        tagging=declaration.tagging,
        description=declaration.description,
        location=declaration.location,
    )


def derive_declaration(
    declaration: TypeDeclaration,
    lookup: Callable[[str], TypeDeclaration | None],
) -> TypeDeclaration:
    """Replace the fields of a derived declaration with its source struct's fields.

    Filtered fields keep their directives, and the source's `rename_all`
    applies, so wire names and requiredness match the source. Declarations
    that do not derive are returned unchanged.

    Args:
      declaration: Declaration handed over by the source frontend.
      lookup: Returns the declaration registered under a type name.

    Raises:
      DirectiveError: If the source is unknown, is not a non-generic struct,
        derives back to the declaration or a filter names an unknown field.
    """
    return _derive(declaration, lookup, ())


def extract_fields(
    raw_fields: Sequence[RawField],
    rename_all: str | None,
    bindings: Mapping[str, TypeExpr] | None = None,
) -> tuple[FieldDescriptor, ...]:
    """Return descriptors for every non-skipped field, in declaration order."""
    descriptors: list[FieldDescriptor] = []
    seen_names: set[str] = set()
    for raw_field in raw_fields:
        directives = raw_field.directives
        if any(isinstance(directive, RenameAll) for directive in directives):
            raise DirectiveError(
                f"Field '{raw_field.source_name}' cannot carry rename_all; "
                "it applies to containers and variants."
            )
        if _has(directives, Skip):
            continue
        declared_type = raw_field.type_expr.substitute(dict(bindings or {}))
        flatten = _has(directives, Flatten)
        name = _resolved_name(raw_field.source_name, directives, rename_all)
        if not flatten:
            if name in seen_names:
                raise DirectiveError(f"Duplicate wire name '{name}' in field list.")
            seen_names.add(name)
        descriptors.append(
            FieldDescriptor(
                source_name=raw_field.source_name,
                name=name,
                type_expr=declared_type.unwrap_optional(),
                required=not declared_type.is_optional and not _has(directives, Default),
                description=raw_field.description,
                flatten=flatten,
            )
        )
    return tuple(descriptors)


def extract_variants(
    raw_variants: Sequence[RawVariant],
    rename_all: str | None,
    bindings: Mapping[str, TypeExpr] | None = None,
) -> tuple[VariantDescriptor, ...]:
    """Return descriptors for every non-skipped enum variant."""
    resolved_bindings = dict(bindings or {})
    descriptors: list[VariantDescriptor] = []
    seen_names: set[str] = set()
    for raw_variant in raw_variants:
        directives = raw_variant.directives
        if _has(directives, Default) or _has(directives, Flatten):
            raise DirectiveError(
                f"Variant '{raw_variant.source_name}' only accepts rename, rename_all and skip."
            )
        if _has(directives, Skip):
            continue
        name = _resolved_name(raw_variant.source_name, directives, rename_all)
        if name in seen_names:
            raise DirectiveError(f"Duplicate variant name '{name}'.")
        seen_names.add(name)

        fields: tuple[FieldDescriptor, ...] = ()
        if raw_variant.shape is VariantShape.STRUCT:
            variant_style = next(
                (d.style for d in directives if isinstance(d, RenameAll)), rename_all
            )
            fields = extract_fields(raw_variant.fields, variant_style, resolved_bindings)
        descriptors.append(
            VariantDescriptor(
                source_name=raw_variant.source_name,
                name=name,
                shape=raw_variant.shape,
                fields=fields,
                elements=tuple(
                    element.substitute(resolved_bindings) for element in raw_variant.elements
                ),
                description=raw_variant.description,
            )
        )
    return tuple(descriptors)


def _resolved_name(
    source_name: str, directives: Sequence[FieldDirective], rename_all: str | None
) -> str:
    renames = [directive.name for directive in directives if isinstance(directive, Rename)]
    if len(renames) > 1:
        raise DirectiveError(f"Member '{source_name}' has more than one rename directive.")
    if renames:
        if not renames[0]:
            raise DirectiveError(f"Member '{source_name}' cannot be renamed to an empty name.")
        return renames[0]
    return apply_case_style(source_name, rename_all)


def _has(directives: Sequence[FieldDirective], directive_type: type) -> bool:
    return any(isinstance(directive, directive_type) for directive in directives)


def _derive(
    declaration: TypeDeclaration,
    lookup: Callable[[str], TypeDeclaration | None],
    chain: tuple[str, ...],
) -> TypeDeclaration:
    derived = declaration.derived_from
    if derived is None:
        return declaration
    try:
        if derived.source == declaration.name or derived.source in chain:
            raise DirectiveError(
                f"Schema '{declaration.name}' derives from itself through '{derived.source}'."
            )
        source = lookup(derived.source)
        if source is None:
            raise DirectiveError(
                f"Schema '{declaration.name}' derives from unknown type '{derived.source}'."
            )
        source = _derive(source, lookup, chain + (declaration.name,))
        if source.kind is not DeclarationKind.STRUCT or source.generic_params:
            raise DirectiveError(
                f"Schema '{declaration.name}' can only derive from a non-generic struct; "
                f"'{source.name}' is not one."
            )
        fields = _filtered_fields(source, derived)
    except DirectiveError as exc:
        exc.at(declaration.location)
        raise
    return replace(
        declaration,
        fields=fields,
        rename_all=source.rename_all,
        description=declaration.description or source.description,
        derived_from=None,
    )


def _filtered_fields(source: TypeDeclaration, derived: DerivedFrom) -> tuple[RawField, ...]:
    wire_names = {
        raw_field.source_name: _resolved_name(
            raw_field.source_name, raw_field.directives, source.rename_all
        )
        for raw_field in source.fields
    }
    known = set(wire_names) | set(wire_names.values())
    for option, names in (("pick", derived.pick), ("omit", derived.omit)):
        unknown = sorted(set(names) - known)
        if unknown:
            raise DirectiveError(
                f"Schema option '{option}' names unknown field(s) of "
                f"'{source.name}': {', '.join(unknown)}."
            )

    def named(raw_field: RawField, names: Sequence[str]) -> bool:
        return raw_field.source_name in names or wire_names[raw_field.source_name] in names

    return tuple(
        raw_field
        for raw_field in source.fields
        if not named(raw_field, derived.omit)
        and (not derived.pick or named(raw_field, derived.pick))
    )
