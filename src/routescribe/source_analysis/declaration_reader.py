"""Reading of `@schema` class declarations from a parsed module."""

from __future__ import annotations

import ast
from pathlib import Path

from routescribe.diagnostics.build_errors import DirectiveError, SourceLocation
from routescribe.type_modeling.type_models import (
    DeclarationKind,
    Default,
    DerivedFrom,
    EnumTagging,
    FieldDirective,
    Flatten,
    RawField,
    RawVariant,
    Rename,
    RenameAll,
    Skip,
    TaggingMode,
    TypeDeclaration,
    VariantShape,
)

from .annotation_parser import is_class_var, parse_annotation, split_annotated
from .syntax_helpers import (
    dotted_tail,
    find_decorator,
    keyword_arguments,
    literal_value,
    string_statement,
)

SCHEMA_DECORATOR = "schema"
VARIANT_MARKER = "Variant"

_ENUM_BASES = frozenset({"Enum", "StrEnum", "IntEnum", "Flag", "IntFlag"})
_STRING_OPTIONS = frozenset({"name", "rename_all", "tag", "content", "source"})
_NAME_LIST_OPTIONS = frozenset({"pick", "omit"})
_DIRECTIVE_MARKERS = {
    "Rename": Rename,
    "RenameAll": RenameAll,
    "Default": Default,
    "Skip": Skip,
    "Flatten": Flatten,
}


def read_declarations(module: ast.Module, source: str, path: Path) -> tuple[TypeDeclaration, ...]:
    """Return every top-level class decorated with `@schema`, in source order.

    Raises:
      DirectiveError: If a decorator argument or member directive is malformed.
    """
    declarations = []
    for node in module.body:
        if not isinstance(node, ast.ClassDef):
            continue
        decorator = find_decorator(node.decorator_list, SCHEMA_DECORATOR)
        if decorator is None:
            continue
        location = SourceLocation(path, node.lineno)
        try:
            declarations.append(_read_class(node, decorator, source, location))
        except DirectiveError as exc:
            exc.at(location)
            raise
    return tuple(declarations)


def _read_class(
    node: ast.ClassDef, decorator: ast.expr, source: str, location: SourceLocation
) -> TypeDeclaration:
    arguments = keyword_arguments(decorator)
    unknown = sorted(set(arguments) - _STRING_OPTIONS - _NAME_LIST_OPTIONS)
    if unknown:
        raise DirectiveError(f"Unknown schema option(s): {', '.join(unknown)}.")
    options = {
        key: _string_option(value, key)
        for key, value in arguments.items()
        if key in _STRING_OPTIONS
    }

    is_enum = any(dotted_tail(base) in _ENUM_BASES for base in node.bases)
    derived_from = _derived_from(node, options, arguments, is_enum)
    return TypeDeclaration(
        name=node.name,
        kind=DeclarationKind.ENUM if is_enum else DeclarationKind.STRUCT,
        definition=ast.get_source_segment(source, node) or ast.unparse(node),
        schema_name=options.get("name"),
        fields=() if is_enum or derived_from else _read_fields(node.body),
        variants=_read_variants(node.body) if is_enum else (),
        generic_params=_generic_params(node),
        rename_all=options.get("rename_all"),
        tagging=_tagging(options.get("tag"), options.get("content")),
        description=ast.get_docstring(node),
        location=location,
        derived_from=derived_from,
    )


def _string_option(node: ast.expr, key: str) -> str:
    try:
        value = literal_value(node)
    except ValueError as exc:
        raise DirectiveError(f"Schema option '{key}' must be a string literal.") from exc
    if not isinstance(value, str):
        raise DirectiveError(f"Schema option '{key}' must be a string literal.")
    return value


def _derived_from(
    node: ast.ClassDef,
    options: dict[str, str],
    arguments: dict[str, ast.expr],
    is_enum: bool,
) -> DerivedFrom | None:
    filters = {
        key: _name_list_option(arguments[key], key)
        for key in sorted(_NAME_LIST_OPTIONS)
        if key in arguments
    }
    source = options.get("source")
    if source is None:
        if filters:
            raise DirectiveError("Schema options 'pick' and 'omit' require 'source'.")
        return None
    if is_enum:
        raise DirectiveError("Schema option 'source' applies to struct classes only.")
    conflicting = [key for key in ("rename_all", "tag", "content") if key in options]
    if conflicting:
        raise DirectiveError(
            f"Schema option 'source' cannot be combined with {', '.join(conflicting)}."
        )
    if _read_fields(node.body) or _generic_params(node):
        raise DirectiveError("A derived schema cannot declare fields or type parameters.")
    return DerivedFrom(source=source, pick=filters.get("pick", ()), omit=filters.get("omit", ()))


def _name_list_option(node: ast.expr, key: str) -> tuple[str, ...]:
    try:
        value = literal_value(node)
    except ValueError as exc:
        raise DirectiveError(f"Schema option '{key}' must be a list of strings.") from exc
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise DirectiveError(f"Schema option '{key}' must be a list of strings.")
    return tuple(value)


def _tagging(tag: str | None, content: str | None) -> EnumTagging:
    if content is not None and tag is None:
        raise DirectiveError("Schema option 'content' requires 'tag'.")
    if tag is None:
        return EnumTagging()
    if content is None:
        return EnumTagging(mode=TaggingMode.INTERNAL, tag=tag)
    return EnumTagging(mode=TaggingMode.ADJACENT, tag=tag, content=content)


def _generic_params(node: ast.ClassDef) -> tuple[str, ...]:
    params = [param.name for param in getattr(node, "type_params", ()) if hasattr(param, "name")]
    for base in node.bases:
        if isinstance(base, ast.Subscript) and dotted_tail(base.value) == "Generic":
            elements = base.slice.elts if isinstance(base.slice, ast.Tuple) else [base.slice]
            params.extend(dotted_tail(element) or ast.unparse(element) for element in elements)
    return tuple(dict.fromkeys(params))


def _read_fields(body: list[ast.stmt]) -> tuple[RawField, ...]:
    fields = []
    for index, statement in enumerate(body):
        if not isinstance(statement, ast.AnnAssign) or not isinstance(statement.target, ast.Name):
            continue
        name = statement.target.id
        if name.startswith("_") or is_class_var(statement.annotation):
            continue
        fields.append(_read_field(name, statement.annotation, statement.value, _next(body, index)))
    return tuple(fields)


def _read_field(
    name: str,
    annotation: ast.expr,
    default: ast.expr | None,
    following: ast.stmt | None,
) -> RawField:
    type_node, metadata = split_annotated(annotation)
    directives = _directives(metadata)
    if default is not None and Default() not in directives:
        directives = directives + (Default(),)
    return RawField(
        source_name=name,
        type_expr=parse_annotation(type_node),
        directives=directives,
        description=string_statement(following),
    )


def _directives(metadata: tuple[ast.expr, ...]) -> tuple[FieldDirective, ...]:
    directives: list[FieldDirective] = []
    for node in metadata:
        target = node.func if isinstance(node, ast.Call) else node
        marker = _DIRECTIVE_MARKERS.get(dotted_tail(target) or "")
        if marker is None:
            continue
        if marker in (Rename, RenameAll):
            directives.append(marker(_single_string_argument(node, marker.__name__)))
        else:
            directives.append(marker())
    return tuple(directives)


def _single_string_argument(node: ast.expr, marker_name: str) -> str:
    if not isinstance(node, ast.Call) or len(node.args) != 1 or node.keywords:
        raise DirectiveError(f"{marker_name}(...) takes exactly one string argument.")
    return _string_option(node.args[0], marker_name)


def _read_variants(body: list[ast.stmt]) -> tuple[RawVariant, ...]:
    variants = []
    for index, statement in enumerate(body):
        if not isinstance(statement, ast.Assign) or len(statement.targets) != 1:
            continue
        target = statement.targets[0]
        if not isinstance(target, ast.Name) or target.id.startswith("_"):
            continue
        description = string_statement(_next(body, index))
        variants.append(_read_variant(target.id, statement.value, description))
    return tuple(variants)


def _read_variant(name: str, value: ast.expr, description: str | None) -> RawVariant:
    if isinstance(value, ast.Constant) and isinstance(value.value, str):
        return RawVariant(
            source_name=name,
            shape=VariantShape.UNIT,
            directives=(Rename(value.value),),
            description=description,
        )
    if isinstance(value, ast.Tuple):
        return _payload_variant(name, value.elts, None, (), description)
    if isinstance(value, ast.Dict):
        return _payload_variant(name, [], value, (), description)
    if isinstance(value, ast.Call) and dotted_tail(value.func) == VARIANT_MARKER:
        return _explicit_variant(name, value, description)
    return RawVariant(source_name=name, shape=VariantShape.UNIT, description=description)


def _explicit_variant(name: str, call: ast.Call, description: str | None) -> RawVariant:
    options = keyword_arguments(call)
    unknown = sorted(set(options) - {"fields", "rename", "rename_all", "skip"})
    if unknown:
        raise DirectiveError(f"Variant '{name}' has unknown option(s): {', '.join(unknown)}.")
    fields = options.get("fields")
    if fields is not None and not isinstance(fields, ast.Dict):
        raise DirectiveError(f"Variant '{name}' fields must be a dict literal.")
    if fields is not None and call.args:
        raise DirectiveError(f"Variant '{name}' cannot declare both elements and fields.")

    directives: list[FieldDirective] = []
    if "rename" in options:
        directives.append(Rename(_string_option(options["rename"], "rename")))
    if "rename_all" in options:
        directives.append(RenameAll(_string_option(options["rename_all"], "rename_all")))
    if "skip" in options:
        try:
            skip = literal_value(options["skip"])
        except ValueError as exc:
            raise DirectiveError(f"Variant '{name}' skip must be a boolean literal.") from exc
        if skip:
            directives.append(Skip())
    return _payload_variant(name, call.args, fields, tuple(directives), description)


def _payload_variant(
    name: str,
    elements: list[ast.expr],
    fields: ast.Dict | None,
    directives: tuple[FieldDirective, ...],
    description: str | None,
) -> RawVariant:
    if fields is not None:
        raw_fields = []
        for key, annotation in zip(fields.keys, fields.values):
            if not (isinstance(key, ast.Constant) and isinstance(key.value, str)):
                raise DirectiveError(f"Variant '{name}' field names must be string literals.")
            raw_fields.append(_read_field(key.value, annotation, None, None))
        return RawVariant(
            source_name=name,
            shape=VariantShape.STRUCT,
            fields=tuple(raw_fields),
            directives=directives,
            description=description,
        )
    if not elements:
        return RawVariant(
            source_name=name,
            shape=VariantShape.UNIT,
            directives=directives,
            description=description,
        )
    return RawVariant(
        source_name=name,
        shape=VariantShape.TUPLE,
        elements=tuple(parse_annotation(element) for element in elements),
        directives=directives,
        description=description,
    )


def _next(body: list[ast.stmt], index: int) -> ast.stmt | None:
    return body[index + 1] if index + 1 < len(body) else None
