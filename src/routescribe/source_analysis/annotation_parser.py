"""Translation of annotation syntax into type descriptors."""

from __future__ import annotations

import ast

from routescribe.diagnostics.build_errors import DiscoveryError
from routescribe.type_modeling.type_models import (
    ELLIPSIS,
    LITERAL,
    NONE,
    OPTIONAL,
    TUPLE,
    UNION,
    TypeExpr,
    optional_of,
)

from .syntax_helpers import dotted_tail

ANNOTATED = "Annotated"
CLASS_VAR = "ClassVar"

_ALIASES = {"Tuple": TUPLE, "NoneType": NONE}


def split_annotated(node: ast.expr) -> tuple[ast.expr, tuple[ast.expr, ...]]:
    """Split `Annotated[T, m1, m2]` into `T` and its metadata nodes."""
    node = _unquote(node)
    if isinstance(node, ast.Subscript) and dotted_tail(node.value) == ANNOTATED:
        elements = _slice_elements(node.slice)
        if elements:
            return elements[0], tuple(elements[1:])
    return node, ()


def is_class_var(node: ast.expr) -> bool:
    node = _unquote(node)
    target = node.value if isinstance(node, ast.Subscript) else node
    return dotted_tail(target) == CLASS_VAR


def parse_annotation(node: ast.expr) -> TypeExpr:
    """Return the canonical descriptor of an annotation expression.

    Optionals normalize to `Optional[X]`, `X | Y` to `Union[X, Y]`, and
    `Annotated` metadata is dropped.

    Raises:
      DiscoveryError: If a string annotation is not a valid expression.
    """
    node = _unquote(node)
    if isinstance(node, ast.Constant):
        if node.value is None:
            return TypeExpr(NONE)
        if node.value is Ellipsis:
            return TypeExpr(ELLIPSIS)
        return TypeExpr(ast.unparse(node))
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _union(_union_members(node))
    if isinstance(node, ast.Tuple):
        return TypeExpr(TUPLE, tuple(parse_annotation(element) for element in node.elts))
    if isinstance(node, ast.Subscript):
        return _subscript(node)
    name = dotted_tail(node)
    if name is None:
        return TypeExpr(ast.unparse(node))
    return TypeExpr(_ALIASES.get(name, name))


def _subscript(node: ast.Subscript) -> TypeExpr:
    name = dotted_tail(node.value) or ast.unparse(node.value)
    name = _ALIASES.get(name, name)
    elements = _slice_elements(node.slice)
    if name == ANNOTATED:
        return parse_annotation(elements[0]) if elements else TypeExpr("Any")
    if name == LITERAL:
        return TypeExpr(LITERAL, literals=tuple(_literal_values(elements)))
    if name == OPTIONAL:
        return _union([parse_annotation(element) for element in elements] + [TypeExpr(NONE)])
    if name == UNION:
        return _union([parse_annotation(element) for element in elements])
    if name == TUPLE and len(elements) == 1 and _is_empty_tuple(elements[0]):
        return TypeExpr(TUPLE)
    return TypeExpr(name, tuple(parse_annotation(element) for element in elements))


def _union(members: list[TypeExpr]) -> TypeExpr:
    flattened: list[TypeExpr] = []
    has_none = False
    for member in members:
        if member.is_none:
            has_none = True
            continue
        if member.is_optional:
            has_none = True
            member = member.unwrap_optional()
        candidates = member.args if member.name == UNION else (member,)
        for candidate in candidates:
            if candidate not in flattened:
                flattened.append(candidate)
    if not flattened:
        return TypeExpr(NONE)
    inner = flattened[0] if len(flattened) == 1 else TypeExpr(UNION, tuple(flattened))
    return optional_of(inner) if has_none else inner


def _union_members(node: ast.expr) -> list[TypeExpr]:
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _union_members(node.left) + _union_members(node.right)
    return [parse_annotation(node)]


def _literal_values(elements: list[ast.expr]) -> list[str | int | float | bool]:
    values: list[str | int | float | bool] = []
    for element in elements:
        element = _unquote(element, literal=True)
        if isinstance(element, ast.Subscript) and dotted_tail(element.value) == LITERAL:
            values.extend(_literal_values(_slice_elements(element.slice)))
            continue
        try:
            value = ast.literal_eval(element)
        except ValueError:
            continue
        if isinstance(value, (str, int, float, bool)) and value not in values:
            values.append(value)
    return values


def _slice_elements(node: ast.expr) -> list[ast.expr]:
    if isinstance(node, ast.Tuple):
        return list(node.elts)
    return [node]


def _is_empty_tuple(node: ast.expr) -> bool:
    return isinstance(node, ast.Tuple) and not node.elts


def _unquote(node: ast.expr, *, literal: bool = False) -> ast.expr:
    """Parse string forward references into expression nodes."""
    if literal or not (isinstance(node, ast.Constant) and isinstance(node.value, str)):
        return node
    try:
        return ast.parse(node.value.strip(), mode="eval").body
    except SyntaxError as exc:
        raise DiscoveryError(f"Invalid forward reference {node.value!r}: {exc.msg}") from exc
