"""Reading of `@route` function declarations from a parsed module."""

from __future__ import annotations

import ast
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from routescribe.diagnostics.build_errors import RouteSignatureError, SourceLocation
from routescribe.operation_building.operation_models import RouteDeclaration
from routescribe.parameter_extraction.parameter_models import FunctionParameter

from .annotation_parser import parse_annotation, split_annotated
from .syntax_helpers import find_decorator, keyword_arguments, literal_value

ROUTE_DECORATOR = "route"
DEFAULT_METHOD = "get"

_ROUTE_OPTIONS = frozenset(
    {"method", "path", "tags", "error_status", "status", "operation_id", "summary"}
)


def read_routes(
    module: ast.Module,
    path: Path,
    *,
    prefix: str = "/",
    module_name: str = "",
) -> tuple[RouteDeclaration, ...]:
    """Return every top-level function decorated with `@route`, in source order.

    Raises:
      RouteSignatureError: If decorator arguments are not literals of the
        expected type.
    """
    routes = []
    for node in module.body:
        if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        decorator = find_decorator(node.decorator_list, ROUTE_DECORATOR)
        if decorator is None:
            continue
        location = SourceLocation(path, node.lineno)
        try:
            routes.append(_read_route(node, decorator, prefix, module_name, location))
        except RouteSignatureError as exc:
            exc.at(location)
            raise
    return tuple(routes)


def _read_route(
    node: ast.FunctionDef | ast.AsyncFunctionDef,
    decorator: ast.expr,
    prefix: str,
    module_name: str,
    location: SourceLocation,
) -> RouteDeclaration:
    options = {key: _literal(value, key) for key, value in keyword_arguments(decorator).items()}
    unknown = sorted(set(options) - _ROUTE_OPTIONS)
    if unknown:
        raise RouteSignatureError(f"Unknown route option(s): {', '.join(unknown)}.")
    positional = decorator.args if isinstance(decorator, ast.Call) else []
    if len(positional) > 1:
        raise RouteSignatureError("route() takes at most one positional argument (the method).")
    if positional:
        if "method" in options:
            raise RouteSignatureError("The route method is given twice.")
        options["method"] = _literal(positional[0], "method")

    docstring_summary, description = _split_docstring(ast.get_docstring(node))
    return RouteDeclaration(
        method=_typed(options, "method", str, DEFAULT_METHOD).lower(),
        path=_typed(options, "path", str, None),
        function_name=node.name,
        prefix=prefix,
        module=module_name,
        tags=tuple(_typed_items(options, "tags", str)),
        summary=_typed(options, "summary", str, None) or docstring_summary,
        description=description,
        operation_id=_typed(options, "operation_id", str, None),
        parameters=_parameters(node.args),
        return_type=None if node.returns is None else parse_annotation(node.returns),
        status=_typed(options, "status", int, None),
        error_status=tuple(_typed_items(options, "error_status", int)),
        location=location,
    )


def _parameters(arguments: ast.arguments) -> tuple[FunctionParameter, ...]:
    declared = [*arguments.posonlyargs, *arguments.args, *arguments.kwonlyargs]
    parameters = []
    for argument in declared:
        type_expr = None
        if argument.annotation is not None:
            type_node, _ = split_annotated(argument.annotation)
            type_expr = parse_annotation(type_node)
        parameters.append(FunctionParameter(name=argument.arg, type_expr=type_expr))
    return tuple(parameters)


def _split_docstring(docstring: str | None) -> tuple[str | None, str | None]:
    """Return the first paragraph as summary and the rest as description."""
    if not docstring:
        return None, None
    paragraphs = docstring.strip().split("\n\n", 1)
    summary = " ".join(paragraphs[0].split())
    description = paragraphs[1].strip() if len(paragraphs) > 1 else None
    return summary or None, description or None


def _literal(node: ast.expr, key: str) -> Any:
    try:
        return literal_value(node)
    except ValueError as exc:
        raise RouteSignatureError(f"Route option '{key}' must be a literal value.") from exc


def _typed(options: dict[str, Any], key: str, expected: type, default: Any) -> Any:
    value = options.get(key)
    if value is None:
        return default
    if not isinstance(value, expected) or isinstance(value, bool):
        raise RouteSignatureError(
            f"Route option '{key}' must be of type {expected.__name__}, got {value!r}."
        )
    return value


def _typed_items(options: dict[str, Any], key: str, expected: type) -> Sequence[Any]:
    values = options.get(key, ())
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
        raise RouteSignatureError(f"Route option '{key}' must be a list.")
    for value in values:
        if not isinstance(value, expected) or isinstance(value, bool):
            raise RouteSignatureError(
                f"Route option '{key}' entries must be of type {expected.__name__}."
            )
    return values
