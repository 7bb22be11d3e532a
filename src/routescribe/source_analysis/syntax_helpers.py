"""Small helpers over `ast` nodes shared by the source readers."""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import Any


def dotted_tail(node: ast.expr) -> str | None:
    """Return the last segment of a `Name` or dotted `Attribute` node."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def find_decorator(decorators: Sequence[ast.expr], name: str) -> ast.expr | None:
    """Return the decorator spelled `name`, `module.name` or `name(...)`, if any."""
    for decorator in decorators:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        if dotted_tail(target) == name:
            return decorator
    return None


def keyword_arguments(node: ast.expr) -> dict[str, ast.expr]:
    if not isinstance(node, ast.Call):
        return {}
    return {keyword.arg: keyword.value for keyword in node.keywords if keyword.arg is not None}


def literal_value(node: ast.expr) -> Any:
    """Evaluate a literal node.

    Raises:
      ValueError: If the node is not a literal.
    """
    return ast.literal_eval(node)


def string_statement(statement: ast.stmt | None) -> str | None:
    """Return the text of a bare string statement (a docstring-like literal)."""
    if (
        isinstance(statement, ast.Expr)
        and isinstance(statement.value, ast.Constant)
        and isinstance(statement.value.value, str)
    ):
        return " ".join(statement.value.value.split()) or None
    return None
