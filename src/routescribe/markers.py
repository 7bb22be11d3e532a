"""Runtime markers for annotated application code.

The build never imports application modules; these markers only keep such
modules importable and type-checkable. Every marker is a no-op at runtime.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from routescribe.type_modeling.type_models import Default, Flatten, Rename, Skip

T = TypeVar("T")
E = TypeVar("E")
_Target = TypeVar("_Target")


def schema(
    target: _Target | None = None,
    *,
    name: str | None = None,
    rename_all: str | None = None,
    tag: str | None = None,
    content: str | None = None,
    source: str | None = None,
    pick: Sequence[str] = (),
    omit: Sequence[str] = (),
) -> Any:
    """Mark a class as a documented type; usable bare or with options.

    `source` derives the class's fields from another struct, filtered by
    `pick` or `omit`.
    """
    del name, rename_all, tag, content, source, pick, omit
    if target is not None:
        return target
    return lambda cls: cls


def route(
    method: str = "get",
    *,
    path: str | None = None,
    tags: Sequence[str] = (),
    error_status: Sequence[int] = (),
    status: int | None = None,
    operation_id: str | None = None,
    summary: str | None = None,
) -> Any:
    """Mark a function as a documented route; usable bare or with options."""
    del path, tags, error_status, status, operation_id, summary
    if callable(method):
        return method

    def decorate(function: Callable[..., Any]) -> Callable[..., Any]:
        return function

    return decorate


class Variant:
    """Explicit enum variant with a payload or options."""

    def __init__(
        self,
        *elements: Any,
        fields: dict[str, Any] | None = None,
        rename: str | None = None,
        rename_all: str | None = None,
        skip: bool = False,
    ) -> None:
        self.elements = elements
        self.fields = fields
        self.rename = rename
        self.rename_all = rename_all
        self.skip = skip


class Path(Generic[T]):
    """Values bound from path placeholders."""


class Query(Generic[T]):
    """Values bound from the query string."""


class Json(Generic[T]):
    """JSON request or response body."""


class Form(Generic[T]):
    """Form-encoded request body."""


class Header(Generic[T]):
    """One request header named after the parameter."""


class TypedHeader(Generic[T]):
    """One typed request header."""


class State(Generic[T]):
    """Application state; not documented."""


class Extension(Generic[T]):
    """Request extension; not documented."""


class HeaderMap:
    """All request headers; not documented."""


class Result(Generic[T, E]):
    """Success or error return value."""


__all__ = [
    "Default",
    "Extension",
    "Flatten",
    "Form",
    "Header",
    "HeaderMap",
    "Json",
    "Path",
    "Query",
    "Rename",
    "Result",
    "Skip",
    "State",
    "TypedHeader",
    "Variant",
    "route",
    "schema",
]
