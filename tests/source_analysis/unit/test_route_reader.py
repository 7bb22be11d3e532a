"""Route reader tests."""

from __future__ import annotations

import ast
from pathlib import Path
from textwrap import dedent

import pytest
from routescribe.diagnostics import RouteSignatureError
from routescribe.parameter_extraction import FunctionParameter
from routescribe.source_analysis import read_routes
from routescribe.type_modeling import TypeExpr

SOURCE = dedent(
    '''
    from routescribe.markers import Json, Path, Query, Result, route


    @route
    def list_users(page: Query[int], request) -> Json[list[User]]:
        """List users.

        Returns every user, page by page.
        """


    @route("POST", path="/{id}", tags=["users"], status=201, error_status=[404, 409])
    async def update_user(id: Path[int], body: Json[User]) -> Result[Json[User], Json[ApiError]]:
        ...


    @route(method="delete", path="/{id}", operation_id="removeUser", summary="Remove a user.")
    def delete_user(id: Path[int]) -> None:
        """Ignored summary."""


    def helper():
        return None
    '''
)


def _read(source: str):
    return read_routes(
        ast.parse(source), Path("routes/users.py"), prefix="/users", module_name="users"
    )


def test_decorated_functions_are_read_in_source_order() -> None:
    routes = _read(SOURCE)

    assert [route.function_name for route in routes] == [
        "list_users",
        "update_user",
        "delete_user",
    ]
    assert all(route.prefix == "/users" and route.module == "users" for route in routes)


def test_bare_decorator_defaults_to_get_index_route() -> None:
    route = _read(SOURCE)[0]

    assert route.method == "get"
    assert route.path is None
    assert route.summary == "List users."
    assert route.description == "Returns every user, page by page."
    assert route.parameters == (
        FunctionParameter("page", TypeExpr("Query", (TypeExpr("int"),))),
        FunctionParameter("request", None),
    )
    assert route.return_type == TypeExpr(
        "Json", (TypeExpr("list", (TypeExpr("User"),)),)
    )


def test_decorator_options_are_read() -> None:
    route = _read(SOURCE)[1]

    assert route.method == "post"
    assert route.path == "/{id}"
    assert route.tags == ("users",)
    assert route.status == 201
    assert route.error_status == (404, 409)
    assert route.location.line == 14


def test_explicit_summary_wins_and_none_return_is_kept() -> None:
    route = _read(SOURCE)[2]

    assert route.method == "delete"
    assert route.operation_id == "removeUser"
    assert route.summary == "Remove a user."
    assert route.return_type == TypeExpr("None")


@pytest.mark.parametrize(
    "decorator",
    [
        '@route(tags="users")',
        "@route(path=PATH)",
        "@route(status=True)",
        "@route(error_status=[404, '409'])",
        '@route("get", method="post")',
        "@route(verb='get')",
    ],
)
def test_malformed_decorator_arguments_are_rejected(decorator: str) -> None:
    source = f"{decorator}\ndef handler() -> None:\n    ...\n"

    with pytest.raises(RouteSignatureError) as excinfo:
        _read(source)
    assert excinfo.value.location.line == 2
