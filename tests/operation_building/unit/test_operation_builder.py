"""Operation builder and operation id allocation tests."""

from __future__ import annotations

import pytest
from routescribe.diagnostics import NamingCollisionError, RouteSignatureError
from routescribe.operation_building import (
    OperationBuilder,
    OperationIdPolicy,
    RouteDeclaration,
    allocate_operation_ids,
    derive_route_path,
    path_identifier,
)
from routescribe.parameter_extraction import FunctionParameter, ParameterLocation
from routescribe.schema_compilation import DeclarationCatalog, SchemaCompiler, SchemaRegistry
from routescribe.type_modeling import TypeExpr


def _builder() -> OperationBuilder:
    return OperationBuilder(SchemaCompiler(SchemaRegistry(), DeclarationCatalog()))


def _route(name: str, prefix: str, path: str | None = None, **options) -> RouteDeclaration:
    return RouteDeclaration(
        method=options.pop("method", "get"),
        path=path,
        function_name=name,
        prefix=prefix,
        **options,
    )


def test_derive_route_path_joins_prefix_and_suffix() -> None:
    assert derive_route_path("/users", "/{id}") == "/users/{id}"
    assert derive_route_path("/users", None) == "/users"
    assert derive_route_path("/", None) == "/"
    assert path_identifier("/users/{id}") == "users_id"
    assert path_identifier("/") == "root"


def test_build_combines_declared_metadata_parameters_and_responses() -> None:
    routed = _builder().build(
        _route(
            "get_user",
            "/users",
            "/{id}",
            tags=("users",),
            summary="Fetch one user.",
            parameters=(FunctionParameter("id", TypeExpr("Path", (TypeExpr("int"),))),),
            return_type=TypeExpr("str"),
        )
    )

    assert routed.method == "get"
    assert routed.path == "/users/{id}"
    operation = routed.operation
    assert operation.operation_id == "get_user"
    assert operation.tags == ("users",)
    assert operation.summary == "Fetch one user."
    assert [(p.name, p.location) for p in operation.parameters] == [
        ("id", ParameterLocation.PATH)
    ]
    assert [response.status for response in operation.responses] == ["200"]


def test_explicit_operation_id_is_kept() -> None:
    routed = _builder().build(_route("get_user", "/users", operation_id="fetchUser"))

    assert routed.operation.operation_id == "fetchUser"
    assert routed.explicit_operation_id is True


def test_unknown_method_is_rejected() -> None:
    with pytest.raises(RouteSignatureError, match="unsupported HTTP method 'fetch'"):
        _builder().build(_route("get_user", "/users", method="fetch"))


def test_colliding_operation_ids_are_disambiguated_by_path() -> None:
    builder = _builder()
    routed = [
        builder.build(_route("index", "/users")),
        builder.build(_route("index", "/posts")),
        builder.build(_route("show", "/posts", "/{id}")),
    ]

    allocated = allocate_operation_ids(routed, OperationIdPolicy.DISAMBIGUATE)

    assert [item.operation.operation_id for item in allocated] == [
        "index_users",
        "index_posts",
        "show",
    ]


def test_same_path_collisions_fall_back_to_method_suffix() -> None:
    builder = _builder()
    routed = [
        builder.build(_route("item", "/items")),
        builder.build(_route("item", "/items", method="post")),
    ]

    allocated = allocate_operation_ids(routed)

    assert [item.operation.operation_id for item in allocated] == [
        "item_items_get",
        "item_items_post",
    ]


def test_explicit_ids_are_never_rewritten() -> None:
    builder = _builder()
    routed = [
        builder.build(_route("list_users", "/users", operation_id="list")),
        builder.build(_route("list", "/posts")),
    ]

    allocated = allocate_operation_ids(routed)

    assert [item.operation.operation_id for item in allocated] == ["list", "list_posts"]


def test_error_policy_reports_collisions() -> None:
    builder = _builder()
    routed = [builder.build(_route("index", "/users")), builder.build(_route("index", "/posts"))]

    with pytest.raises(NamingCollisionError, match="'index'"):
        allocate_operation_ids(routed, OperationIdPolicy.ERROR)


def test_two_identical_explicit_ids_cannot_be_disambiguated() -> None:
    builder = _builder()
    routed = [
        builder.build(_route("a", "/users", operation_id="same")),
        builder.build(_route("b", "/posts", operation_id="same")),
    ]

    with pytest.raises(NamingCollisionError, match="'same'"):
        allocate_operation_ids(routed)
