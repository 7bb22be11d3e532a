"""Document assembler tests."""

from __future__ import annotations

import pytest
from routescribe.diagnostics import NamingCollisionError
from routescribe.document_assembly import DocumentAssembler, Info, RouteBinding, route_bindings
from routescribe.operation_building import Operation, Response, RoutedOperation
from routescribe.schema_compilation import Schema, SchemaKind, SchemaRegistry


def _routed(method: str, path: str, name: str, tags: tuple[str, ...] = ()) -> RoutedOperation:
    return RoutedOperation(
        method=method,
        path=path,
        operation=Operation(
            operation_id=name,
            responses=(Response(status="200", description="OK"),),
            tags=tags,
        ),
        function_name=name,
        module="users",
    )


def _assembler() -> DocumentAssembler:
    return DocumentAssembler(Info(title="Users", version="1.0.0"))


def test_path_keys_are_sorted_lexicographically() -> None:
    document = _assembler().assemble(
        [_routed("get", "/users/{id}", "get_user"), _routed("get", "/users", "list_users")],
        SchemaRegistry(),
    )

    assert document.path_keys == ("/users", "/users/{id}")
    assert document.openapi == "3.1.0"


def test_methods_on_one_path_share_a_path_item_in_canonical_order() -> None:
    document = _assembler().assemble(
        [
            _routed("delete", "/users/{id}", "delete_user"),
            _routed("post", "/users/{id}", "replace_user"),
            _routed("get", "/users/{id}", "get_user"),
        ],
        SchemaRegistry(),
    )

    assert document.path_item("/users/{id}").methods == ("get", "post", "delete")


def test_schemas_come_from_the_registry_sorted_by_name() -> None:
    registry = SchemaRegistry()
    registry.insert("User", Schema(kind=SchemaKind.OBJECT))
    registry.insert("ApiError", Schema(kind=SchemaKind.OBJECT))

    document = _assembler().assemble([], registry)

    assert document.schema_names == ("ApiError", "User")


def test_tags_are_collected_and_sorted() -> None:
    document = _assembler().assemble(
        [
            _routed("get", "/users", "list_users", ("users",)),
            _routed("get", "/admin", "admin", ("admin", "users")),
        ],
        SchemaRegistry(),
    )

    assert document.tags == ("admin", "users")


def test_two_routes_on_one_method_and_path_collide() -> None:
    with pytest.raises(NamingCollisionError, match="GET /users is served by both"):
        _assembler().assemble(
            [_routed("get", "/users", "list_users"), _routed("get", "/users", "all_users")],
            SchemaRegistry(),
        )


def test_route_bindings_include_viewer_routes_when_docs_are_enabled() -> None:
    bindings = route_bindings(
        [_routed("get", "/users", "list_users")], docs_path="/docs", spec_path="/openapi.json"
    )

    assert bindings == (
        RouteBinding(method="get", path="/docs", handler="docs_page"),
        RouteBinding(method="get", path="/openapi.json", handler="openapi_document"),
        RouteBinding(method="get", path="/users", handler="list_users", module="users"),
    )
