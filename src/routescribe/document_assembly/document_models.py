"""OpenAPI document entities."""

from __future__ import annotations

from dataclasses import dataclass

from routescribe.operation_building.operation_models import HTTP_METHODS, Operation
from routescribe.schema_compilation.schema_models import Schema

OPENAPI_VERSION = "3.1.0"

_METHOD_ORDER = {method: index for index, method in enumerate(HTTP_METHODS)}


@dataclass(frozen=True)
class Info:
    """Document title and version."""

    title: str
    version: str
    description: str | None = None


@dataclass(frozen=True)
class Server:
    """One server entry."""

    url: str
    description: str | None = None


@dataclass(frozen=True)
class PathItem:
    """Operations mounted on one path, in canonical method order."""

    operations: tuple[tuple[str, Operation], ...] = ()

    @classmethod
    def of(cls, operations: dict[str, Operation]) -> PathItem:
        return cls(
            operations=tuple(
                sorted(operations.items(), key=lambda item: _METHOD_ORDER[item[0]])
            )
        )

    @property
    def methods(self) -> tuple[str, ...]:
        return tuple(method for method, _ in self.operations)

    def operation(self, method: str) -> Operation | None:
        for candidate, operation in self.operations:
            if candidate == method:
                return operation
        return None


@dataclass(frozen=True)
class OpenApiDocument:
    """Assembled document.

    `paths` and `schemas` are kept sorted by key so two documents built from
    the same sources compare and serialize identically.
    """

    info: Info
    paths: tuple[tuple[str, PathItem], ...] = ()
    schemas: tuple[tuple[str, Schema], ...] = ()
    servers: tuple[Server, ...] = ()
    tags: tuple[str, ...] = ()
    openapi: str = OPENAPI_VERSION

    @property
    def path_keys(self) -> tuple[str, ...]:
        return tuple(path for path, _ in self.paths)

    @property
    def schema_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.schemas)

    def path_item(self, path: str) -> PathItem | None:
        return dict(self.paths).get(path)

    def schema(self, name: str) -> Schema | None:
        return dict(self.schemas).get(name)


@dataclass(frozen=True)
class RouteBinding:
    """Which handler serves a documented method and path."""

    method: str
    path: str
    handler: str
    module: str = ""
