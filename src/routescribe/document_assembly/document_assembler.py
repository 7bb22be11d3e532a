"""Grouping of built operations into an OpenAPI document."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from routescribe.diagnostics.build_errors import NamingCollisionError
from routescribe.operation_building.operation_models import Operation, RoutedOperation
from routescribe.schema_compilation.schema_registry import SchemaRegistry

from .document_models import Info, OpenApiDocument, PathItem, RouteBinding, Server

_LOGGER = logging.getLogger(__name__)

DOCS_PAGE_HANDLER = "docs_page"
SPEC_DOCUMENT_HANDLER = "openapi_document"


class DocumentAssembler:
    """Builds one document from routed operations and the shared schema registry."""

    def __init__(self, info: Info, servers: Sequence[Server] = ()) -> None:
        self._info = info
        self._servers = tuple(servers)

    def assemble(
        self, routed: Sequence[RoutedOperation], registry: SchemaRegistry
    ) -> OpenApiDocument:
        """Group operations by final path and attach every registered schema.

        Raises:
          NamingCollisionError: If two routes claim the same method and path.
        """
        grouped: dict[str, dict[str, Operation]] = defaultdict(dict)
        owners: dict[tuple[str, str], RoutedOperation] = {}
        for item in routed:
            key = (item.path, item.method)
            if key in owners:
                first = owners[key]
                raise NamingCollisionError(
                    f"{item.method.upper()} {item.path} is served by both "
                    f"'{first.function_name}' and '{item.function_name}'.",
                    item.location,
                )
            owners[key] = item
            grouped[item.path][item.method] = item.operation

        paths = tuple((path, PathItem.of(grouped[path])) for path in sorted(grouped))
        tags = sorted({tag for item in routed for tag in item.operation.tags})
        schemas = tuple(registry.sorted_items())
        _LOGGER.info(
            "Assembled document with %d path(s) and %d schema(s)", len(paths), len(schemas)
        )
        return OpenApiDocument(
            info=self._info,
            paths=paths,
            schemas=schemas,
            servers=self._servers,
            tags=tuple(tags),
        )


def route_bindings(
    routed: Sequence[RoutedOperation],
    *,
    docs_path: str | None = None,
    spec_path: str | None = None,
) -> tuple[RouteBinding, ...]:
    """Return handler bindings for every route, sorted by path then method.

    A docs path adds the viewer page binding and the binding of the document
    it loads.
    """
    bindings = [
        RouteBinding(
            method=item.method,
            path=item.path,
            handler=item.function_name,
            module=item.module,
        )
        for item in routed
    ]
    if docs_path:
        bindings.append(RouteBinding(method="get", path=docs_path, handler=DOCS_PAGE_HANDLER))
        if spec_path:
            bindings.append(
                RouteBinding(method="get", path=spec_path, handler=SPEC_DOCUMENT_HANDLER)
            )
    return tuple(sorted(bindings, key=lambda binding: (binding.path, binding.method)))
