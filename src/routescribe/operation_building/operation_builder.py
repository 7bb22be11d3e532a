"""Assembly of operations from route declarations."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import replace

from routescribe.diagnostics.build_errors import NamingCollisionError, RouteSignatureError
from routescribe.parameter_extraction.parameter_extractor import ParameterExtractor
from routescribe.schema_compilation.schema_compiler import SchemaCompiler

from .operation_models import (
    HTTP_METHODS,
    Operation,
    OperationIdPolicy,
    RouteDeclaration,
    RoutedOperation,
)
from .response_extractor import ResponseExtractor
from .route_paths import derive_route_path, path_identifier

_LOGGER = logging.getLogger(__name__)


class OperationBuilder:
    """Combines a route's declared metadata with its parameters and responses."""

    def __init__(self, compiler: SchemaCompiler) -> None:
        self._parameters = ParameterExtractor(compiler)
        self._responses = ResponseExtractor(compiler)

    def build(self, route: RouteDeclaration) -> RoutedOperation:
        """Build the documented operation of one route.

        Raises:
          RouteSignatureError: If the method is not an HTTP method or the
            signature cannot be documented.
        """
        method = route.method.lower()
        if method not in HTTP_METHODS:
            raise RouteSignatureError(
                f"Route '{route.function_name}' uses unsupported HTTP method '{route.method}'.",
                route.location,
            )
        path = derive_route_path(route.prefix, route.path)
        extracted = self._parameters.extract(route.parameters, path, location=route.location)
        responses = self._responses.extract(
            route.return_type,
            status=route.status,
            error_status=route.error_status,
            location=route.location,
        )
        operation = Operation(
            operation_id=route.operation_id or route.function_name,
            responses=responses,
            tags=route.tags,
            summary=route.summary,
            description=route.description,
            parameters=extracted.parameters,
            request_body=extracted.request_body,
        )
        _LOGGER.debug("Built operation %s %s (%s)", method.upper(), path, operation.operation_id)
        return RoutedOperation(
            method=method,
            path=path,
            operation=operation,
            function_name=route.function_name,
            module=route.module,
            explicit_operation_id=route.operation_id is not None,
            location=route.location,
        )


def allocate_operation_ids(
    routed: Sequence[RoutedOperation],
    policy: OperationIdPolicy = OperationIdPolicy.DISAMBIGUATE,
) -> tuple[RoutedOperation, ...]:
    """Make operation ids unique within one document.

    Under `DISAMBIGUATE`, every derived id of a colliding group gets the path
    identifier appended, then the method if still ambiguous. Explicit ids are
    kept as written. Under `ERROR`, any collision is reported.

    Raises:
      NamingCollisionError: If ids collide under `ERROR`, or an explicit id
        cannot be kept unique.
    """
    groups: dict[str, list[int]] = defaultdict(list)
    for index, item in enumerate(routed):
        groups[item.operation.operation_id].append(index)

    assigned = [item.operation.operation_id for item in routed]
    for operation_id, members in sorted(groups.items()):
        if len(members) < 2:
            continue
        if policy is OperationIdPolicy.ERROR:
            raise NamingCollisionError(
                f"Operation id '{operation_id}' is used by {_describe(routed, members)}.",
                routed[members[1]].location,
            )
        for index in members:
            item = routed[index]
            if not item.explicit_operation_id:
                assigned[index] = f"{operation_id}_{path_identifier(item.path)}"

    assigned = _append_method_to_duplicates(routed, assigned)
    _reject_duplicates(routed, assigned)
    return tuple(
        item
        if assigned[index] == item.operation.operation_id
        else replace(item, operation=replace(item.operation, operation_id=assigned[index]))
        for index, item in enumerate(routed)
    )


def _append_method_to_duplicates(
    routed: Sequence[RoutedOperation], assigned: Sequence[str]
) -> list[str]:
    counts: dict[str, int] = defaultdict(int)
    for operation_id in assigned:
        counts[operation_id] += 1
    return [
        f"{operation_id}_{item.method}"
        if counts[operation_id] > 1 and not item.explicit_operation_id
        else operation_id
        for item, operation_id in zip(routed, assigned)
    ]


def _reject_duplicates(routed: Sequence[RoutedOperation], assigned: Sequence[str]) -> None:
    groups: dict[str, list[int]] = defaultdict(list)
    for index, operation_id in enumerate(assigned):
        groups[operation_id].append(index)
    for operation_id, members in sorted(groups.items()):
        if len(members) > 1:
            raise NamingCollisionError(
                f"Operation id '{operation_id}' is used by {_describe(routed, members)}.",
                routed[members[1]].location,
            )


def _describe(routed: Sequence[RoutedOperation], members: Sequence[int]) -> str:
    return ", ".join(
        f"{routed[index].method.upper()} {routed[index].path}" for index in members
    )
