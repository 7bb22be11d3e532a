"""Operation building entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from routescribe.diagnostics.build_errors import SourceLocation
from routescribe.parameter_extraction.parameter_models import (
    FunctionParameter,
    Parameter,
    RequestBody,
)
from routescribe.schema_compilation.schema_models import SchemaRef
from routescribe.type_modeling.type_models import TypeExpr

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


class OperationIdPolicy(str, Enum):
    """How colliding operation ids are handled."""

    DISAMBIGUATE = "disambiguate"
    ERROR = "error"


@dataclass(frozen=True)
class RouteDeclaration:  # pylint: disable=too-many-instance-attributes
    """One discovered route function.

    `path` is the declared suffix; None marks the group's index route.
    `return_type` is None when the function has no return annotation.
    """

    method: str
    path: str | None
    function_name: str
    prefix: str = "/"
    module: str = ""
    tags: tuple[str, ...] = ()
    summary: str | None = None
    description: str | None = None
    operation_id: str | None = None
    parameters: tuple[FunctionParameter, ...] = ()
    return_type: TypeExpr | None = None
    status: int | None = None
    error_status: tuple[int, ...] = ()
    location: SourceLocation | None = None


@dataclass(frozen=True)
class Response:
    """One documented status code."""

    status: str
    description: str
    media_type: str | None = None
    schema: SchemaRef | None = None


@dataclass(frozen=True)
class Operation:  # pylint: disable=too-many-instance-attributes
    """Documented description of one method and path."""

    operation_id: str
    responses: tuple[Response, ...]
    tags: tuple[str, ...] = ()
    summary: str | None = None
    description: str | None = None
    parameters: tuple[Parameter, ...] = ()
    request_body: RequestBody | None = None


@dataclass(frozen=True)
class RoutedOperation:
    """Operation together with where it is mounted and which function serves it."""

    method: str
    path: str
    operation: Operation
    function_name: str
    module: str = ""
    explicit_operation_id: bool = False
    location: SourceLocation | None = None
