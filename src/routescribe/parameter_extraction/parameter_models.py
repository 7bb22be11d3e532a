"""Parameter extraction entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from routescribe.schema_compilation.schema_models import SchemaRef
from routescribe.type_modeling.type_models import TypeExpr

JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
TEXT_MEDIA_TYPE = "text/plain"


class ExtractorKind(str, Enum):
    """Wrapper classification governing where a parameter is documented."""

    PATH_PARAM = "path"
    QUERY_PARAM = "query"
    JSON_BODY = "json"
    FORM_BODY = "form"
    HEADER_PARAM = "header"
    IGNORED = "ignored"
    UNKNOWN = "unknown"


class ParameterLocation(str, Enum):
    """OpenAPI `in` value of a parameter."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"


LOCATION_ORDER = {
    ParameterLocation.PATH: 0,
    ParameterLocation.QUERY: 1,
    ParameterLocation.HEADER: 2,
}


@dataclass(frozen=True)
class FunctionParameter:
    """One parameter of a route function signature."""

    name: str
    type_expr: TypeExpr | None


@dataclass(frozen=True)
class Parameter:
    """Documented path, query or header parameter."""

    name: str
    location: ParameterLocation
    required: bool
    schema: SchemaRef
    description: str | None = None


@dataclass(frozen=True)
class RequestBody:
    """Documented request body."""

    media_type: str
    schema: SchemaRef
    required: bool = True
    description: str | None = None


@dataclass(frozen=True)
class ExtractedParameters:
    """Everything a route signature contributes to an operation."""

    parameters: tuple[Parameter, ...] = ()
    request_body: RequestBody | None = None
