"""Classification of route function parameters by extractor kind."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from routescribe.diagnostics.build_errors import (
    ArityError,
    RouteSignatureError,
    SourceLocation,
)
from routescribe.schema_compilation.schema_compiler import MAPPING_TYPES, SchemaCompiler
from routescribe.schema_compilation.schema_models import SchemaKind, inline
from routescribe.type_modeling.type_models import TUPLE, DeclarationKind, TypeExpr

from .parameter_models import (
    FORM_MEDIA_TYPE,
    JSON_MEDIA_TYPE,
    LOCATION_ORDER,
    ExtractedParameters,
    ExtractorKind,
    FunctionParameter,
    Parameter,
    ParameterLocation,
    RequestBody,
)

_LOGGER = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}/]+)\}")

EXTRACTOR_NAMES: dict[str, ExtractorKind] = {
    "Path": ExtractorKind.PATH_PARAM,
    "Query": ExtractorKind.QUERY_PARAM,
    "Json": ExtractorKind.JSON_BODY,
    "Form": ExtractorKind.FORM_BODY,
    "Header": ExtractorKind.HEADER_PARAM,
    "TypedHeader": ExtractorKind.HEADER_PARAM,
    "State": ExtractorKind.IGNORED,
    "Extension": ExtractorKind.IGNORED,
    "Extensions": ExtractorKind.IGNORED,
    "HeaderMap": ExtractorKind.IGNORED,
    "Request": ExtractorKind.IGNORED,
}

_BODY_MEDIA_TYPES = {
    ExtractorKind.JSON_BODY: JSON_MEDIA_TYPE,
    ExtractorKind.FORM_BODY: FORM_MEDIA_TYPE,
}


def path_placeholders(path: str) -> tuple[str, ...]:
    """Return `{placeholder}` names of a path template, left to right."""
    return tuple(match.lstrip("*") for match in _PLACEHOLDER.findall(path))


def classify_parameter(type_expr: TypeExpr | None) -> ExtractorKind:
    """Return the extractor kind of a parameter annotation."""
    if type_expr is None:
        return ExtractorKind.UNKNOWN
    return EXTRACTOR_NAMES.get(type_expr.unwrap_optional().name, ExtractorKind.UNKNOWN)


@dataclass(frozen=True)
class _Contribution:
    parameters: tuple[Parameter, ...] = ()
    request_body: RequestBody | None = None


class ParameterExtractor:
    """Turns a route signature into documented parameters and a request body."""

    def __init__(self, compiler: SchemaCompiler) -> None:
        self._compiler = compiler

    def extract(
        self,
        parameters: Sequence[FunctionParameter],
        path_template: str,
        *,
        location: SourceLocation | None = None,
    ) -> ExtractedParameters:
        """Extract every parameter of one route function.

        Path parameters come before query and header parameters; within one
        location, signature order is kept.

        Raises:
          ArityError: If path parameters do not match the path placeholders.
          RouteSignatureError: If more than one body parameter is declared or a
            parameter is documented twice.
        """
        placeholders = path_placeholders(path_template)
        collected: list[Parameter] = []
        request_body: RequestBody | None = None
        for parameter in parameters:
            contribution = self._extract_one(parameter, placeholders, location=location)
            if contribution.request_body is not None:
                if request_body is not None:
                    raise RouteSignatureError(
                        f"Parameter '{parameter.name}' declares a second request body; "
                        "a route accepts at most one body parameter.",
                        location,
                    )
                request_body = contribution.request_body
            collected.extend(contribution.parameters)

        seen: set[tuple[str, ParameterLocation]] = set()
        for documented in collected:
            identity = (documented.name, documented.location)
            if identity in seen:
                raise RouteSignatureError(
                    f"{documented.location.value} parameter '{documented.name}' "
                    "is documented twice.",
                    location,
                )
            seen.add(identity)

        ordered = sorted(collected, key=lambda item: LOCATION_ORDER[item.location])
        return ExtractedParameters(parameters=tuple(ordered), request_body=request_body)

    def _extract_one(
        self,
        parameter: FunctionParameter,
        placeholders: Sequence[str],
        *,
        location: SourceLocation | None = None,
    ) -> _Contribution:
        """Extract the contribution of a single function parameter."""
        kind = classify_parameter(parameter.type_expr)
        if parameter.type_expr is None or kind in (ExtractorKind.IGNORED, ExtractorKind.UNKNOWN):
            return self._bare_parameter(parameter, placeholders, kind, location)

        outer_optional = parameter.type_expr.is_optional
        wrapper = parameter.type_expr.unwrap_optional()
        inner = wrapper.args[0] if wrapper.args else TypeExpr("Any")

        if kind is ExtractorKind.PATH_PARAM:
            return _Contribution(self._path_parameters(parameter, inner, placeholders, location))
        if kind is ExtractorKind.QUERY_PARAM:
            return _Contribution(
                self._query_parameters(parameter, inner, outer_optional, location)
            )
        if kind is ExtractorKind.HEADER_PARAM:
            header = self._header_parameter(parameter, wrapper, outer_optional, location)
            return _Contribution((header,))
        return _Contribution(
            request_body=RequestBody(
                media_type=_BODY_MEDIA_TYPES[kind],
                schema=self._compiler.compile(inner, location=location),
                required=not (outer_optional or inner.is_optional),
            )
        )

    def _bare_parameter(
        self,
        parameter: FunctionParameter,
        placeholders: Sequence[str],
        kind: ExtractorKind,
        location: SourceLocation | None,
    ) -> _Contribution:
        if kind is ExtractorKind.UNKNOWN and parameter.name in placeholders:
            type_expr = parameter.type_expr or TypeExpr("str")
            return _Contribution(
                (
                    Parameter(
                        name=parameter.name,
                        location=ParameterLocation.PATH,
                        required=True,
                        schema=self._compiler.compile(type_expr, location=location),
                    ),
                )
            )
        if kind is ExtractorKind.UNKNOWN:
            _LOGGER.debug(
                "Parameter '%s' has no recognized extractor; it is not documented.",
                parameter.name,
            )
        return _Contribution()

    def _path_parameters(
        self,
        parameter: FunctionParameter,
        inner: TypeExpr,
        placeholders: Sequence[str],
        location: SourceLocation | None,
    ) -> tuple[Parameter, ...]:
        target = inner.unwrap_optional()
        if target.name == TUPLE:
            if len(target.args) != len(placeholders):
                raise ArityError(
                    f"Path parameter '{parameter.name}' has {len(target.args)} element(s) "
                    f"but the route path has {len(placeholders)} placeholder(s).",
                    location,
                )
            return tuple(
                Parameter(
                    name=placeholder,
                    location=ParameterLocation.PATH,
                    required=True,
                    schema=self._compiler.compile(element, location=location),
                )
                for placeholder, element in zip(placeholders, target.args)
            )

        struct_parameters = self._struct_parameters(target, ParameterLocation.PATH, location)
        if struct_parameters is not None:
            return struct_parameters

        if len(placeholders) == 1:
            name = placeholders[0]
        elif parameter.name in placeholders:
            name = parameter.name
        else:
            raise ArityError(
                f"Path parameter '{parameter.name}' binds one value but the route path has "
                f"{len(placeholders)} placeholder(s) and none is named '{parameter.name}'.",
                location,
            )
        return (
            Parameter(
                name=name,
                location=ParameterLocation.PATH,
                required=True,
                schema=self._compiler.compile(target, location=location),
            ),
        )

    def _query_parameters(
        self,
        parameter: FunctionParameter,
        inner: TypeExpr,
        outer_optional: bool,
        location: SourceLocation | None,
    ) -> tuple[Parameter, ...]:
        target = inner.unwrap_optional()
        if target.name in MAPPING_TYPES:
            return ()
        struct_parameters = self._struct_parameters(target, ParameterLocation.QUERY, location)
        if struct_parameters is not None:
            return struct_parameters
        if not self._compiler.can_resolve(target):
            _LOGGER.debug(
                "Query parameter '%s' has unresolvable type %s; it is not documented.",
                parameter.name,
                target.display(),
            )
            return ()
        return (
            Parameter(
                name=parameter.name,
                location=ParameterLocation.QUERY,
                required=not (outer_optional or inner.is_optional),
                schema=self._compiler.compile(target, location=location),
            ),
        )

    def _header_parameter(
        self,
        parameter: FunctionParameter,
        wrapper: TypeExpr,
        outer_optional: bool,
        location: SourceLocation | None,
    ) -> Parameter:
        inner = wrapper.args[0] if wrapper.args else TypeExpr("str")
        if wrapper.name == "TypedHeader":
            schema = inline(SchemaKind.STRING)
        else:
            schema = self._compiler.compile(inner.unwrap_optional(), location=location)
        return Parameter(
            name=parameter.name.replace("_", "-"),
            location=ParameterLocation.HEADER,
            required=not (outer_optional or inner.is_optional),
            schema=schema,
        )

    def _struct_parameters(
        self,
        target: TypeExpr,
        parameter_location: ParameterLocation,
        location: SourceLocation | None,
    ) -> tuple[Parameter, ...] | None:
        metadata = self._compiler.resolve_metadata(target)
        if metadata is None or metadata.kind is not DeclarationKind.STRUCT:
            return None
        return tuple(
            Parameter(
                name=field.name,
                location=parameter_location,
                required=field.required,
                schema=self._compiler.compile(field.type_expr, location=location),
                description=field.description,
            )
            for field in self._compiler.expand_fields(metadata)
        )
