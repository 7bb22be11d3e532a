"""Derivation of documented responses from route return types."""

from __future__ import annotations

from collections.abc import Sequence
from http import HTTPStatus

from routescribe.diagnostics.build_errors import RouteSignatureError, SourceLocation
from routescribe.parameter_extraction.parameter_models import JSON_MEDIA_TYPE, TEXT_MEDIA_TYPE
from routescribe.schema_compilation.schema_compiler import SchemaCompiler
from routescribe.type_modeling.type_models import TypeExpr

from .operation_models import Response

DEFAULT_ERROR_STATUS = (400,)

_JSON_WRAPPERS = frozenset({"Json"})
_RESULT_TYPES = frozenset({"Result"})
_TEXT_TYPES = frozenset({"str"})


def status_description(status: int) -> str:
    """Return the reason phrase of an HTTP status code."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"Status {status}"


class ResponseExtractor:
    """Turns a return annotation into status code to schema mappings."""

    def __init__(self, compiler: SchemaCompiler) -> None:
        self._compiler = compiler

    def extract(
        self,
        return_type: TypeExpr | None,
        *,
        status: int | None = None,
        error_status: Sequence[int] = (),
        location: SourceLocation | None = None,
    ) -> tuple[Response, ...]:
        """Return responses ordered by status code.

        A `None` return is a single no-content response. `Result[T, E]` adds
        one response per error status when both arms are statically known;
        otherwise only the success arm is documented.

        Raises:
          RouteSignatureError: If a status code is outside 100..599 or an error
            status equals the success status.
        """
        for code in (status, *error_status):
            if code is not None and not 100 <= code <= 599:
                raise RouteSignatureError(f"Invalid HTTP status code: {code}", location)

        if return_type is None:
            code = int(status or HTTPStatus.OK)
            return (Response(status=str(code), description=status_description(code)),)

        if return_type.name in _RESULT_TYPES and len(return_type.args) == 2:
            success_type, error_type = return_type.args
            success = self._response(success_type, status, location)
            error_codes = tuple(error_status or DEFAULT_ERROR_STATUS)
            if any(str(int(code)) == success.status for code in error_codes):
                raise RouteSignatureError(
                    f"Status {success.status} is declared both as the success status "
                    "and as an error status.",
                    location,
                )
            responses = [success]
            if self._statically_known(success_type) and self._statically_known(error_type):
                for code in error_codes:
                    responses.append(self._body_response(error_type, code, location))
            return _ordered(responses)

        return (self._response(return_type, status, location),)

    def _response(
        self, type_expr: TypeExpr, status: int | None, location: SourceLocation | None
    ) -> Response:
        if type_expr.is_none:
            code = status or HTTPStatus.NO_CONTENT
            return Response(status=str(int(code)), description=status_description(code))
        return self._body_response(type_expr, status or HTTPStatus.OK, location)

    def _body_response(
        self, type_expr: TypeExpr, code: int, location: SourceLocation | None
    ) -> Response:
        body_type, media_type = _unwrap_body(type_expr)
        if body_type.is_none:
            return Response(status=str(int(code)), description=status_description(code))
        return Response(
            status=str(int(code)),
            description=status_description(code),
            media_type=media_type,
            schema=self._compiler.compile(body_type, location=location),
        )

    def _statically_known(self, type_expr: TypeExpr) -> bool:
        body_type, _ = _unwrap_body(type_expr)
        return body_type.is_none or self._compiler.can_resolve(body_type)


def _unwrap_body(type_expr: TypeExpr) -> tuple[TypeExpr, str]:
    if type_expr.name in _JSON_WRAPPERS and type_expr.args:
        return type_expr.args[0], JSON_MEDIA_TYPE
    if type_expr.name in _TEXT_TYPES:
        return type_expr, TEXT_MEDIA_TYPE
    return type_expr, JSON_MEDIA_TYPE


def _ordered(responses: Sequence[Response]) -> tuple[Response, ...]:
    by_status: dict[str, Response] = {}
    for response in responses:
        by_status.setdefault(response.status, response)
    return tuple(by_status[code] for code in sorted(by_status))
