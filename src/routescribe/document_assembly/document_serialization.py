"""Rendering, parsing and persistence of documents."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from routescribe.diagnostics.build_errors import SerializationError
from routescribe.operation_building.operation_models import HTTP_METHODS, Operation, Response
from routescribe.parameter_extraction.parameter_models import (
    Parameter,
    ParameterLocation,
    RequestBody,
)
from routescribe.schema_compilation.schema_codec import (
    schema_from_dict,
    schema_ref_from_dict,
    schema_ref_to_dict,
    schema_to_dict,
)

from .document_models import Info, OpenApiDocument, PathItem, RouteBinding, Server

_LOGGER = logging.getLogger(__name__)


class OutputFormat(str, Enum):
    """Serialization format of a document file."""

    JSON = "json"
    YAML = "yaml"


_SUFFIX_FORMATS = {
    ".json": OutputFormat.JSON,
    ".yaml": OutputFormat.YAML,
    ".yml": OutputFormat.YAML,
}


def format_for_path(path: Path | str) -> OutputFormat:
    """Return the format implied by a file suffix.

    Raises:
      SerializationError: If the suffix is neither JSON nor YAML.
    """
    suffix = Path(path).suffix.lower()
    try:
        return _SUFFIX_FORMATS[suffix]
    except KeyError as exc:
        raise SerializationError(
            f"Unsupported document file type '{suffix or path}'; use .json, .yaml or .yml."
        ) from exc


def document_to_dict(document: OpenApiDocument) -> dict[str, Any]:
    """Render a document as plain JSON-compatible data in canonical key order."""
    rendered: dict[str, Any] = {
        "openapi": document.openapi,
        "info": _info_to_dict(document.info),
    }
    if document.servers:
        rendered["servers"] = [_server_to_dict(server) for server in document.servers]
    if document.tags:
        rendered["tags"] = [{"name": tag} for tag in document.tags]
    rendered["paths"] = {
        path: {method: _operation_to_dict(operation) for method, operation in item.operations}
        for path, item in document.paths
    }
    rendered["components"] = {
        "schemas": {name: schema_to_dict(schema) for name, schema in document.schemas}
    }
    return rendered


def document_from_dict(data: Any) -> OpenApiDocument:
    """Parse data produced by `document_to_dict`.

    Raises:
      SerializationError: If the data is not a document of the supported shape.
    """
    node = _mapping(data, "document")
    paths = _mapping(node.get("paths", {}), "paths")
    components = _mapping(node.get("components", {}), "components")
    schemas = _mapping(components.get("schemas", {}), "schemas")
    try:
        return OpenApiDocument(
            openapi=str(node.get("openapi", "")),
            info=_info_from_dict(_mapping(node.get("info"), "info")),
            servers=tuple(
                Server(url=entry["url"], description=entry.get("description"))
                for entry in node.get("servers", ())
            ),
            tags=tuple(entry["name"] for entry in node.get("tags", ())),
            paths=tuple(
                (path, _path_item_from_dict(_mapping(item, f"path '{path}'")))
                for path, item in sorted(paths.items())
            ),
            schemas=tuple((name, schema_from_dict(schemas[name])) for name in sorted(schemas)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise SerializationError(f"Malformed document: {exc}") from exc


def render_document(document: OpenApiDocument, output_format: OutputFormat) -> str:
    """Serialize a document; equal documents always render to identical text."""
    return render_data(document_to_dict(document), output_format)


def render_data(data: Any, output_format: OutputFormat) -> str:
    if output_format is OutputFormat.YAML:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def parse_document(text: str, output_format: OutputFormat) -> OpenApiDocument:
    """Parse a serialized document.

    Raises:
      SerializationError: If the text cannot be parsed.
    """
    try:
        if output_format is OutputFormat.YAML:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise SerializationError(f"Cannot parse {output_format.value} document: {exc}") from exc
    return document_from_dict(data)


def read_document(path: Path | str) -> OpenApiDocument:
    """Load a document file, choosing the format by suffix.

    Raises:
      SerializationError: If the file cannot be read or parsed.
    """
    source = Path(path)
    output_format = format_for_path(source)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise SerializationError(f"Cannot read document {source}: {exc}") from exc
    try:
        return parse_document(text, output_format)
    except SerializationError as exc:
        raise SerializationError(f"{source}: {exc.message}") from exc


def bindings_to_dict(bindings: Sequence[RouteBinding]) -> dict[str, Any]:
    """Render route bindings as plain data."""
    return {
        "routes": [
            {
                "method": binding.method,
                "path": binding.path,
                "handler": binding.handler,
                "module": binding.module,
            }
            for binding in bindings
        ]
    }


def write_outputs(rendered: Mapping[Path, str]) -> tuple[Path, ...]:
    """Write already rendered texts, staging all of them before replacing any.

    Each text is first written to a temporary file next to its destination.
    Destinations are replaced only once every temporary file exists, so a
    failure while staging leaves every destination untouched.

    Args:
      rendered: Destination path to file content.

    Returns:
      The written paths.

    Raises:
      SerializationError: If a file cannot be written.
    """
    staged: list[tuple[str, Path]] = []
    try:
        for destination, text in rendered.items():
            staged.append((_stage(destination, text), destination))
    except SerializationError:
        _discard(staged)
        raise

    for index, (temporary, destination) in enumerate(staged):
        try:
            os.replace(temporary, destination)
        except OSError as exc:
            _discard(staged[index:])
            raise SerializationError(f"Cannot write {destination}: {exc}") from exc
        _LOGGER.info("Wrote %s", destination)
    return tuple(destination for _, destination in staged)


def _stage(destination: Path, text: str) -> str:
    temporary: str | None = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temporary = handle.name
            handle.write(text)
        return handle.name
    except OSError as exc:
        if temporary is not None:
            _discard([(temporary, destination)])
        raise SerializationError(f"Cannot write {destination}: {exc}") from exc


def _discard(staged: Sequence[tuple[str, Path]]) -> None:
    for temporary, _ in staged:
        try:
            os.unlink(temporary)
        except FileNotFoundError:
            continue
        except OSError as exc:
            _LOGGER.warning("Cannot remove temporary file %s: %s", temporary, exc)


def _info_to_dict(info: Info) -> dict[str, Any]:
    rendered: dict[str, Any] = {"title": info.title, "version": info.version}
    if info.description is not None:
        rendered["description"] = info.description
    return rendered


def _info_from_dict(node: Mapping[str, Any]) -> Info:
    return Info(
        title=str(node["title"]),
        version=str(node["version"]),
        description=node.get("description"),
    )


def _server_to_dict(server: Server) -> dict[str, Any]:
    rendered: dict[str, Any] = {"url": server.url}
    if server.description is not None:
        rendered["description"] = server.description
    return rendered


def _operation_to_dict(operation: Operation) -> dict[str, Any]:
    rendered: dict[str, Any] = {}
    if operation.tags:
        rendered["tags"] = list(operation.tags)
    if operation.summary is not None:
        rendered["summary"] = operation.summary
    if operation.description is not None:
        rendered["description"] = operation.description
    rendered["operationId"] = operation.operation_id
    if operation.parameters:
        rendered["parameters"] = [_parameter_to_dict(entry) for entry in operation.parameters]
    if operation.request_body is not None:
        rendered["requestBody"] = _request_body_to_dict(operation.request_body)
    rendered["responses"] = {
        response.status: _response_to_dict(response) for response in operation.responses
    }
    return rendered


def _parameter_to_dict(parameter: Parameter) -> dict[str, Any]:
    rendered: dict[str, Any] = {"name": parameter.name, "in": parameter.location.value}
    if parameter.description is not None:
        rendered["description"] = parameter.description
    rendered["required"] = parameter.required
    rendered["schema"] = schema_ref_to_dict(parameter.schema)
    return rendered


def _request_body_to_dict(body: RequestBody) -> dict[str, Any]:
    rendered: dict[str, Any] = {}
    if body.description is not None:
        rendered["description"] = body.description
    rendered["content"] = {body.media_type: {"schema": schema_ref_to_dict(body.schema)}}
    rendered["required"] = body.required
    return rendered


def _response_to_dict(response: Response) -> dict[str, Any]:
    rendered: dict[str, Any] = {"description": response.description}
    if response.media_type is not None:
        content: dict[str, Any] = {}
        if response.schema is not None:
            content["schema"] = schema_ref_to_dict(response.schema)
        rendered["content"] = {response.media_type: content}
    return rendered


def _path_item_from_dict(node: Mapping[str, Any]) -> PathItem:
    operations = {}
    for method, operation in node.items():
        if method not in HTTP_METHODS:
            raise SerializationError(f"Unsupported HTTP method '{method}'.")
        operations[method] = _operation_from_dict(_mapping(operation, f"operation '{method}'"))
    return PathItem.of(operations)


def _operation_from_dict(node: Mapping[str, Any]) -> Operation:
    body = node.get("requestBody")
    return Operation(
        operation_id=node["operationId"],
        tags=tuple(node.get("tags", ())),
        summary=node.get("summary"),
        description=node.get("description"),
        parameters=tuple(_parameter_from_dict(entry) for entry in node.get("parameters", ())),
        request_body=None if body is None else _request_body_from_dict(body),
        responses=tuple(
            _response_from_dict(str(status), entry)
            for status, entry in _mapping(node.get("responses", {}), "responses").items()
        ),
    )


def _parameter_from_dict(node: Mapping[str, Any]) -> Parameter:
    return Parameter(
        name=node["name"],
        location=ParameterLocation(node["in"]),
        required=bool(node.get("required", False)),
        schema=schema_ref_from_dict(node["schema"]),
        description=node.get("description"),
    )


def _request_body_from_dict(node: Mapping[str, Any]) -> RequestBody:
    media_type, content = _single_content(node)
    return RequestBody(
        media_type=media_type,
        schema=schema_ref_from_dict(content["schema"]),
        required=bool(node.get("required", False)),
        description=node.get("description"),
    )


def _response_from_dict(status: str, node: Mapping[str, Any]) -> Response:
    if "content" not in node:
        return Response(status=status, description=node["description"])
    media_type, content = _single_content(node)
    schema = content.get("schema")
    return Response(
        status=status,
        description=node["description"],
        media_type=media_type,
        schema=None if schema is None else schema_ref_from_dict(schema),
    )


def _single_content(node: Mapping[str, Any]) -> tuple[str, Mapping[str, Any]]:
    content = _mapping(node.get("content"), "content")
    if len(content) != 1:
        raise SerializationError("Exactly one media type per content entry is supported.")
    ((media_type, entry),) = content.items()
    return media_type, _mapping(entry, f"content '{media_type}'")


def _mapping(node: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(node, Mapping):
        raise SerializationError(f"Expected {label} to be an object.")
    return node
