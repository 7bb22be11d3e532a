"""Document serialization tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from routescribe.diagnostics import SerializationError
from routescribe.document_assembly import (
    Info,
    OpenApiDocument,
    OutputFormat,
    PathItem,
    Server,
    document_to_dict,
    format_for_path,
    parse_document,
    read_document,
    render_document,
    write_outputs,
)
from routescribe.operation_building import Operation, Response
from routescribe.parameter_extraction import Parameter, ParameterLocation, RequestBody
from routescribe.schema_compilation import Schema, SchemaKind, SchemaReference
from routescribe.schema_compilation.schema_models import inline


def _document() -> OpenApiDocument:
    user = Schema(
        kind=SchemaKind.OBJECT,
        properties=(
            ("id", inline(SchemaKind.INTEGER, format="int64")),
            ("name", inline(SchemaKind.STRING)),
            ("manager", SchemaReference("User", description="Direct manager.")),
            ("roles", inline(SchemaKind.ARRAY, items=inline(SchemaKind.STRING, enum=("a", "b")))),
        ),
        required=("id", "name"),
        description="A user.",
    )
    get_user = Operation(
        operation_id="get_user",
        tags=("users",),
        summary="Fetch one user.",
        parameters=(
            Parameter(
                name="id",
                location=ParameterLocation.PATH,
                required=True,
                schema=inline(SchemaKind.INTEGER, format="int64"),
            ),
        ),
        responses=(
            Response(
                status="200",
                description="OK",
                media_type="application/json",
                schema=SchemaReference("User"),
            ),
            Response(status="404", description="Not Found"),
        ),
    )
    update_user = Operation(
        operation_id="update_user",
        request_body=RequestBody(media_type="application/json", schema=SchemaReference("User")),
        responses=(Response(status="204", description="No Content"),),
    )
    return OpenApiDocument(
        info=Info(title="Users", version="1.0.0"),
        servers=(Server(url="https://api.example.com", description="Production"),),
        tags=("users",),
        paths=(("/users/{id}", PathItem.of({"put": update_user, "get": get_user})),),
        schemas=(("User", user),),
    )


@pytest.mark.parametrize("output_format", [OutputFormat.JSON, OutputFormat.YAML])
def test_round_trip_preserves_document(output_format: OutputFormat) -> None:
    document = _document()

    parsed = parse_document(render_document(document, output_format), output_format)

    assert parsed == document


def test_json_rendering_is_indented_ordered_and_newline_terminated() -> None:
    text = render_document(_document(), OutputFormat.JSON)

    assert text.endswith("}\n")
    assert text.startswith('{\n  "openapi": "3.1.0",')
    data = json.loads(text)
    assert list(data) == ["openapi", "info", "servers", "tags", "paths", "components"]
    assert list(data["paths"]["/users/{id}"]) == ["get", "put"]
    assert list(data["components"]["schemas"]["User"]["properties"]) == [
        "id",
        "name",
        "manager",
        "roles",
    ]
    assert data["components"]["schemas"]["User"]["properties"]["manager"] == {
        "$ref": "#/components/schemas/User",
        "description": "Direct manager.",
    }


def test_equal_documents_render_identically() -> None:
    assert render_document(_document(), OutputFormat.YAML) == render_document(
        _document(), OutputFormat.YAML
    )


def test_format_is_chosen_by_suffix() -> None:
    assert format_for_path("openapi.json") is OutputFormat.JSON
    assert format_for_path("openapi.YML") is OutputFormat.YAML
    with pytest.raises(SerializationError, match="Unsupported document file type"):
        format_for_path("openapi.txt")


def test_malformed_input_raises_serialization_error() -> None:
    with pytest.raises(SerializationError):
        parse_document("{not json", OutputFormat.JSON)
    with pytest.raises(SerializationError, match="Expected info to be an object"):
        parse_document('{"openapi": "3.1.0", "paths": {}}', OutputFormat.JSON)


def test_write_outputs_replaces_files_without_leaving_temporaries(tmp_path: Path) -> None:
    json_path = tmp_path / "out" / "openapi.json"
    yaml_path = tmp_path / "out" / "openapi.yaml"
    json_path.parent.mkdir()
    json_path.write_text("stale", encoding="utf-8")
    document = _document()

    written = write_outputs(
        {
            json_path: render_document(document, OutputFormat.JSON),
            yaml_path: render_document(document, OutputFormat.YAML),
        }
    )

    assert written == (json_path, yaml_path)
    assert read_document(json_path) == document
    assert read_document(yaml_path) == document
    assert sorted(path.name for path in json_path.parent.iterdir()) == [
        "openapi.json",
        "openapi.yaml",
    ]


def test_write_outputs_leaves_every_file_untouched_when_one_cannot_be_staged(
    tmp_path: Path,
) -> None:
    first = tmp_path / "out" / "openapi.json"
    first.parent.mkdir()
    first.write_text("previous", encoding="utf-8")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    document = _document()

    with pytest.raises(SerializationError, match="blocker"):
        write_outputs(
            {
                first: render_document(document, OutputFormat.JSON),
                blocker / "openapi.yaml": render_document(document, OutputFormat.YAML),
            }
        )

    assert first.read_text(encoding="utf-8") == "previous"
    assert [path.name for path in first.parent.iterdir()] == ["openapi.json"]


def test_document_to_dict_omits_empty_sections() -> None:
    data = document_to_dict(OpenApiDocument(info=Info(title="Empty", version="0.1.0")))

    assert data == {
        "openapi": "3.1.0",
        "info": {"title": "Empty", "version": "0.1.0"},
        "paths": {},
        "components": {"schemas": {}},
    }
