"""Document assembly exports."""

from .docs_page import DEFAULT_SPEC_PATH, render_docs_page
from .document_assembler import DocumentAssembler, route_bindings
from .document_merge import merge_documents
from .document_models import (
    OPENAPI_VERSION,
    Info,
    OpenApiDocument,
    PathItem,
    RouteBinding,
    Server,
)
from .document_serialization import (
    OutputFormat,
    bindings_to_dict,
    document_from_dict,
    document_to_dict,
    format_for_path,
    parse_document,
    read_document,
    render_data,
    render_document,
    write_outputs,
)

__all__ = [
    "DEFAULT_SPEC_PATH",
    "DocumentAssembler",
    "Info",
    "OPENAPI_VERSION",
    "OpenApiDocument",
    "OutputFormat",
    "PathItem",
    "RouteBinding",
    "Server",
    "bindings_to_dict",
    "document_from_dict",
    "document_to_dict",
    "format_for_path",
    "merge_documents",
    "parse_document",
    "read_document",
    "render_data",
    "render_docs_page",
    "render_document",
    "route_bindings",
    "write_outputs",
]
