"""Static analysis of Python source files."""

from .annotation_parser import parse_annotation, split_annotated
from .declaration_reader import read_declarations
from .route_reader import read_routes
from .source_discovery import SourceUnit, discover_source_files, logical_segments, read_source_unit

__all__ = [
    "SourceUnit",
    "discover_source_files",
    "logical_segments",
    "parse_annotation",
    "read_declarations",
    "read_routes",
    "read_source_unit",
    "split_annotated",
]
