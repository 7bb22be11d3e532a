"""Operation building exports."""

from .operation_builder import OperationBuilder, allocate_operation_ids
from .operation_models import (
    HTTP_METHODS,
    Operation,
    OperationIdPolicy,
    Response,
    RouteDeclaration,
    RoutedOperation,
)
from .response_extractor import ResponseExtractor, status_description
from .route_paths import derive_route_path, path_identifier, prefix_from_segments

__all__ = [
    "HTTP_METHODS",
    "Operation",
    "OperationBuilder",
    "OperationIdPolicy",
    "Response",
    "ResponseExtractor",
    "RouteDeclaration",
    "RoutedOperation",
    "allocate_operation_ids",
    "derive_route_path",
    "path_identifier",
    "prefix_from_segments",
    "status_description",
]
