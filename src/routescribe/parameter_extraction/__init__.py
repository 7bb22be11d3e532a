"""Parameter extraction exports."""

from .parameter_extractor import ParameterExtractor, classify_parameter, path_placeholders
from .parameter_models import (
    ExtractedParameters,
    ExtractorKind,
    FunctionParameter,
    Parameter,
    ParameterLocation,
    RequestBody,
)

__all__ = [
    "ExtractedParameters",
    "ExtractorKind",
    "FunctionParameter",
    "Parameter",
    "ParameterExtractor",
    "ParameterLocation",
    "RequestBody",
    "classify_parameter",
    "path_placeholders",
]
