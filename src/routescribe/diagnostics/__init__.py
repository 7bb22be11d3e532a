"""Diagnostics exports."""

from .build_errors import (
    ArityError,
    BuildError,
    ConfigurationError,
    DirectiveError,
    DiscoveryError,
    NamingCollisionError,
    RouteSignatureError,
    SerializationError,
    SourceLocation,
    TypeResolutionError,
)

__all__ = [
    "ArityError",
    "BuildError",
    "ConfigurationError",
    "DirectiveError",
    "DiscoveryError",
    "NamingCollisionError",
    "RouteSignatureError",
    "SerializationError",
    "SourceLocation",
    "TypeResolutionError",
]
