"""Structured build errors."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SourceLocation:
    """File position of the declaration an error originates from."""

    path: Path
    line: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"


class BuildError(Exception):
    """Base class for failures that abort document production."""

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location}: {self.message}"

    def at(self, location: SourceLocation | None) -> BuildError:
        """Attach a location unless one is already known."""
        if self.location is None and location is not None:
            self.location = location
        return self


class ConfigurationError(BuildError):
    """Raised when the build configuration is invalid."""


class DiscoveryError(BuildError):
    """Raised when a source file cannot be read or parsed."""


class TypeResolutionError(BuildError):
    """Raised when a type cannot be resolved to a schema."""


class DirectiveError(BuildError):
    """Raised for malformed field or container directives."""


class NamingCollisionError(BuildError):
    """Raised when one name is bound to two different definitions."""


class RouteSignatureError(BuildError):
    """Raised when a route function signature cannot be documented."""


class ArityError(RouteSignatureError):
    """Raised when path placeholders and path parameters do not line up."""


class SerializationError(BuildError):
    """Raised when the document cannot be rendered or written."""
