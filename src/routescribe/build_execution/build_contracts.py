"""Build execution entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from routescribe.configuration.runtime_settings import Configuration
from routescribe.document_assembly.document_models import OpenApiDocument, RouteBinding
from routescribe.schema_compilation.schema_compiler import UnknownTypePolicy
from routescribe.schema_compilation.schema_registry import DeclarationCatalog, SchemaRegistry


@dataclass(frozen=True)
class BuildRequest:
    """Input contract for one build."""

    config_path: str
    check: bool = False
    bindings_path: str | None = None
    workers: int | None = None


@dataclass(frozen=True)
class BuildOutcome:
    """Output contract for one completed build."""

    document: OpenApiDocument
    bindings: tuple[RouteBinding, ...]
    written: tuple[Path, ...] = ()
    drifted: tuple[Path, ...] = ()
    check: bool = False


@dataclass(frozen=True)
class MergeRequest:
    """Input contract for merging already built documents."""

    documents: tuple[str, ...]
    output_path: str


@dataclass(frozen=True)
class MergeOutcome:
    """Output contract for one completed merge."""

    document: OpenApiDocument
    output_path: Path


@dataclass(frozen=True)
class BuildContext:
    """State shared by every worker of one build."""

    configuration: Configuration
    registry: SchemaRegistry = field(default_factory=SchemaRegistry)
    catalog: DeclarationCatalog = field(default_factory=DeclarationCatalog)

    @property
    def policy(self) -> UnknownTypePolicy:
        return self.configuration.unknown_types
