"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from routescribe.document_assembly.document_models import Info, Server
from routescribe.operation_building.operation_models import OperationIdPolicy
from routescribe.schema_compilation.schema_compiler import UnknownTypePolicy


@dataclass(frozen=True)
class DocsSettings:
    """Viewer page binding and the document path it loads."""

    docs_path: str
    spec_path: str


@dataclass(frozen=True)
class Configuration:  # pylint: disable=too-many-instance-attributes
    """Top-level build configuration aggregate."""

    path: Path
    info: Info
    routes_dir: Path
    servers: tuple[Server, ...] = ()
    docs: DocsSettings | None = None
    outputs: tuple[Path, ...] = ()
    merge: tuple[Path, ...] = ()
    operation_id_policy: OperationIdPolicy = OperationIdPolicy.DISAMBIGUATE
    unknown_types: UnknownTypePolicy = UnknownTypePolicy.LENIENT
