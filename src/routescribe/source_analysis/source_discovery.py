"""Deterministic discovery and parsing of source files."""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from routescribe.diagnostics.build_errors import BuildError, DiscoveryError, SourceLocation
from routescribe.operation_building.operation_models import RouteDeclaration
from routescribe.operation_building.route_paths import prefix_from_segments
from routescribe.type_modeling.type_models import TypeDeclaration

from .declaration_reader import read_declarations
from .route_reader import read_routes

_LOGGER = logging.getLogger(__name__)

SOURCE_SUFFIX = ".py"
PACKAGE_MODULE = "__init__"
_SKIPPED_DIRECTORIES = frozenset({"__pycache__"})


@dataclass(frozen=True)
class SourceUnit:
    """Everything one source file declares."""

    path: Path
    prefix: str
    module: str
    declarations: tuple[TypeDeclaration, ...] = ()
    routes: tuple[RouteDeclaration, ...] = ()


def discover_source_files(root: Path | str) -> tuple[Path, ...]:
    """Return `.py` files below `root`, ordered by relative POSIX path.

    Hidden entries and `__pycache__` directories are skipped.

    Raises:
      DiscoveryError: If `root` is not a readable directory.
    """
    directory = Path(root)
    if not directory.is_dir():
        raise DiscoveryError(f"Routes directory does not exist: {directory}")
    try:
        candidates = [
            path
            for path in directory.rglob(f"*{SOURCE_SUFFIX}")
            if path.is_file() and not _is_skipped(path.relative_to(directory))
        ]
    except OSError as exc:
        raise DiscoveryError(f"Cannot scan routes directory {directory}: {exc}") from exc
    return tuple(sorted(candidates, key=lambda path: path.relative_to(directory).as_posix()))


def logical_segments(relative: PurePosixPath) -> tuple[str, ...]:
    """Return the group nesting of a file (`users/__init__.py` -> `("users",)`)."""
    segments = list(relative.with_suffix("").parts)
    if segments and segments[-1] == PACKAGE_MODULE:
        segments.pop()
    return tuple(segments)


def read_source_unit(path: Path, root: Path) -> SourceUnit:
    """Parse one source file into its declarations and routes.

    Raises:
      DiscoveryError: If the file cannot be read or is not valid Python.
      BuildError: If a declaration inside the file is malformed.
    """
    relative = PurePosixPath(path.relative_to(root).as_posix())
    segments = logical_segments(relative)
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DiscoveryError(f"Cannot read source file: {exc}", SourceLocation(path)) from exc
    try:
        module = ast.parse(source, filename=str(path))
    except SyntaxError as exc:
        raise DiscoveryError(
            f"Invalid Python syntax: {exc.msg}", SourceLocation(path, exc.lineno)
        ) from exc

    prefix = prefix_from_segments(segments)
    module_name = ".".join(segments) or PACKAGE_MODULE
    try:
        unit = SourceUnit(
            path=path,
            prefix=prefix,
            module=module_name,
            declarations=read_declarations(module, source, path),
            routes=read_routes(module, path, prefix=prefix, module_name=module_name),
        )
    except BuildError as exc:
        exc.at(SourceLocation(path))
        raise
    _LOGGER.debug(
        "Read %s: %d declaration(s), %d route(s)",
        relative,
        len(unit.declarations),
        len(unit.routes),
    )
    return unit


def _is_skipped(relative: Path) -> bool:
    return any(
        part.startswith(".") or part in _SKIPPED_DIRECTORIES for part in relative.parts
    )
