"""Build execution use-case service."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath

from routescribe.configuration import load_configuration
from routescribe.configuration.runtime_settings import Configuration
from routescribe.diagnostics.build_errors import BuildError, SerializationError
from routescribe.document_assembly import (
    DocumentAssembler,
    OpenApiDocument,
    bindings_to_dict,
    format_for_path,
    merge_documents,
    read_document,
    render_data,
    render_docs_page,
    render_document,
    route_bindings,
    write_outputs,
)
from routescribe.operation_building import OperationBuilder, RoutedOperation, allocate_operation_ids
from routescribe.schema_compilation.schema_compiler import SchemaCompiler
from routescribe.source_analysis import SourceUnit, discover_source_files, read_source_unit
from routescribe.type_modeling.type_models import TypeDeclaration, TypeExpr

from .build_contracts import BuildContext, BuildOutcome, BuildRequest, MergeOutcome, MergeRequest

_LOGGER = logging.getLogger(__name__)

DOCS_PAGE_SUFFIX = ".html"


def execute_build(request: BuildRequest) -> BuildOutcome:
    """Run one full build and return its outcome.

    Every output is rendered before the first file is written, so a failing
    build leaves existing files untouched. In check mode nothing is written
    and outputs whose content differs are reported as drifted.

    Raises:
      BuildError: For any fatal analysis, merge or serialization failure.
    """
    configuration = load_configuration(request.config_path)
    context = BuildContext(configuration=configuration)

    units = _read_units(configuration.routes_dir, request.workers)
    _register_declarations(context, units)
    _compile_declarations(context, request.workers)
    routed = _build_operations(context, units)

    document = DocumentAssembler(configuration.info, configuration.servers).assemble(
        routed, context.registry
    )
    if configuration.merge:
        document = merge_documents(
            [document, *(read_document(path) for path in configuration.merge)]
        )

    docs = configuration.docs
    bindings = route_bindings(
        routed,
        docs_path=docs.docs_path if docs else None,
        spec_path=docs.spec_path if docs else None,
    )
    rendered = _render_outputs(configuration, document)
    if request.bindings_path:
        bindings_path = Path(request.bindings_path)
        rendered[bindings_path] = render_data(
            bindings_to_dict(bindings), format_for_path(bindings_path)
        )

    if request.check:
        drifted = tuple(path for path, text in rendered.items() if _differs(path, text))
        for path in drifted:
            _LOGGER.warning("Output is out of date: %s", path)
        return BuildOutcome(document=document, bindings=bindings, drifted=drifted, check=True)

    written = write_outputs(rendered)
    return BuildOutcome(document=document, bindings=bindings, written=written)


def execute_merge(request: MergeRequest) -> MergeOutcome:
    """Merge already built documents into one output file.

    Raises:
      BuildError: If a document cannot be read, entries collide or the output
        cannot be written.
    """
    if not request.documents:
        raise BuildError("At least one document is required for merging.")
    document = merge_documents([read_document(path) for path in request.documents])
    output_path = Path(request.output_path)
    text = render_document(document, format_for_path(output_path))
    write_outputs({output_path: text})
    return MergeOutcome(document=document, output_path=output_path.resolve())


def _read_units(routes_dir: Path, workers: int | None) -> tuple[SourceUnit, ...]:
    paths = discover_source_files(routes_dir)
    _LOGGER.info("Discovered %d source file(s) in %s", len(paths), routes_dir)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return tuple(executor.map(lambda path: read_source_unit(path, routes_dir), paths))


def _register_declarations(context: BuildContext, units: Sequence[SourceUnit]) -> None:
    for unit in units:
        for declaration in unit.declarations:
            context.catalog.register(declaration)


def _compile_declarations(context: BuildContext, workers: int | None) -> None:
    """Compile every non-generic declaration; generics compile per instantiation."""
    declarations = [
        declaration
        for declaration in context.catalog.sorted_declarations()
        if not declaration.generic_params
    ]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        # list() drains the iterator so the first worker error propagates here.
        list(executor.map(lambda declaration: _compile_one(context, declaration), declarations))
    _LOGGER.info("Compiled %d schema(s)", len(context.registry))


def _compile_one(context: BuildContext, declaration: TypeDeclaration) -> None:
    compiler = SchemaCompiler(context.registry, context.catalog, policy=context.policy)
    compiler.compile(TypeExpr(declaration.name), location=declaration.location)


def _build_operations(
    context: BuildContext, units: Sequence[SourceUnit]
) -> tuple[RoutedOperation, ...]:
    compiler = SchemaCompiler(context.registry, context.catalog, policy=context.policy)
    builder = OperationBuilder(compiler)
    routed = [builder.build(route) for unit in units for route in unit.routes]
    _LOGGER.info("Built %d operation(s)", len(routed))
    return allocate_operation_ids(routed, context.configuration.operation_id_policy)


def _render_outputs(configuration: Configuration, document: OpenApiDocument) -> dict[Path, str]:
    rendered = {
        path: render_document(document, format_for_path(path)) for path in configuration.outputs
    }
    docs = configuration.docs
    if docs and configuration.outputs:
        page_name = PurePosixPath(docs.docs_path).name or "docs"
        page_path = configuration.outputs[0].parent / f"{page_name}{DOCS_PAGE_SUFFIX}"
        rendered[page_path] = render_docs_page(docs.spec_path, configuration.info.title)
    return rendered


def _differs(path: Path, text: str) -> bool:
    try:
        return path.read_text(encoding="utf-8") != text
    except FileNotFoundError:
        return True
    except OSError as exc:
        raise SerializationError(f"Cannot read {path}: {exc}") from exc
