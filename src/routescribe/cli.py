"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from routescribe.build_execution import BuildRequest, MergeRequest, execute_build, execute_merge
from routescribe.configuration import DEFAULT_CONFIG_FILENAME, write_placeholder_configuration
from routescribe.diagnostics import BuildError
from routescribe.document_assembly import DEFAULT_SPEC_PATH, render_docs_page, write_outputs

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="routescribe")
def cli() -> None:
    """Static OpenAPI document builder for annotated Python sources."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML build configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML build configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="build")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON build configuration file",
)
@click.option(
    "--check",
    is_flag=True,
    default=False,
    help="Compare configured outputs with a fresh build and fail on differences.",
)
@click.option(
    "--bindings",
    "bindings_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional JSON/YAML file receiving the route bindings",
)
@click.option("--verbose", is_flag=True, default=False, help="Log build progress to stderr.")
def build(config_path: str, check: bool, bindings_path: str | None, verbose: bool) -> None:
    """Build the OpenAPI document described by the configuration."""
    _configure_logging(verbose)
    try:
        outcome = execute_build(
            BuildRequest(config_path=config_path, check=check, bindings_path=bindings_path)
        )
    except BuildError as exc:
        raise CliError(str(exc)) from exc
    if outcome.check:
        if outcome.drifted:
            drifted = "\n".join(f"  {path}" for path in outcome.drifted)
            raise CliError(f"Outputs are out of date:\n{drifted}")
        click.echo("outputs are up to date")
        return
    for path in outcome.written:
        click.echo(str(path))


@cli.command(name="merge")
@click.option(
    "--output",
    "output_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the merged JSON/YAML document to write",
)
@click.argument("documents", nargs=-1, required=True, type=click.Path(path_type=str))
def merge(output_path: str, documents: tuple[str, ...]) -> None:
    """Merge independently built documents into one."""
    try:
        outcome = execute_merge(MergeRequest(documents=documents, output_path=output_path))
    except BuildError as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(outcome.output_path))


@cli.command(name="docs-page")
@click.option(
    "--spec-url",
    default=DEFAULT_SPEC_PATH,
    show_default=True,
    help="URL the viewer page loads the document from",
)
@click.option("--title", default="API Reference", show_default=True, help="Page title")
@click.option(
    "--output",
    "output_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the HTML page to write",
)
def docs_page(spec_url: str, title: str, output_path: str) -> None:
    """Write a viewer page for a generated document."""
    destination = Path(output_path)
    try:
        write_outputs({destination: render_docs_page(spec_url, title)})
    except BuildError as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(destination.resolve()))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
