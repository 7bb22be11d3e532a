"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "routescribe.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Build configuration template for routescribe.
# Replace every <REQUIRED> placeholder before running build.
# Remove or fill the optional keys only when your project needs them.

title: "<REQUIRED>"
version: "<REQUIRED>"

# Directory scanned for @schema classes and @route functions,
# relative to this file.
routes_dir: "<REQUIRED>"

# servers:
#   - url: "https://api.example.com"
#     description: "Production"

# Adds a viewer page binding and the path of the document it loads.
# docs_path: "/docs"
# spec_path: "/openapi.json"

# One or more files; .json, .yaml and .yml are supported.
output:
  - "openapi.json"

# Documents built elsewhere that are merged into this build.
# merge:
#   - "<OPTIONAL>"

# disambiguate (default) or error
operation_id_policy: "disambiguate"

# lenient (default) documents unknown types as generic objects; strict fails.
unknown_types: "lenient"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML build configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
