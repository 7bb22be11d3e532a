"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import DEFAULT_OUTPUT, load_configuration, validate_server_url
from .runtime_settings import Configuration, DocsSettings

__all__ = [
    "Configuration",
    "DocsSettings",
    "DEFAULT_OUTPUT",
    "load_configuration",
    "validate_server_url",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
