"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import urlparse

import yaml

from routescribe.diagnostics.build_errors import (
    ConfigurationError,
    SerializationError,
    SourceLocation,
)
from routescribe.document_assembly.docs_page import DEFAULT_SPEC_PATH
from routescribe.document_assembly.document_models import Info, Server
from routescribe.document_assembly.document_serialization import format_for_path
from routescribe.operation_building.operation_models import OperationIdPolicy
from routescribe.schema_compilation.schema_compiler import UnknownTypePolicy

from .runtime_settings import Configuration, DocsSettings

DEFAULT_OUTPUT = "openapi.json"

_KNOWN_KEYS = frozenset(
    {
        "title",
        "version",
        "description",
        "routes_dir",
        "servers",
        "docs_path",
        "spec_path",
        "output",
        "merge",
        "operation_id_policy",
        "unknown_types",
    }
)

_Policy = TypeVar("_Policy", bound=Enum)


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file.

    Relative paths inside the file resolve against the file's directory.

    Raises:
      ConfigurationError: If the file is missing, unparsable or invalid.
    """
    path = Path(config_path)
    location = SourceLocation(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read configuration file: {exc}", location) from exc
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}", location) from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.", location)

    try:
        return _parse_configuration(parsed, path)
    except ConfigurationError as exc:
        exc.at(location)
        raise


def _parse_configuration(parsed: Mapping[str, Any], path: Path) -> Configuration:
    unknown = sorted(str(key) for key in parsed if key not in _KNOWN_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration key(s): {', '.join(unknown)}.")

    base_path = path.parent
    info = Info(
        title=_require_non_empty_string(parsed.get("title"), "title"),
        version=_require_version(parsed.get("version")),
        description=_optional_string(parsed.get("description"), "description"),
    )
    routes_dir = _resolve_path(
        base_path, _require_non_empty_string(parsed.get("routes_dir"), "routes_dir")
    )
    return Configuration(
        path=path,
        info=info,
        routes_dir=routes_dir,
        servers=_parse_servers(parsed.get("servers")),
        docs=_parse_docs(parsed.get("docs_path"), parsed.get("spec_path")),
        outputs=_parse_documents(parsed.get("output", DEFAULT_OUTPUT), "output", base_path),
        merge=_parse_documents(parsed.get("merge"), "merge", base_path),
        operation_id_policy=_parse_policy(
            parsed.get("operation_id_policy"),
            OperationIdPolicy.DISAMBIGUATE,
            "operation_id_policy",
        ),
        unknown_types=_parse_policy(
            parsed.get("unknown_types"), UnknownTypePolicy.LENIENT, "unknown_types"
        ),
    )


def validate_server_url(url: str) -> str:
    """Accept absolute http(s) URLs and server-relative paths.

    Raises:
      ConfigurationError: If the URL has another shape.
    """
    if url.startswith("/"):
        return url
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(
            f"Invalid server URL '{url}'; "
            "expected http(s)://host or a path starting with '/'."
        )
    return url


def _parse_servers(value: Any) -> tuple[Server, ...]:
    if value is None:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise ConfigurationError("servers must be a list.")
    servers = []
    for index, entry in enumerate(value):
        label = f"servers[{index}]"
        if isinstance(entry, str):
            entry = {"url": entry}
        section = _require_mapping(entry, label)
        url = validate_server_url(_require_non_empty_string(section.get("url"), f"{label}.url"))
        servers.append(
            Server(
                url=url,
                description=_optional_string(section.get("description"), f"{label}.description"),
            )
        )
    return tuple(servers)


def _parse_docs(docs_path: Any, spec_path: Any) -> DocsSettings | None:
    docs = _optional_string(docs_path, "docs_path")
    document = _optional_string(spec_path, "spec_path")
    if docs is None:
        if document is not None:
            raise ConfigurationError("spec_path requires docs_path.")
        return None
    for value, label in ((docs, "docs_path"), (document, "spec_path")):
        if value is not None and not value.startswith("/"):
            raise ConfigurationError(f"{label} must start with '/'.")
    return DocsSettings(docs_path=docs, spec_path=document or DEFAULT_SPEC_PATH)


def _parse_documents(value: Any, field_name: str, base_path: Path) -> tuple[Path, ...]:
    documents = []
    for raw_path in _normalize_string_sequence(value, field_name):
        resolved = _resolve_path(base_path, raw_path)
        try:
            format_for_path(resolved)
        except SerializationError as exc:
            raise ConfigurationError(f"{field_name}: {exc.message}") from exc
        if resolved not in documents:
            documents.append(resolved)
    return tuple(documents)


def _parse_policy(value: Any, default: _Policy, field_name: str) -> _Policy:
    policy_type = type(default)
    if value is None:
        return default
    raw = _require_non_empty_string(value, field_name).lower()
    try:
        return policy_type(raw)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in policy_type)
        raise ConfigurationError(f"{field_name} must be one of: {allowed}.") from exc


def _require_version(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return _require_non_empty_string(value, "version")


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None
