"""Combination of independently assembled documents."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import TypeVar

from routescribe.diagnostics.build_errors import BuildError, NamingCollisionError

from .document_models import OpenApiDocument, Server

_LOGGER = logging.getLogger(__name__)

_Entry = TypeVar("_Entry")


def merge_documents(documents: Sequence[OpenApiDocument]) -> OpenApiDocument:
    """Union the paths and schemas of several documents.

    A key present in more than one document must map to an identical entry.
    Info comes from the first document; servers are unioned in first-seen
    order.

    Raises:
      NamingCollisionError: If a path or schema name maps to differing entries,
        or two operations of the merged document share an operation id.
      BuildError: If no document is given.
    """
    if not documents:
        raise BuildError("At least one document is required for merging.")

    servers: list[Server] = []
    for document in documents:
        for server in document.servers:
            if server not in servers:
                servers.append(server)

    merged = OpenApiDocument(
        info=documents[0].info,
        paths=_union("path", [document.paths for document in documents]),
        schemas=_union("schema", [document.schemas for document in documents]),
        servers=tuple(servers),
        tags=tuple(sorted({tag for document in documents for tag in document.tags})),
        openapi=documents[0].openapi,
    )
    _reject_duplicate_operation_ids(merged)
    _LOGGER.info(
        "Merged %d document(s) into %d path(s) and %d schema(s)",
        len(documents),
        len(merged.paths),
        len(merged.schemas),
    )
    return merged


def _union(
    label: str, tables: Sequence[tuple[tuple[str, _Entry], ...]]
) -> tuple[tuple[str, _Entry], ...]:
    combined: dict[str, _Entry] = {}
    for table in tables:
        for key, entry in table:
            existing = combined.setdefault(key, entry)
            if existing != entry:
                raise NamingCollisionError(
                    f"Cannot merge documents: {label} '{key}' has differing definitions."
                )
    return tuple(sorted(combined.items()))


def _reject_duplicate_operation_ids(document: OpenApiDocument) -> None:
    users: dict[str, list[str]] = defaultdict(list)
    for path, item in document.paths:
        for method, operation in item.operations:
            users[operation.operation_id].append(f"{method.upper()} {path}")
    for operation_id, routes in sorted(users.items()):
        if len(routes) > 1:
            raise NamingCollisionError(
                f"Cannot merge documents: operation id '{operation_id}' is used by "
                f"{', '.join(routes)}."
            )
