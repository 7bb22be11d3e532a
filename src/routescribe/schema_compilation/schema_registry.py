"""Shared registries of declarations and compiled schemas."""

from __future__ import annotations

import threading

from routescribe.diagnostics.build_errors import NamingCollisionError
from routescribe.type_modeling.type_models import TypeDeclaration

from .schema_models import Schema


class SchemaRegistry:
    """Name to compiled schema table shared by every compiler of one build.

    Insert-or-conflict is a single critical section. Read-out is sorted by
    name so no output depends on insertion order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._schemas: dict[str, Schema] = {}

    def insert(self, name: str, schema: Schema) -> Schema:
        """Register `schema` under `name` and return the stored entry.

        Raises:
          NamingCollisionError: If `name` already holds a different schema.
        """
        with self._lock:
            existing = self._schemas.get(name)
            if existing is None:
                self._schemas[name] = schema
                return schema
        if existing != schema:
            raise NamingCollisionError(
                f"Schema name '{name}' is already registered with a different definition."
            )
        return existing

    def get(self, name: str) -> Schema | None:
        with self._lock:
            return self._schemas.get(name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._schemas

    def __len__(self) -> int:
        with self._lock:
            return len(self._schemas)

    def sorted_items(self) -> list[tuple[str, Schema]]:
        """Return all entries ordered lexicographically by name."""
        with self._lock:
            return sorted(self._schemas.items())


class DeclarationCatalog:
    """Declared type name to source declaration, shared across parser workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._declarations: dict[str, TypeDeclaration] = {}

    def register(self, declaration: TypeDeclaration) -> None:
        """Add a declaration; re-registering an identical one is a no-op.

        Raises:
          NamingCollisionError: If the name is taken by a different declaration.
        """
        with self._lock:
            existing = self._declarations.setdefault(declaration.name, declaration)
        if existing is not declaration and existing.definition != declaration.definition:
            raise NamingCollisionError(
                f"Type '{declaration.name}' is declared twice "
                f"(first declared at {existing.location or 'unknown location'}).",
                declaration.location,
            )

    def get(self, name: str) -> TypeDeclaration | None:
        with self._lock:
            return self._declarations.get(name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._declarations

    def sorted_declarations(self) -> list[TypeDeclaration]:
        with self._lock:
            return [self._declarations[name] for name in sorted(self._declarations)]
