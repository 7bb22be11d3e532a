"""Derivation of final route paths."""

from __future__ import annotations

from collections.abc import Sequence


def derive_route_path(prefix: str, suffix: str | None) -> str:
    """Join a group prefix and a declared suffix into the final path.

    A missing suffix is the group's index route and maps to the prefix itself.
    """
    segments = [segment for segment in prefix.split("/") if segment]
    if suffix:
        segments.extend(segment for segment in suffix.split("/") if segment)
    return "/" + "/".join(segments)


def prefix_from_segments(segments: Sequence[str]) -> str:
    """Return the logical prefix of a nesting of named groups."""
    return "/" + "/".join(segment for segment in segments if segment)


def path_identifier(path: str) -> str:
    """Render a path as an identifier fragment (`/users/{id}` -> `users_id`)."""
    cleaned = "".join(
        character if character.isalnum() else "_" for character in path.strip("/")
    )
    parts = [part for part in cleaned.split("_") if part]
    return "_".join(parts) or "root"
