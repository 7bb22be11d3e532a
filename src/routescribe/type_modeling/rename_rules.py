"""Case-style renaming of member names."""

from __future__ import annotations

import re

from routescribe.diagnostics.build_errors import DirectiveError

_SEPARATORS = re.compile(r"[_\-\s]+")
_WORDS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")

CASE_STYLES = (
    "lowercase",
    "UPPERCASE",
    "PascalCase",
    "camelCase",
    "snake_case",
    "SCREAMING_SNAKE_CASE",
    "kebab-case",
    "SCREAMING-KEBAB-CASE",
)


def split_words(name: str) -> list[str]:
    """Split snake, kebab, camel and Pascal names into lowercase words."""
    words: list[str] = []
    for chunk in _SEPARATORS.split(name):
        words.extend(match.lower() for match in _WORDS.findall(chunk))
    return words


def apply_case_style(name: str, style: str | None) -> str:
    """Rename one member according to a container-level case style."""
    if style is None:
        return name
    if style not in CASE_STYLES:
        raise DirectiveError(
            f"Unsupported rename_all style '{style}'. Expected one of: {', '.join(CASE_STYLES)}."
        )
    if style == "lowercase":
        return name.lower()
    if style == "UPPERCASE":
        return name.upper()

    words = split_words(name)
    if not words:
        return name
    if style == "PascalCase":
        return "".join(word.capitalize() for word in words)
    if style == "camelCase":
        return words[0] + "".join(word.capitalize() for word in words[1:])
    if style == "snake_case":
        return "_".join(words)
    if style == "SCREAMING_SNAKE_CASE":
        return "_".join(words).upper()
    if style == "kebab-case":
        return "-".join(words)
    return "-".join(words).upper()
