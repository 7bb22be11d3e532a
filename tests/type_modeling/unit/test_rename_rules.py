"""Case-style renaming tests."""

from __future__ import annotations

import pytest
from routescribe.diagnostics import DirectiveError
from routescribe.type_modeling.rename_rules import apply_case_style, split_words


@pytest.mark.parametrize(
    ("style", "expected"),
    [
        ("camelCase", "displayName"),
        ("PascalCase", "DisplayName"),
        ("snake_case", "display_name"),
        ("SCREAMING_SNAKE_CASE", "DISPLAY_NAME"),
        ("kebab-case", "display-name"),
        ("SCREAMING-KEBAB-CASE", "DISPLAY-NAME"),
        ("lowercase", "display_name"),
        ("UPPERCASE", "DISPLAY_NAME"),
    ],
)
def test_apply_case_style_renames_snake_case_member(style: str, expected: str) -> None:
    assert apply_case_style("display_name", style) == expected


def test_split_words_keeps_acronyms_together() -> None:
    assert split_words("HTTPServerError") == ["http", "server", "error"]
    assert split_words("userId2") == ["user", "id", "2"]


def test_missing_style_keeps_name() -> None:
    assert apply_case_style("display_name", None) == "display_name"


def test_unknown_style_is_rejected() -> None:
    with pytest.raises(DirectiveError, match="Unsupported rename_all style 'TitleCase'"):
        apply_case_style("display_name", "TitleCase")
