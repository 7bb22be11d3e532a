"""Declaration reader tests."""

from __future__ import annotations

import ast
from pathlib import Path
from textwrap import dedent

import pytest
from routescribe.diagnostics import DirectiveError
from routescribe.source_analysis import read_declarations
from routescribe.type_modeling import (
    DeclarationKind,
    Default,
    DerivedFrom,
    Flatten,
    Rename,
    Skip,
    TaggingMode,
    TypeDeclaration,
    TypeExpr,
    VariantShape,
)
from routescribe.type_modeling.type_models import optional_of

SOURCE = dedent(
    '''
    from enum import Enum
    from typing import Annotated, ClassVar, Generic, TypeVar

    from routescribe.markers import Flatten, Rename, Skip, Variant, schema

    T = TypeVar("T")


    @schema(rename_all="camelCase")
    class User:
        """A registered user."""

        id: int
        display_name: str
        "Name shown to other users."
        bio: str | None = None
        password_hash: Annotated[str, Skip()]
        audit: Annotated["Audit", Flatten()]
        email: Annotated[str, Rename("mail")]
        _cache: dict
        registry: ClassVar[dict]


    class NotDocumented:
        value: int


    @schema
    class Page(Generic[T]):
        items: list[T]
        total: int


    @schema(name="Figure", tag="kind")
    class Shape(Enum):
        CIRCLE = {"radius": float}
        SQUARE = Variant(fields={"side": float}, rename="square")
        PAIR = (int, int)
        EMPTY = ()
        POINT = "point"
        """A single point."""
        LEGACY = Variant(skip=True)
    '''
)


def _read(source: str) -> dict[str, TypeDeclaration]:
    declarations = read_declarations(ast.parse(source), source, Path("models.py"))
    return {declaration.name: declaration for declaration in declarations}


def test_only_schema_decorated_classes_are_read() -> None:
    assert list(_read(SOURCE)) == ["User", "Page", "Shape"]


def test_struct_fields_carry_types_directives_and_descriptions() -> None:
    user = _read(SOURCE)["User"]

    assert user.kind is DeclarationKind.STRUCT
    assert user.rename_all == "camelCase"
    assert user.description == "A registered user."
    assert user.location.line == 11
    assert [field.source_name for field in user.fields] == [
        "id",
        "display_name",
        "bio",
        "password_hash",
        "audit",
        "email",
    ]
    fields = {field.source_name: field for field in user.fields}
    assert fields["display_name"].description == "Name shown to other users."
    assert fields["bio"].type_expr == optional_of(TypeExpr("str"))
    assert fields["bio"].directives == (Default(),)
    assert fields["password_hash"].directives == (Skip(),)
    assert fields["audit"].type_expr == TypeExpr("Audit")
    assert fields["audit"].directives == (Flatten(),)
    assert fields["email"].directives == (Rename("mail"),)


def test_generic_parameters_are_recorded() -> None:
    assert _read(SOURCE)["Page"].generic_params == ("T",)


def test_enum_members_become_variants() -> None:
    shape = _read(SOURCE)["Shape"]

    assert shape.kind is DeclarationKind.ENUM
    assert shape.registry_name == "Figure"
    assert shape.tagging.mode is TaggingMode.INTERNAL
    assert shape.tagging.tag == "kind"
    variants = {variant.source_name: variant for variant in shape.variants}
    assert variants["CIRCLE"].shape is VariantShape.STRUCT
    assert variants["CIRCLE"].fields[0].source_name == "radius"
    assert variants["SQUARE"].shape is VariantShape.STRUCT
    assert variants["SQUARE"].directives == (Rename("square"),)
    assert variants["PAIR"].shape is VariantShape.TUPLE
    assert variants["PAIR"].elements == (TypeExpr("int"), TypeExpr("int"))
    assert variants["EMPTY"].shape is VariantShape.UNIT
    assert variants["POINT"].directives == (Rename("point"),)
    assert variants["POINT"].description == "A single point."
    assert variants["LEGACY"].directives == (Skip(),)


def test_adjacent_tagging_needs_tag_and_content() -> None:
    source = dedent(
        """
        @schema(tag="t", content="c")
        class Event(Enum):
            CREATED = (str,)
        """
    )

    assert _read(source)["Event"].tagging.mode is TaggingMode.ADJACENT


def test_content_without_tag_is_rejected_with_location() -> None:
    source = dedent(
        """
        @schema(content="c")
        class Event(Enum):
            CREATED = (str,)
        """
    )

    with pytest.raises(DirectiveError, match="'content' requires 'tag'") as excinfo:
        _read(source)
    assert str(excinfo.value.location) == "models.py:3"


def test_non_literal_schema_option_is_rejected() -> None:
    source = dedent(
        """
        STYLE = "camelCase"

        @schema(rename_all=STYLE)
        class User:
            id: int
        """
    )

    with pytest.raises(DirectiveError, match="must be a string literal"):
        _read(source)


def test_derived_schema_options_are_read() -> None:
    source = dedent(
        '''
        @schema(source="User", pick=["id", "displayName"], name="UserSummary")
        class UserSummaryView:
            """Public view of a user."""


        @schema(source="User", omit=("email",))
        class UserUpdate:
            pass
        '''
    )

    declarations = _read(source)

    summary = declarations["UserSummaryView"]
    assert summary.derived_from == DerivedFrom(source="User", pick=("id", "displayName"))
    assert summary.fields == ()
    assert summary.registry_name == "UserSummary"
    assert summary.description == "Public view of a user."
    assert declarations["UserUpdate"].derived_from == DerivedFrom(source="User", omit=("email",))


@pytest.mark.parametrize(
    ("decorator", "body", "message"),
    [
        ('@schema(pick=["id"])', "pass", "require 'source'"),
        ('@schema(source="User", omit="email")', "pass", "'omit' must be a list of strings"),
        ('@schema(source="User", rename_all="camelCase")', "pass", "cannot be combined"),
        ('@schema(source="User")', "id: int", "cannot declare fields"),
    ],
)
def test_invalid_derived_schema_options_are_rejected(decorator, body, message) -> None:
    source = f"{decorator}\nclass Derived:\n    {body}\n"

    with pytest.raises(DirectiveError, match=message):
        _read(source)
