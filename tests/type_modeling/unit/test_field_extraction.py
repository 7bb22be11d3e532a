"""Field and variant extraction tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from routescribe.diagnostics import DirectiveError, SourceLocation
from routescribe.type_modeling import (
    DeclarationKind,
    Default,
    Flatten,
    RawField,
    RawVariant,
    Rename,
    RenameAll,
    Skip,
    TypeDeclaration,
    TypeExpr,
    VariantShape,
    derive_declaration,
    extract_fields,
    extract_variants,
    resolve_declaration,
)
from routescribe.type_modeling.type_models import DerivedFrom, optional_of

INT = TypeExpr("int")
STR = TypeExpr("str")


def test_fields_are_renamed_and_optional_defaults_are_not_required() -> None:
    fields = extract_fields(
        (
            RawField("id", INT),
            RawField("display_name", STR),
            RawField("bio", optional_of(STR), (Default(),)),
        ),
        "camelCase",
    )

    assert [(field.name, field.required) for field in fields] == [
        ("id", True),
        ("displayName", True),
        ("bio", False),
    ]
    assert fields[2].type_expr == STR


def test_default_alone_makes_field_optional_on_the_wire() -> None:
    (field,) = extract_fields((RawField("retries", INT, (Default(),)),), None)

    assert field.required is False
    assert field.type_expr == INT


def test_skipped_fields_never_appear() -> None:
    fields = extract_fields(
        (RawField("id", INT), RawField("password_hash", STR, (Skip(),))), None
    )

    assert [field.source_name for field in fields] == ["id"]


def test_explicit_rename_wins_over_container_style() -> None:
    (field,) = extract_fields((RawField("user_id", INT, (Rename("uid"),)),), "camelCase")

    assert field.name == "uid"


def test_duplicate_wire_names_are_rejected() -> None:
    with pytest.raises(DirectiveError, match="Duplicate wire name 'userId'"):
        extract_fields(
            (RawField("user_id", INT), RawField("other", INT, (Rename("userId"),))),
            "camelCase",
        )


def test_rename_all_on_a_field_is_rejected() -> None:
    with pytest.raises(DirectiveError, match="cannot carry rename_all"):
        extract_fields((RawField("id", INT, (RenameAll("camelCase"),)),), None)


def test_flattened_fields_keep_their_flag() -> None:
    (field,) = extract_fields((RawField("meta", TypeExpr("Meta"), (Flatten(),)),), None)

    assert field.flatten is True


def test_variants_follow_container_style_and_own_field_style() -> None:
    variants = extract_variants(
        (
            RawVariant("not_found", VariantShape.UNIT),
            RawVariant(
                "rate_limited",
                VariantShape.STRUCT,
                fields=(RawField("retry_after", INT),),
                directives=(RenameAll("kebab-case"),),
            ),
            RawVariant("internal", VariantShape.UNIT, directives=(Skip(),)),
        ),
        "PascalCase",
    )

    assert [variant.name for variant in variants] == ["NotFound", "RateLimited"]
    assert variants[1].fields[0].name == "retry-after"


def test_variants_reject_default_and_flatten() -> None:
    with pytest.raises(DirectiveError, match="only accepts rename"):
        extract_variants((RawVariant("empty", VariantShape.UNIT, directives=(Default(),)),), None)


def test_resolve_declaration_substitutes_generic_parameters() -> None:
    declaration = TypeDeclaration(
        name="Page",
        kind=DeclarationKind.STRUCT,
        definition="class Page(Generic[T]): ...",
        fields=(RawField("items", TypeExpr("list", (TypeExpr("T"),))),),
        generic_params=("T",),
    )

    metadata = resolve_declaration(
        declaration, key="Page_User", bindings={"T": TypeExpr("User")}
    )

    assert metadata.key == "Page_User"
    assert metadata.fields[0].type_expr == TypeExpr("list", (TypeExpr("User"),))


def test_resolve_declaration_attaches_location_to_directive_errors() -> None:
    location = SourceLocation(Path("routes/users.py"), 12)
    declaration = TypeDeclaration(
        name="User",
        kind=DeclarationKind.STRUCT,
        definition="class User: ...",
        fields=(RawField("id", INT),),
        rename_all="TitleCase",
        location=location,
    )

    with pytest.raises(DirectiveError) as excinfo:
        resolve_declaration(declaration)

    assert excinfo.value.location == location
    assert str(excinfo.value).startswith("routes/users.py:12: ")


def _account() -> TypeDeclaration:
    return TypeDeclaration(
        name="Account",
        kind=DeclarationKind.STRUCT,
        definition="class Account: ...",
        fields=(
            RawField("account_id", INT),
            RawField("display_name", STR),
            RawField("password_hash", STR, (Rename("secret"),)),
            RawField("nickname", optional_of(STR), (Default(),)),
            RawField("audit_token", STR, (Skip(),)),
        ),
        rename_all="camelCase",
        description="A stored account.",
    )


def _derived(
    pick: tuple[str, ...] = (), omit: tuple[str, ...] = (), source: str = "Account"
) -> TypeDeclaration:
    return TypeDeclaration(
        name="AccountView",
        kind=DeclarationKind.STRUCT,
        definition="class AccountView: ...",
        location=SourceLocation(Path("models.py"), 20),
        derived_from=DerivedFrom(source=source, pick=pick, omit=omit),
    )


def _lookup(*declarations: TypeDeclaration):
    table = {declaration.name: declaration for declaration in declarations}
    return table.get


def test_derived_declaration_picks_fields_by_source_or_wire_name() -> None:
    derived = derive_declaration(
        _derived(pick=("account_id", "displayName", "nickname")), _lookup(_account())
    )
    fields = resolve_declaration(derived).fields

    assert derived.derived_from is None
    assert derived.description == "A stored account."
    assert [(field.name, field.required) for field in fields] == [
        ("accountId", True),
        ("displayName", True),
        ("nickname", False),
    ]


def test_derived_declaration_omits_fields_and_keeps_renames_and_skips() -> None:
    derived = derive_declaration(_derived(omit=("account_id",)), _lookup(_account()))
    fields = resolve_declaration(derived).fields

    assert [field.name for field in fields] == ["displayName", "secret", "nickname"]
    assert resolve_declaration(derived).key == "AccountView"


def test_omit_matches_explicitly_renamed_wire_name() -> None:
    derived = derive_declaration(_derived(omit=("secret", "nickname")), _lookup(_account()))

    assert [field.name for field in resolve_declaration(derived).fields] == [
        "accountId",
        "displayName",
    ]


def test_declaration_without_source_is_returned_unchanged() -> None:
    account = _account()

    assert derive_declaration(account, _lookup()) is account


@pytest.mark.parametrize(
    ("derived", "declarations", "message"),
    [
        (_derived(pick=("email",)), (_account(),), "'pick' names unknown field"),
        (_derived(source="Missing"), (_account(),), "unknown type 'Missing'"),
        (_derived(source="AccountView"), (), "derives from itself"),
        (
            _derived(source="Status"),
            (TypeDeclaration("Status", DeclarationKind.ENUM, "class Status(Enum): ..."),),
            "non-generic struct",
        ),
    ],
)
def test_invalid_derivation_is_rejected_with_location(derived, declarations, message) -> None:
    with pytest.raises(DirectiveError, match=message) as excinfo:
        derive_declaration(derived, _lookup(*declarations))
    assert str(excinfo.value.location) == "models.py:20"
