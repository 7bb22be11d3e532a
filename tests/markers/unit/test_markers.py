"""Runtime marker tests."""

from __future__ import annotations

from routescribe.markers import Json, Path, Result, Variant, route, schema


def test_schema_marker_returns_class_unchanged() -> None:
    @schema
    class Plain:
        value: int

    @schema(name="Renamed", rename_all="camelCase")
    class Configured:
        value: int

    assert Plain.__name__ == "Plain"
    assert Configured.__name__ == "Configured"


def test_route_marker_returns_function_unchanged() -> None:
    @route
    def index() -> None:
        return None

    @route("post", path="/{id}", tags=["items"], error_status=[404])
    def create(id: Path[int]) -> Result[Json[str], Json[str]]:
        return id

    assert index() is None
    assert create(7) == 7


def test_variant_keeps_its_options() -> None:
    variant = Variant(int, str, rename="pair", skip=True)

    assert variant.elements == (int, str)
    assert variant.rename == "pair"
    assert variant.skip is True
    assert variant.fields is None
