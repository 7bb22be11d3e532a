"""Source discovery tests."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest
from routescribe.diagnostics import DiscoveryError
from routescribe.source_analysis import discover_source_files, logical_segments, read_source_unit


def _write(path: Path, contents: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    return path


def test_files_are_discovered_in_relative_path_order(tmp_path: Path) -> None:
    root = tmp_path / "routes"
    for relative in (
        "users.py",
        "admin/audit.py",
        "__init__.py",
        "admin/__init__.py",
        "__pycache__/users.cpython-311.py",
        ".hidden/secret.py",
        "notes.txt",
    ):
        _write(root / relative)

    discovered = discover_source_files(root)

    assert [path.relative_to(root).as_posix() for path in discovered] == [
        "__init__.py",
        "admin/__init__.py",
        "admin/audit.py",
        "users.py",
    ]


def test_missing_routes_directory_is_a_discovery_error(tmp_path: Path) -> None:
    with pytest.raises(DiscoveryError, match="does not exist"):
        discover_source_files(tmp_path / "missing")


@pytest.mark.parametrize(
    ("relative", "expected"),
    [
        ("users.py", ("users",)),
        ("admin/audit.py", ("admin", "audit")),
        ("admin/__init__.py", ("admin",)),
        ("__init__.py", ()),
    ],
)
def test_logical_segments_drop_package_modules(relative: str, expected: tuple[str, ...]) -> None:
    assert logical_segments(PurePosixPath(relative)) == expected


def test_read_source_unit_derives_prefix_and_module(tmp_path: Path) -> None:
    root = tmp_path / "routes"
    path = _write(
        root / "admin" / "audit.py",
        "@route\ndef list_entries() -> None:\n    ...\n\n@schema\nclass Entry:\n    id: int\n",
    )

    unit = read_source_unit(path, root)

    assert unit.prefix == "/admin/audit"
    assert unit.module == "admin.audit"
    assert [route.function_name for route in unit.routes] == ["list_entries"]
    assert unit.routes[0].prefix == "/admin/audit"
    assert [declaration.name for declaration in unit.declarations] == ["Entry"]


def test_syntax_errors_are_reported_with_location(tmp_path: Path) -> None:
    root = tmp_path / "routes"
    path = _write(root / "broken.py", "def ok():\n    pass\n\ndef broken(:\n")

    with pytest.raises(DiscoveryError, match="Invalid Python syntax") as excinfo:
        read_source_unit(path, root)
    assert excinfo.value.location.path == path
    assert excinfo.value.location.line == 4
