"""CLI error-handling tests."""

from __future__ import annotations

from pathlib import Path

from routescribe.cli import main


def test_missing_required_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["build"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "Missing option" in captured.err
    assert "--config" in captured.err
    assert "Traceback" not in captured.err


def test_unknown_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["build", "--bogus"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "No such option: --bogus" in captured.err
    assert "Traceback" not in captured.err


def test_build_error_is_reported_with_location(tmp_path: Path, capsys) -> None:
    config_path = tmp_path / "routescribe.yaml"
    config_path.write_text("title: API\nversion: 1.0.0\n", encoding="utf-8")

    exit_code = main(["build", "--config", str(config_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert f"{config_path}: routes_dir must be a string." in captured.err
    assert "Traceback" not in captured.err
