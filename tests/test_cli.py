from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from text_linkify import __version__
from text_linkify.cli import app

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_list_drives() -> None:
    result = runner.invoke(app, ["list-drives"])

    assert result.exit_code == 0
    assert "baidu" in result.output
    assert "tianyi" in result.output


def test_toggle_global_switch(tmp_path: Path) -> None:
    settings = tmp_path / "settings.toml"

    result = runner.invoke(app, ["toggle", "global-linkify", "--settings", str(settings)])

    assert result.exit_code == 0
    assert "Disabled" in result.output
    assert "tm_linkify_global_enabled = false" in settings.read_text(encoding="utf-8")


def test_site_toggle_requires_host(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["toggle", "site-drive", "--settings", str(tmp_path / "settings.toml")]
    )

    assert result.exit_code == 1


def test_status_shows_site_state(tmp_path: Path) -> None:
    settings = tmp_path / "settings.toml"
    runner.invoke(
        app, ["toggle", "site-linkify", "--host", "bbs.example.com", "--settings", str(settings)]
    )

    result = runner.invoke(
        app, ["status", "--host", "bbs.example.com", "--settings", str(settings)]
    )

    assert result.exit_code == 0
    assert "bbs.example.com" in result.output
    assert "Disabled" in result.output


def test_linkify_file(tmp_path: Path) -> None:
    source = tmp_path / "page.html"
    source.write_text("<p>see https://example.com/docs</p>", encoding="utf-8")
    output = tmp_path / "out.html"

    result = runner.invoke(
        app,
        [
            "linkify",
            str(source),
            "-o",
            str(output),
            "--settings",
            str(tmp_path / "settings.toml"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert 'href="https://example.com/docs"' in output.read_text(encoding="utf-8")


def test_linkify_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["linkify", str(tmp_path / "missing.html"), "--settings", str(tmp_path / "s.toml")],
    )

    assert result.exit_code == 1
    assert "No such file" in result.output


def test_autofill_needs_code_fragment() -> None:
    result = runner.invoke(app, ["autofill", "https://pan.baidu.com/s/1abc"])

    assert result.exit_code == 1
