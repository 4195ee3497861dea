"""Tests for the transcache CLI (eligible, build, config)."""

from __future__ import annotations

import re
import sys
from pathlib import Path

import yaml
from typer.testing import CliRunner

from transcache.cli import app

runner = CliRunner()


def _write_config(root: Path, **overrides) -> Path:
    """Write a transcache.yaml under *root* and return its path."""
    data = {
        "eligibility": {
            "include": ["src/**/*.js"],
            "always_include": ["third_party/vendored.js"],
            "exclude": ["node_modules/", "third_party/"],
            "sources": ["src/**/*", "third_party/**/*.js"],
        },
    }
    data.update(overrides)
    path = root / "transcache.yaml"
    path.write_text(yaml.dump(data))
    return path


# ── transcache eligible ──────────────────────────────────────────────


def test_eligible_lists_files(project: Path):
    cfg = _write_config(project)

    result = runner.invoke(app, ["--config", str(cfg), "eligible", str(project)])

    assert result.exit_code == 0
    assert "Eligible files (3)" in result.output
    assert "src/a.js" in result.output
    assert "third_party/vendored.js" in result.output
    assert "other.js" not in result.output


def test_eligible_missing_root(tmp_path: Path):
    cfg = _write_config(tmp_path)

    result = runner.invoke(app, ["--config", str(cfg), "eligible", str(tmp_path / "nope")])

    assert result.exit_code == 1
    assert "cannot enumerate" in result.output


# ── transcache build ─────────────────────────────────────────────────


def test_build_writes_transformed_and_passthrough(project: Path):
    cfg = _write_config(project)
    out = project / "out"

    result = runner.invoke(
        app, ["--config", str(cfg), "build", str(project), "--out", str(out)]
    )

    assert result.exit_code == 0, result.output
    # defines plugin inlined the constant
    assert (out / "src" / "a.js").read_text() == "const x = false;\n"
    # newlines plugin normalized CRLF
    assert (out / "src" / "util" / "b.js").read_bytes() == b"export const b = 1;\n"
    # ineligible files are copied byte-for-byte
    assert (out / "src" / "README.md").read_text() == "# src"
    assert (out / "third_party" / "other.js").read_text() == "var o = 1;\n"
    assert not (out / "node_modules").exists()


def test_build_fortesting_flag(project: Path):
    cfg = _write_config(project)
    out = project / "out"

    result = runner.invoke(
        app, ["--config", str(cfg), "build", str(project), "--out", str(out), "--fortesting"]
    )

    assert result.exit_code == 0, result.output
    assert (out / "src" / "a.js").read_text() == "const x = true;\n"


def test_build_repeated_passes_hit_cache(project: Path):
    cfg = _write_config(project)

    result = runner.invoke(
        app,
        ["--config", str(cfg), "build", str(project), "--out", str(project / "out"), "--passes", "2"],
    )

    assert result.exit_code == 0, result.output
    assert "Transform cache (3 entries)" in result.output
    rows = [re.findall(r"\d+", line) for line in result.output.splitlines()]
    # pass, passthrough, hits, misses
    assert ["1", "2", "0", "3"] in rows
    assert ["2", "2", "3", "0"] in rows


def test_build_transform_failure_exits(project: Path):
    script = "import sys; sys.stderr.write('SyntaxError: boom'); sys.exit(1)"
    cfg = _write_config(project, transform={"command": [sys.executable, "-c", script]})

    result = runner.invoke(
        app, ["--config", str(cfg), "build", str(project), "--out", str(project / "out")]
    )

    assert result.exit_code == 1
    assert "Transform failed" in result.output
    assert "boom" in result.output


def test_build_output_error_is_not_a_transform_failure(project: Path):
    cfg = _write_config(project)
    out = project / "out.txt"
    out.write_text("not a directory")

    result = runner.invoke(app, ["--config", str(cfg), "build", str(project), "--out", str(out)])

    assert result.exit_code == 1
    assert "Cannot write output" in result.output
    assert "Transform failed" not in result.output


def test_build_unknown_plugin(project: Path):
    cfg = _write_config(project, transform={"plugins": ["nope"]})

    result = runner.invoke(
        app, ["--config", str(cfg), "build", str(project), "--out", str(project / "out")]
    )

    assert result.exit_code == 1
    assert "No transform plugin found" in result.output


def test_build_does_not_read_its_own_output(project: Path):
    cfg = _write_config(project, eligibility={
        "include": ["**/*.js"],
        "exclude": ["node_modules/", "third_party/"],
        "sources": ["**/*.js"],
    })
    out = project / "src" / "build"

    first = runner.invoke(app, ["--config", str(cfg), "build", str(project), "--out", str(out)])
    second = runner.invoke(app, ["--config", str(cfg), "build", str(project), "--out", str(out)])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert not (out / "src" / "build").exists()


# ── transcache config ────────────────────────────────────────────────


def test_config_init_and_show(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 0
    assert (tmp_path / "transcache.yaml").is_file()

    again = runner.invoke(app, ["config", "init"])
    assert again.exit_code == 1
    assert "already exists" in again.output

    shown = runner.invoke(app, ["config", "show"])
    assert shown.exit_code == 0
    assert "key_on_options" in shown.output


def test_invalid_config_exits(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("log_level: loud\n")

    result = runner.invoke(app, ["--config", str(path), "config", "show"])

    assert result.exit_code == 1
    assert "Invalid config" in result.output
