"""Shared test fixtures for transcache."""

from __future__ import annotations

from pathlib import Path

import pytest

from transcache_core.cache import FileSnapshot, TransformCache
from transcache_core.config.models import TransformOptions


class RecordingTransform:
    """Appends a prime marker to the contents and records every call."""

    def __init__(self) -> None:
        self.calls: list[FileSnapshot] = []
        self.fail_on: set[bytes] = set()

    async def __call__(self, file: FileSnapshot, options: TransformOptions) -> FileSnapshot:
        self.calls.append(file)
        if file.contents in self.fail_on:
            raise SyntaxError(f"unexpected token in {file.relative}")
        return file.with_contents(file.contents + b"'")


@pytest.fixture
def recording_transform():
    return RecordingTransform()


@pytest.fixture
def cache():
    return TransformCache()


@pytest.fixture
def default_options():
    return TransformOptions()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small source tree with src, vendored and dependency files."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.js").write_text("const x = __TEST_BUILD__;\n")
    (tmp_path / "src" / "util").mkdir()
    (tmp_path / "src" / "util" / "b.js").write_bytes(b"export const b = 1;\r\n")
    (tmp_path / "src" / "README.md").write_text("# src")
    (tmp_path / "third_party").mkdir()
    (tmp_path / "third_party" / "vendored.js").write_text("var v = 1;\n")
    (tmp_path / "third_party" / "other.js").write_text("var o = 1;\n")
    (tmp_path / "node_modules" / "dep").mkdir(parents=True)
    (tmp_path / "node_modules" / "dep" / "index.js").write_text("module.exports = 1;\n")
    return tmp_path
