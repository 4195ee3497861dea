"""Data models for the transform cache."""

from __future__ import annotations

import copy
import dataclasses
import os
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any

_SHA256_RE = re.compile(r"[a-f0-9]{64}")


@dataclass(frozen=True)
class FileSnapshot:
    """A file's identity and bytes, either as read or as produced by a transform.

    ``path`` is the absolute path and identifies the file in the cache.
    ``relative`` is the path below ``base`` and is what eligibility is
    matched against. ``metadata`` carries per-file attributes a transform may
    attach (a source map, for example); it is the only mutable part, which is
    why handing a cached snapshot downstream always goes through ``clone()``.
    """

    path: str
    base: str
    contents: bytes
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_path(cls, path: str | Path, base: str | Path) -> FileSnapshot:
        """Read a file from disk."""
        p = Path(path).resolve()
        return cls(path=str(p), base=str(Path(base).resolve()), contents=p.read_bytes())

    @property
    def relative(self) -> str:
        # Files outside base get a "../" path, which no eligible set contains
        return PurePath(os.path.relpath(self.path, self.base)).as_posix()

    def clone(self) -> FileSnapshot:
        """Return an independent logical copy."""
        return dataclasses.replace(self, metadata=copy.deepcopy(self.metadata))

    def with_contents(self, contents: bytes) -> FileSnapshot:
        return dataclasses.replace(
            self, contents=contents, metadata=copy.deepcopy(self.metadata)
        )


@dataclass(frozen=True)
class CacheEntry:
    """Transformed output for one path, valid only for one content hash."""

    path: str
    content_hash: str
    transformed: FileSnapshot
    options_key: str = ""

    def __post_init__(self) -> None:
        if not _SHA256_RE.fullmatch(self.content_hash):
            raise ValueError(
                f"content_hash must be 64-char sha256 hex, got {self.content_hash!r}"
            )
