"""In-process transform cache keyed by path, validated by content hash.

Not persistent: one TransformCache lives for one pipeline execution and is
handed explicitly to every stage that shares it.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from transcache_core.cache.models import CacheEntry


def compute_hash(content: bytes) -> str:
    """Full SHA-256 hex digest of the exact bytes."""
    return hashlib.sha256(content).hexdigest()


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    stores: int = 0
    replacements: int = 0


class TransformCache:
    """Path -> CacheEntry, at most one entry per path."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self.stats = CacheStats()

    def get(self, path: str) -> CacheEntry | None:
        """Return the entry for *path* regardless of its hash."""
        return self._entries.get(path)

    def lookup(
        self, path: str, content_hash: str, options_key: str = ""
    ) -> CacheEntry | None:
        """Return the entry only if it was produced from the same bytes and options."""
        entry = self._entries.get(path)
        if (
            entry is not None
            and entry.content_hash == content_hash
            and entry.options_key == options_key
        ):
            self.stats.hits += 1
            return entry
        self.stats.misses += 1
        return None

    def store(self, entry: CacheEntry) -> None:
        """Insert or replace the entry for ``entry.path``."""
        if entry.path in self._entries:
            self.stats.replacements += 1
        self._entries[entry.path] = entry
        self.stats.stores += 1

    def paths(self) -> list[str]:
        return sorted(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.stats = CacheStats()

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)
