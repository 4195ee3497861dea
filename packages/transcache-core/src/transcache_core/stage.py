"""Caching stage in front of an expensive, deterministic transform.

For each file flowing through the pipeline the stage either passes it along
untouched (not eligible), returns a copy of the cached output (eligible and
the bytes hash the same as last time), or runs the transform once and
caches the result (eligible and new or changed bytes).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass

from transcache_core.cache.models import CacheEntry, FileSnapshot
from transcache_core.cache.store import TransformCache, compute_hash
from transcache_core.config.models import TransformOptions
from transcache_core.eligibility.resolver import EligibilitySet
from transcache_core.transform.base import Transform

logger = logging.getLogger(__name__)


@dataclass
class StageStats:
    passed_through: int = 0
    hits: int = 0
    misses: int = 0
    failures: int = 0


class CachingTransformStage:
    """Memoizes *transform* per path, validated by a SHA-256 of the contents.

    *options* are fixed for the lifetime of the stage. With
    ``key_on_options`` the options fingerprint is stored on every entry, so
    a stage with different options sharing the same *cache* never reuses
    output produced under other options.
    """

    def __init__(
        self,
        transform: Transform,
        eligible: EligibilitySet,
        cache: TransformCache,
        options: TransformOptions | None = None,
        key_on_options: bool = True,
    ) -> None:
        self._transform = transform
        self._eligible = eligible
        self._cache = cache
        self.options = options or TransformOptions()
        self._options_key = self.options.fingerprint() if key_on_options else ""
        self._lock = asyncio.Lock()
        self.stats = StageStats()

    @property
    def cache(self) -> TransformCache:
        return self._cache

    async def process(self, file: FileSnapshot) -> FileSnapshot:
        """Return the output for one file; a transform failure propagates as-is."""
        if file.relative not in self._eligible:
            self.stats.passed_through += 1
            logger.debug("passthrough %s", file.relative)
            return file

        # One transform in flight per stage; lookup and store stay paired
        # with the invocation they belong to.
        async with self._lock:
            content_hash = compute_hash(file.contents)
            entry = self._cache.lookup(file.path, content_hash, self._options_key)
            if entry is not None:
                self.stats.hits += 1
                logger.debug("hit %s (%s)", file.relative, content_hash[:12])
                return entry.transformed.clone()

            self.stats.misses += 1
            logger.debug("miss %s (%s)", file.relative, content_hash[:12])
            try:
                transformed = await self._transform(file, self.options)
            except Exception as e:
                self.stats.failures += 1
                logger.warning("Transform failed for %s: %s", file.relative, e)
                raise

            self._cache.store(
                CacheEntry(
                    path=file.path,
                    content_hash=content_hash,
                    transformed=transformed,
                    options_key=self._options_key,
                )
            )
            return transformed.clone()

    async def run(
        self, files: Iterable[FileSnapshot] | AsyncIterable[FileSnapshot]
    ) -> AsyncIterator[FileSnapshot]:
        """Process *files* one at a time, yielding outputs in input order."""
        if isinstance(files, AsyncIterable):
            async for file in files:
                yield await self.process(file)
        else:
            for file in files:
                yield await self.process(file)
