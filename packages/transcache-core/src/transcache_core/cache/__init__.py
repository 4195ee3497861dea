"""Content-addressed cache of transformed files."""

from transcache_core.cache.models import CacheEntry, FileSnapshot
from transcache_core.cache.store import CacheStats, TransformCache, compute_hash

__all__ = [
    "CacheEntry",
    "CacheStats",
    "FileSnapshot",
    "TransformCache",
    "compute_hash",
]
