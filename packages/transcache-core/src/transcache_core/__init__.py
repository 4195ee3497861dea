"""transcache core - content-addressed cache in front of a source transform."""

from transcache_core.cache import CacheEntry, FileSnapshot, TransformCache, compute_hash
from transcache_core.config import TranscacheConfig, TransformOptions, load_config
from transcache_core.eligibility import EligibilityError, EligibilitySet
from transcache_core.plugins import PluginLoader, build_transform
from transcache_core.stage import CachingTransformStage, StageStats
from transcache_core.transform import Transform, TransformError

__version__ = "0.1.0"

__all__ = [
    "CacheEntry",
    "CachingTransformStage",
    "EligibilityError",
    "EligibilitySet",
    "FileSnapshot",
    "PluginLoader",
    "StageStats",
    "TranscacheConfig",
    "Transform",
    "TransformCache",
    "TransformError",
    "TransformOptions",
    "build_transform",
    "compute_hash",
    "load_config",
]
