from .loader import load_config
from .models import (
    CacheConfig,
    EligibilityConfig,
    OutputConfig,
    TranscacheConfig,
    TransformConfig,
    TransformOptions,
)

__all__ = [
    "CacheConfig",
    "EligibilityConfig",
    "OutputConfig",
    "TranscacheConfig",
    "TransformConfig",
    "TransformOptions",
    "load_config",
]
