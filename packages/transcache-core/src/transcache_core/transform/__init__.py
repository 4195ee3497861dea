"""Transform implementations that sit behind the caching stage."""

from .base import Transform, TransformError
from .callback import CallbackTransform
from .command import CommandTransform
from .pipeline import PluginTransform, TextPlugin
from .plugins import BUILTIN_PLUGINS, DefineInliner, ForTestingStripper, NewlineNormalizer

__all__ = [
    "BUILTIN_PLUGINS",
    "CallbackTransform",
    "CommandTransform",
    "DefineInliner",
    "ForTestingStripper",
    "NewlineNormalizer",
    "PluginTransform",
    "TextPlugin",
    "Transform",
    "TransformError",
]
