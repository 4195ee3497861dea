from .loader import PluginLoader, PluginNotFoundError, build_transform

__all__ = ["PluginLoader", "PluginNotFoundError", "build_transform"]
