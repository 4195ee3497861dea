"""Transform plugin discovery via bundled names and entry points."""

from __future__ import annotations

import importlib.metadata
from typing import TYPE_CHECKING

from transcache_core.transform.base import Transform
from transcache_core.transform.command import CommandTransform
from transcache_core.transform.pipeline import PluginTransform, TextPlugin
from transcache_core.transform.plugins import BUILTIN_PLUGINS

if TYPE_CHECKING:
    from transcache_core.config.models import TransformConfig


class PluginNotFoundError(Exception):
    """Raised when a requested plugin cannot be found."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No transform plugin found with name '{name}'")


class PluginLoader:
    """Resolves plugin names: bundled plugins first, then entry points."""

    GROUP = "transcache.plugins.transform"

    def discover(self) -> list[str]:
        """All plugin names available to a config, bundled ones first."""
        eps = importlib.metadata.entry_points(group=self.GROUP)
        extra = sorted(ep.name for ep in eps if ep.name not in BUILTIN_PLUGINS)
        return list(BUILTIN_PLUGINS) + extra

    def _load_from_entry_point(self, name: str) -> type[TextPlugin] | None:
        eps = importlib.metadata.entry_points(group=self.GROUP)
        for ep in eps:
            if ep.name == name:
                return ep.load()
        return None

    def load(self, name: str) -> TextPlugin:
        plugin_cls = BUILTIN_PLUGINS.get(name) or self._load_from_entry_point(name)
        if plugin_cls is None:
            raise PluginNotFoundError(name)
        return plugin_cls()

    def load_all(self, names: list[str]) -> list[TextPlugin]:
        return [self.load(name) for name in names]


def build_transform(config: TransformConfig, loader: PluginLoader | None = None) -> Transform:
    """The configured transform: an external command if set, else the plugin pipeline."""
    if config.command:
        return CommandTransform(config.command, timeout=config.timeout)
    loader = loader or PluginLoader()
    return PluginTransform(loader.load_all(config.plugins))
