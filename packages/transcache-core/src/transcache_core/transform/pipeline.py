"""PluginTransform: runs ordered text plugins on a file's contents."""

from __future__ import annotations

from abc import ABC, abstractmethod

from transcache_core.cache.models import FileSnapshot
from transcache_core.config.models import TransformOptions
from transcache_core.transform.base import TransformError


class TextPlugin(ABC):
    name: str = ""

    def enabled(self, options: TransformOptions) -> bool:
        """Whether this plugin runs for the given options."""
        return True

    @abstractmethod
    def apply(self, text: str, options: TransformOptions) -> str:
        """Transform source text."""
        ...


class PluginTransform:
    def __init__(self, plugins: list[TextPlugin]):
        self.plugins = plugins

    def active(self, options: TransformOptions) -> list[TextPlugin]:
        return [p for p in self.plugins if p.enabled(options)]

    def apply(self, text: str, options: TransformOptions) -> str:
        for plugin in self.active(options):
            text = plugin.apply(text, options)
        return text

    async def __call__(
        self, file: FileSnapshot, options: TransformOptions
    ) -> FileSnapshot:
        try:
            text = file.contents.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TransformError(file.path, "contents are not valid UTF-8", e) from e
        return file.with_contents(self.apply(text, options).encode("utf-8"))
