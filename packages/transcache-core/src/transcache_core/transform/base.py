"""Transform contract shared by every transform implementation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from transcache_core.cache.models import FileSnapshot
from transcache_core.config.models import TransformOptions


class TransformError(Exception):
    """A bundled transform could not produce output for a file."""

    def __init__(self, path: str, message: str, cause: Exception | None = None) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")
        if cause is not None:
            self.__cause__ = cause


@runtime_checkable
class Transform(Protocol):
    """Deterministic, possibly failing ``(file, options) -> file`` function.

    Completes with the transformed file or raises. Never called twice
    concurrently by one stage.
    """

    async def __call__(
        self, file: FileSnapshot, options: TransformOptions
    ) -> FileSnapshot: ...
