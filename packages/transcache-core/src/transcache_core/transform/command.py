"""External command transform: contents on stdin, transformed contents on stdout."""

from __future__ import annotations

import asyncio
import logging
import os

from transcache_core.cache.models import FileSnapshot
from transcache_core.config.models import TransformOptions
from transcache_core.transform.base import TransformError

logger = logging.getLogger(__name__)

_STDERR_TAIL = 500


def options_env(options: TransformOptions) -> dict[str, str]:
    """TRANSCACHE_* variables describing the options, "1" or "0"."""
    return {
        f"TRANSCACHE_{name.upper()}": "1" if value else "0"
        for name, value in options.model_dump().items()
    }


async def _reap(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
    await proc.wait()


class CommandTransform:
    """Runs *argv* once per file.

    ``{path}`` and ``{relative}`` in argv are replaced with the file's
    absolute and relative path. A non-zero exit is a transform failure.
    """

    def __init__(self, argv: list[str], timeout: float | None = None) -> None:
        if not argv:
            raise ValueError("argv must not be empty")
        self.argv = list(argv)
        self.timeout = timeout

    def _command(self, file: FileSnapshot) -> list[str]:
        return [
            arg.replace("{path}", file.path).replace("{relative}", file.relative)
            for arg in self.argv
        ]

    async def __call__(
        self, file: FileSnapshot, options: TransformOptions
    ) -> FileSnapshot:
        cmd = self._command(file)
        env = {**os.environ, **options_env(options)}
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except FileNotFoundError as e:
            raise TransformError(file.path, f"command not found: {cmd[0]}", e) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(file.contents), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            await _reap(proc)
            raise TransformError(
                file.path, f"command timed out after {self.timeout}s", e
            ) from e
        except BaseException:
            # Cancelled or interrupted: never leave the child running
            await _reap(proc)
            raise

        if proc.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace")[-_STDERR_TAIL:].strip()
            logger.debug("%s exited %d for %s", cmd[0], proc.returncode, file.path)
            raise TransformError(file.path, f"{cmd[0]} exited {proc.returncode}: {tail}")

        return file.with_contents(stdout)
