"""Bridge for event-style transforms that report through success/failure callbacks."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable

from transcache_core.cache.models import FileSnapshot
from transcache_core.config.models import TransformOptions

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[FileSnapshot], None]
FailureCallback = Callable[[BaseException], None]
Submit = Callable[[FileSnapshot, TransformOptions, SuccessCallback, FailureCallback], None]


class _Invocation:
    """One listener pair bound to one future.

    Whichever callback fires first settles the future and detaches both;
    anything arriving after that is dropped.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, path: str) -> None:
        self._loop = loop
        self._path = path
        self._lock = threading.Lock()
        self._settled = False
        self.future: asyncio.Future[FileSnapshot] = loop.create_future()

    def _detach(self, kind: str) -> bool:
        with self._lock:
            if self._settled:
                logger.warning(
                    "Dropping late %s notification for %s", kind, self._path
                )
                return False
            self._settled = True
            return True

    def on_success(self, file: FileSnapshot) -> None:
        if self._detach("success"):
            self._loop.call_soon_threadsafe(self._resolve, file, None)

    def on_failure(self, error: BaseException) -> None:
        if self._detach("failure"):
            self._loop.call_soon_threadsafe(self._resolve, None, error)

    def _resolve(self, file: FileSnapshot | None, error: BaseException | None) -> None:
        if self.future.done():
            return
        if error is not None:
            self.future.set_exception(error)
        else:
            self.future.set_result(file)


class CallbackTransform:
    """Adapts ``submit(file, options, on_success, on_failure)`` to an awaitable.

    *submit* must eventually call exactly one of the callbacks, from any
    thread. Each call gets fresh callbacks, so a notification can never be
    attributed to another file.
    """

    def __init__(self, submit: Submit) -> None:
        self._submit = submit

    async def __call__(
        self, file: FileSnapshot, options: TransformOptions
    ) -> FileSnapshot:
        invocation = _Invocation(asyncio.get_running_loop(), file.path)
        try:
            self._submit(file, options, invocation.on_success, invocation.on_failure)
        except Exception as e:
            invocation.on_failure(e)
        return await invocation.future
