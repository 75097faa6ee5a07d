"""Cancellable repeating task on the asyncio event loop."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

_logger = logging.getLogger(__name__)


class RepeatingTask:
    """Run a synchronous *callback* every *interval* seconds.

    One asyncio task drives the schedule, so the callback is never re-entered.
    Deadlines are computed from the loop clock, so a slow callback shortens
    the next sleep instead of shifting the whole schedule. A callback that
    raises is logged and the schedule keeps going.
    """

    def __init__(self, callback: Callable[[], object], interval: float, *, name: str = "repeating-task") -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._callback = callback
        self._interval = interval
        self._name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start on the running loop. Starting a running task is a no-op."""
        if self.is_running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(loop), name=self._name)
        _logger.debug("%s started (%.3fs interval)", self._name, self._interval)

    def cancel(self) -> None:
        """Stop the schedule. Cancelling a stopped task is a no-op."""
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            _logger.debug("%s cancelled", self._name)

    async def wait_cancelled(self) -> None:
        """Cancel and wait for the underlying task to finish."""
        task = self._task
        self.cancel()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self, loop: asyncio.AbstractEventLoop) -> None:
        deadline = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            try:
                self._callback()
            except Exception:
                _logger.exception("%s callback failed", self._name)
            deadline += self._interval
            now = loop.time()
            if deadline < now:
                # Fell behind by more than one interval; skip missed runs.
                deadline = now + self._interval
