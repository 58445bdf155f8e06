"""Debounced and superseding asyncio task handles."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestSupersededError(Exception):
    """Raised to the caller of a request replaced by a newer one."""


@dataclass
class Debouncer:
    """Runs an action after a quiet period; rescheduling a key resets it.

    Only the most recently scheduled action for a key fires. Once an action
    has started it is no longer cancelled by new schedules.
    """

    delay_seconds: float
    _pending: dict[str, asyncio.Task[None]] = field(default_factory=dict, init=False)

    def schedule(
        self, key: str, action: Callable[[], Awaitable[None]]
    ) -> asyncio.Task[None]:
        """Schedule ``action`` for ``key``, cancelling the pending one."""
        self.cancel(key)
        task = asyncio.get_running_loop().create_task(self._fire(key, action))
        self._pending[key] = task
        return task

    def cancel(self, key: str) -> bool:
        """Cancel the pending action for ``key``; return True if one existed."""
        task = self._pending.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._pending):
            self.cancel(key)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def _fire(self, key: str, action: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay_seconds)
        if self._pending.get(key) is asyncio.current_task():
            del self._pending[key]
        try:
            await action()
        except Exception:
            _logger.exception("Debounced action failed", extra={"key": key})


@dataclass
class _InFlight:
    task: asyncio.Future
    superseded: bool = False


@dataclass
class SupersedingRunner:
    """One in-flight request per stream; a newer request cancels the older."""

    _streams: dict[str, _InFlight] = field(default_factory=dict, init=False)

    async def run(self, stream: str, factory: Callable[[], Awaitable[T]]) -> T:
        previous = self._streams.get(stream)
        if previous is not None and not previous.task.done():
            previous.superseded = True
            previous.task.cancel()
        current = _InFlight(task=asyncio.ensure_future(factory()))
        self._streams[stream] = current
        try:
            return await current.task
        except asyncio.CancelledError:
            if current.superseded:
                raise RequestSupersededError(stream) from None
            raise
        finally:
            if self._streams.get(stream) is current:
                del self._streams[stream]

    def in_flight(self, stream: str) -> bool:
        return stream in self._streams
