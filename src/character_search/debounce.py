"""Timer-based coalescing of repeated calls on the asyncio event loop."""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class DebouncedCall:
    """Delay ``work`` until ``delay_ms`` have passed since the last call.

    Each call cancels the pending timer (if any) and arms a new one. When a
    timer elapses, ``work`` runs once with the arguments of the call that
    armed it. Coroutine functions are started as tasks; the latest task is
    kept so callers can await it with :meth:`wait`.
    """

    def __init__(self, work: Callable[..., Any], delay_ms: int):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self.work = work
        self.delay_ms = delay_ms
        self._handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[Any] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._armed: asyncio.Event | None = None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        if self._armed is None:
            self._armed = asyncio.Event()
        self._armed.clear()
        self._handle = loop.call_later(self.delay_ms / 1000, self._fire, args, kwargs)

    @property
    def pending(self) -> bool:
        """Whether a timer is armed and has not fired yet."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        """Whether any started execution is still in progress."""
        return any(not task.done() for task in self._tasks)

    def cancel(self) -> None:
        """Disarm the pending timer without running ``work``."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._armed is not None:
            self._armed.set()

    async def aclose(self) -> None:
        """Disarm the timer, then cancel and await every execution still running."""
        self.cancel()
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def wait(self) -> None:
        """Wait for the pending timer to fire and its execution to finish."""
        while self._handle is not None and self._armed is not None:
            await self._armed.wait()
        if self._task is not None and not self._task.done():
            await asyncio.shield(self._task)

    def _fire(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        self._handle = None
        try:
            result = self.work(*args, **kwargs)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(self._run(result))
                self._task = task
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
        except Exception:
            logger.exception(f"Debounced call to {self._name} failed")
        finally:
            if self._armed is not None:
                self._armed.set()

    async def _run(self, awaitable: Awaitable[Any]) -> None:
        try:
            await awaitable
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Debounced call to {self._name} failed")

    @property
    def _name(self) -> str:
        return getattr(self.work, "__qualname__", repr(self.work))


def schedule(work: Callable[..., Any], delay_ms: int) -> DebouncedCall:
    """Bind ``work`` to a debounce timer of ``delay_ms`` milliseconds."""
    return DebouncedCall(work, delay_ms)
