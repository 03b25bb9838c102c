"""Timer scheduling for debounce and interval work.

Both the autosave engine and the search index express their timers through
the ``Scheduler`` interface so that they run on the application's event loop
in production and on a virtual clock in tests.

Example:
    scheduler = AsyncioScheduler()
    slot = TimerSlot(scheduler)
    slot.arm(1.0, flush)   # (re)start a one-shot timer
    slot.disarm()          # cancel it if still pending
"""

import asyncio
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable

_token_ids = itertools.count(1)


@dataclass(eq=False)
class CancelToken:
    """Handle for a scheduled callback.

    Attributes:
        id: Monotonic identifier, unique per process.
        delay: Delay in seconds the callback was scheduled with.
        handle: Scheduler-specific handle (e.g. ``asyncio.TimerHandle``).
        cancelled: Whether ``cancel`` was called for this token.
        fired: Whether the callback has started running.
    """

    delay: float
    handle: Any = None
    id: int = field(default_factory=lambda: next(_token_ids))
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class Scheduler(ABC):
    """Abstract one-shot timer scheduler."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> CancelToken:
        """Run ``callback`` once after ``delay`` seconds."""
        ...

    @abstractmethod
    def cancel(self, token: CancelToken) -> None:
        """Cancel a pending callback. Cancelling twice or after firing is a no-op."""
        ...


class AsyncioScheduler(Scheduler):
    """Scheduler backed by ``loop.call_later`` on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> CancelToken:
        token = CancelToken(delay=delay)

        def _run() -> None:
            if token.cancelled:
                return
            token.fired = True
            callback()

        token.handle = self.loop.call_later(max(0.0, delay), _run)
        return token

    def cancel(self, token: CancelToken) -> None:
        if not token.pending:
            return
        token.cancelled = True
        if token.handle is not None:
            token.handle.cancel()


class TimerSlot:
    """Holds at most one pending timer.

    Arming a slot cancels the timer it already holds, which is exactly the
    debounce behaviour: only the last ``arm`` within the window fires.
    """

    def __init__(self, scheduler: Scheduler, name: str = "timer") -> None:
        self._scheduler = scheduler
        self._token: CancelToken | None = None
        self.name = name

    @property
    def armed(self) -> bool:
        return self._token is not None and self._token.pending

    def arm(self, delay: float, callback: Callable[[], None]) -> CancelToken:
        self.disarm()

        def _fire() -> None:
            self._token = None
            callback()

        self._token = self._scheduler.schedule(delay, _fire)
        return self._token

    def disarm(self) -> None:
        if self._token is not None:
            self._scheduler.cancel(self._token)
            self._token = None

    def __enter__(self) -> "TimerSlot":
        return self

    def __exit__(self, *args: Any) -> None:
        self.disarm()
