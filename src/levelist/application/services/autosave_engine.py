"""Debounced autosave of full collection snapshots.

State machine::

    idle -> saving -> saved -> idle
            saving -> error -> idle

``saved`` reverts to ``idle`` after a short cosmetic delay. ``error`` keeps
the failure cause in ``last_error`` until the next successful save.

Writes are triggered by the debounce timer (after ``save``), by the
background interval, or by an explicit ``flush``. Failures never propagate
to the caller; they become the ``error`` state plus a retryable
notification, and the snapshot stays buffered for the next attempt.
"""

from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from typing import Any

from levelist.application.services.notifications import (
    Notification,
    NotificationLevel,
    Notifier,
    deliver,
)
from levelist.core.logging import get_logger
from levelist.core.scheduler import Scheduler, TimerSlot
from levelist.domain.entities import Game, utcnow
from levelist.infrastructure.storage.store_adapter import StoreAdapter

logger = get_logger(__name__)

SAVE_FAILED_TITLE = "Save Failed"
SAVE_FAILED_MESSAGE = "Your changes could not be saved. Please try again."


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


def serialize_games(snapshot: Sequence[Game]) -> list[dict[str, Any]]:
    return [game.to_dict() for game in snapshot]


class AutosaveEngine:
    """Persists the latest collection snapshot without blocking mutation.

    Example:
        engine = AutosaveEngine(adapter, "levelist-games", AsyncioScheduler())
        with engine:                 # starts the interval, cancels timers on exit
            engine.save(games)       # debounced
    """

    def __init__(
        self,
        store: StoreAdapter,
        key: str,
        scheduler: Scheduler,
        debounce_seconds: float = 1.0,
        interval_seconds: float = 30.0,
        saved_reset_seconds: float = 2.0,
        notifier: Notifier | None = None,
        on_status_change: Callable[[SaveStatus], None] | None = None,
        serializer: Callable[[Sequence[Game]], Any] = serialize_games,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.key = key
        self.debounce_seconds = debounce_seconds
        self.interval_seconds = interval_seconds
        self.saved_reset_seconds = saved_reset_seconds
        self._notifier = notifier
        self._on_status_change = on_status_change
        self._serializer = serializer
        self._clock = clock

        self._debounce = TimerSlot(scheduler, name="autosave-debounce")
        self._interval = TimerSlot(scheduler, name="autosave-interval")
        self._status_reset = TimerSlot(scheduler, name="autosave-status-reset")

        self._snapshot: Sequence[Game] | None = None
        self._revision = 0
        self._saved_revision = 0
        self._status = SaveStatus.IDLE
        self._last_saved: datetime | None = None
        self._last_error: str | None = None
        self._write_count = 0
        self._closed = False

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def last_saved(self) -> datetime | None:
        return self._last_saved

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def is_saving(self) -> bool:
        return self._status is SaveStatus.SAVING

    @property
    def has_error(self) -> bool:
        return self._status is SaveStatus.ERROR

    @property
    def has_pending(self) -> bool:
        """True while a debounced write is waiting to fire."""
        return self._debounce.armed

    @property
    def has_unsaved_changes(self) -> bool:
        """True while the latest snapshot has not been written successfully."""
        return self._revision != self._saved_revision

    @property
    def write_count(self) -> int:
        """Number of successful writes since construction."""
        return self._write_count

    @property
    def closed(self) -> bool:
        return self._closed

    def save(self, snapshot: Sequence[Game]) -> None:
        """Record ``snapshot`` as the latest state and restart the debounce timer."""
        self._snapshot = snapshot
        self._revision += 1
        if self._closed:
            logger.debug("Autosave closed, snapshot buffered without write")
            return
        if self._status is SaveStatus.ERROR:
            self._set_status(SaveStatus.IDLE)
        self._debounce.arm(self.debounce_seconds, self._on_debounce)

    def start(self) -> None:
        """Start the background interval flush."""
        if self._closed or self._interval.armed:
            return
        self._interval.arm(self.interval_seconds, self._on_interval)
        logger.debug("Autosave interval started", interval_seconds=self.interval_seconds)

    def flush(self) -> bool:
        """Write the buffered snapshot now.

        Returns:
            True if a write happened and succeeded.
        """
        self._debounce.disarm()
        return self._write("explicit")

    def close(self) -> None:
        """Cancel every pending timer. No write happens after this returns."""
        self._debounce.disarm()
        self._interval.disarm()
        self._status_reset.disarm()
        self._closed = True
        logger.debug("Autosave closed")

    def __enter__(self) -> "AutosaveEngine":
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    async def __aenter__(self) -> "AutosaveEngine":
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        self.close()

    def _on_debounce(self) -> None:
        if self._status is SaveStatus.SAVING:
            # A write is in flight; the new snapshot waits for the next attempt.
            self._debounce.arm(self.debounce_seconds, self._on_debounce)
            return
        self._write("debounce")

    def _on_interval(self) -> None:
        if self._closed:
            return
        self._interval.arm(self.interval_seconds, self._on_interval)
        if self._snapshot is not None and self._status is not SaveStatus.SAVING:
            self._write("interval")

    def _write(self, trigger: str) -> bool:
        if self._snapshot is None or self._closed:
            return False
        if self._status is SaveStatus.SAVING:
            return False

        snapshot = self._snapshot
        revision = self._revision
        self._status_reset.disarm()
        if self._status is SaveStatus.ERROR:
            self._set_status(SaveStatus.IDLE)
        self._set_status(SaveStatus.SAVING)
        try:
            size = self.store.save_json(self.key, self._serializer(snapshot))
        except Exception as e:
            self._last_error = str(e) or "Failed to save"
            self._set_status(SaveStatus.ERROR)
            logger.error(
                "Autosave failed",
                key=self.key,
                trigger=trigger,
                item_count=len(snapshot),
                error=self._last_error,
            )
            deliver(
                self._notifier,
                Notification(
                    level=NotificationLevel.ERROR,
                    title=SAVE_FAILED_TITLE,
                    message=SAVE_FAILED_MESSAGE,
                    retryable=True,
                ),
            )
            return False

        self._write_count += 1
        self._saved_revision = revision
        self._last_saved = self._clock()
        self._last_error = None
        self._set_status(SaveStatus.SAVED)
        logger.info(
            "Collection saved",
            key=self.key,
            trigger=trigger,
            item_count=len(snapshot),
            size=size,
        )
        if not self._closed:
            self._status_reset.arm(self.saved_reset_seconds, self._reset_to_idle)
        return True

    def _reset_to_idle(self) -> None:
        if self._status is SaveStatus.SAVED:
            self._set_status(SaveStatus.IDLE)

    def _set_status(self, status: SaveStatus) -> None:
        if status is self._status:
            return
        self._status = status
        if self._on_status_change is None:
            return
        try:
            self._on_status_change(status)
        except Exception:
            logger.exception("Autosave status listener failed", status=status.value)
