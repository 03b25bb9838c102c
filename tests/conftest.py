"""Pytest configuration for all tests."""

import heapq
import itertools
from datetime import datetime, timezone
from typing import Callable

import pytest
import structlog

from levelist.core.config import Settings
from levelist.core.logging import clear_context
from levelist.core.scheduler import CancelToken, Scheduler
from levelist.domain.entities import Game, GameStatus, Genre, Platform
from levelist.infrastructure.storage import InMemoryKeyValueStore, StoreAdapter


class FakeScheduler(Scheduler):
    """Deterministic scheduler driven by a virtual clock.

    Timers fire only when ``advance`` moves the clock past their due time,
    in due-time order (ties in scheduling order).
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, CancelToken, Callable[[], None]]] = []
        self._seq = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> CancelToken:
        token = CancelToken(delay=delay)
        token.handle = self.now + delay
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), token, callback))
        return token

    def cancel(self, token: CancelToken) -> None:
        token.cancelled = True

    @property
    def pending(self) -> int:
        return sum(1 for _, _, token, _ in self._queue if token.pending)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, token, callback = heapq.heappop(self._queue)
            self.now = due
            if token.cancelled:
                continue
            token.fired = True
            callback()
        self.now = target


class FailingStore(InMemoryKeyValueStore):
    """In-memory store whose writes fail while ``fail_writes`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = True
        self.fail_reads = False

    def read(self, key: str) -> bytes | None:
        if self.fail_reads:
            raise OSError("disk unavailable")
        return super().read(key)

    def write(self, key: str, data: bytes) -> None:
        if self.fail_writes:
            raise OSError("quota exceeded")
        super().write(key, data)


FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()
    clear_context()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def adapter(memory_store: InMemoryKeyValueStore) -> StoreAdapter:
    return StoreAdapter(memory_store)


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="testing", storage_path="./unused")


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


def make_game(**overrides) -> Game:
    fields = {
        "id": "g1",
        "title": "Hollow Knight",
        "genres": [Genre.ACTION, Genre.PLATFORMER],
        "platforms": [Platform.PC],
        "status": GameStatus.WANT_TO_PLAY,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return Game(**fields)


@pytest.fixture
def sample_games() -> list[Game]:
    return [
        make_game(
            id="g1",
            title="Ghost of Tsushima",
            genres=[Genre.ACTION, Genre.ADVENTURE],
            platforms=[Platform.PLAYSTATION_5, Platform.PC],
            status=GameStatus.COMPLETED,
            rating=9,
            hours_played=55.5,
            developer="Sucker Punch",
            publisher="Sony",
            release_date=datetime(2020, 7, 17, tzinfo=timezone.utc),
            completion_date=datetime(2024, 3, 2, tzinfo=timezone.utc),
        ),
        make_game(
            id="g2",
            title="Ghostrunner",
            genres=[Genre.ACTION, Genre.PLATFORMER],
            platforms=[Platform.PC],
            status=GameStatus.CURRENTLY_PLAYING,
            rating=7,
            hours_played=8,
            developer="One More Level",
        ),
        make_game(
            id="g3",
            title="Hades",
            genres=[Genre.ACTION, Genre.RPG, Genre.INDIE],
            platforms=[Platform.NINTENDO_SWITCH, Platform.PC],
            status=GameStatus.COMPLETED,
            rating=10,
            hours_played=70,
            description="Defy the god of the dead",
            developer="Supergiant Games",
            completion_date=datetime(2023, 11, 20, tzinfo=timezone.utc),
        ),
        make_game(
            id="g4",
            title="Stardew Valley",
            genres=[Genre.SIMULATION, Genre.INDIE],
            platforms=[Platform.NINTENDO_SWITCH],
            status=GameStatus.ON_HOLD,
        ),
    ]


@pytest.fixture
def game_factory() -> Callable[..., Game]:
    return make_game
