"""Collection controller.

Owns the canonical list of games and wires the collaborators together:
validation on every mutation, the autosave engine for persistence, the
search index over the live list and the transcoder for file import/export.

Mutations replace the list rather than editing it in place, so a snapshot
handed to the autosave engine never changes underneath it.
"""

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from levelist.application.services.autosave_engine import AutosaveEngine, SaveStatus
from levelist.application.services.notifications import (
    Notification,
    NotificationLevel,
    Notifier,
    deliver,
)
from levelist.core.config import Settings, get_settings
from levelist.core.exceptions import ItemNotFoundError, ItemValidationError, StorageError
from levelist.core.logging import bind_session_id, get_logger
from levelist.core.scheduler import Scheduler
from levelist.domain.entities import CandidateRecord, Game, GameStatus, Genre, Platform, utcnow
from levelist.domain.services.collection_filters import FilterOptions, filter_games
from levelist.domain.services.collection_stats import CollectionStats, compute_statistics
from levelist.domain.services.game_validator import GameValidator
from levelist.domain.services.search_index import SearchHistory, SearchIndex
from levelist.domain.services.transcoder import (
    ExportFormat,
    ExportOptions,
    ExportResult,
    ImportResult,
    Transcoder,
)
from levelist.infrastructure.storage.store_adapter import StoreAdapter

logger = get_logger(__name__)


@dataclass
class GameDraft:
    """Form input for creating or editing a game.

    Values are loosely typed (enum values or their string forms, date strings
    or datetimes); ``GameValidator`` decides what is acceptable.
    """

    title: str
    genres: list[Genre | str] = field(default_factory=list)
    platforms: list[Platform | str] = field(default_factory=list)
    status: GameStatus | str = GameStatus.WANT_TO_PLAY
    rating: float | str | None = None
    hours_played: float | str | None = None
    description: str | None = None
    notes: str | None = None
    developer: str | None = None
    publisher: str | None = None
    cover_image_url: str | None = None
    release_date: datetime | str | None = None
    start_date: datetime | str | None = None
    completion_date: datetime | str | None = None

    @classmethod
    def from_game(cls, game: Game) -> "GameDraft":
        """Prefill a draft from an existing game (edit form)."""
        return cls(
            title=game.title,
            genres=list(game.genres),
            platforms=list(game.platforms),
            status=game.status,
            rating=game.rating,
            hours_played=game.hours_played,
            description=game.description,
            notes=game.notes,
            developer=game.developer,
            publisher=game.publisher,
            cover_image_url=game.cover_image_url,
            release_date=game.release_date,
            start_date=game.start_date,
            completion_date=game.completion_date,
        )

    def to_record(self) -> CandidateRecord:
        data: dict[str, Any] = {
            "title": self.title,
            "genres": list(self.genres),
            "platforms": list(self.platforms),
            "status": self.status,
            "rating": self.rating,
            "hoursPlayed": self.hours_played,
            "description": self.description,
            "notes": self.notes,
            "developer": self.developer,
            "publisher": self.publisher,
            "coverImageUrl": self.cover_image_url,
            "releaseDate": self.release_date,
            "startDate": self.start_date,
            "completionDate": self.completion_date,
        }
        return CandidateRecord(data=data, source="form", position=1)


def _new_id() -> str:
    return uuid.uuid4().hex


class CollectionController:
    """Application entry point for working with one game collection.

    Example:
        controller = CollectionController(StoreAdapter(store), AsyncioScheduler())
        controller.load()
        controller.start()
        game = controller.add_item(GameDraft(title="Hades", genres=["rpg"], platforms=["pc"]))
        controller.close()   # flushes the pending write, cancels timers
    """

    def __init__(
        self,
        store: StoreAdapter,
        scheduler: Scheduler,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = _new_id,
        on_status_change: Callable[[SaveStatus], None] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self._notifier = notifier
        self._clock = clock
        self._id_factory = id_factory
        self._games: list[Game] = []
        self._loaded = False
        self._closed = False

        self.session_id = uuid.uuid4().hex[:12]
        bind_session_id(self.session_id)

        self.autosave = AutosaveEngine(
            store,
            self.settings.collection_key,
            scheduler,
            debounce_seconds=self.settings.autosave_debounce_seconds,
            interval_seconds=self.settings.autosave_interval_seconds,
            saved_reset_seconds=self.settings.saved_status_reset_seconds,
            notifier=notifier,
            on_status_change=on_status_change,
            clock=clock,
        )
        self.history = SearchHistory(
            store, self.settings.history_key, max_items=self.settings.max_history_items
        )
        self.search = SearchIndex(
            lambda: self._games,
            scheduler,
            self.history,
            debounce_seconds=self.settings.search_debounce_seconds,
            history_idle_seconds=self.settings.search_history_idle_seconds,
            max_suggestions=self.settings.max_suggestions,
            recent_suggestions=self.settings.recent_suggestions,
        )
        self.transcoder = Transcoder(
            app_version=self.settings.app_version,
            base_name=self.settings.export_base_name,
            clock=clock,
            id_factory=id_factory,
        )

    @property
    def items(self) -> list[Game]:
        """The current collection in insertion order."""
        return list(self._games)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def closed(self) -> bool:
        return self._closed

    def load(self) -> list[Game]:
        """Read the stored collection and search history.

        A storage failure or malformed content leaves an empty collection.
        Individual stored records that fail validation are skipped.
        """
        games: list[Game] = []
        try:
            raw = self.store.load_json(self.settings.collection_key, default=[])
        except StorageError as e:
            logger.error("Failed to load collection", error=str(e))
            self._notify(NotificationLevel.ERROR, "Load Failed", "Failed to load games")
            raw = []

        if not isinstance(raw, list):
            logger.error("Stored collection is not a list", type=type(raw).__name__)
            self._notify(NotificationLevel.ERROR, "Load Failed", "Failed to load games")
            raw = []

        seen_ids: set[str] = set()
        skipped = 0
        for position, entry in enumerate(raw, start=1):
            record = CandidateRecord.from_raw(entry, source="storage", position=position)
            try:
                game = GameValidator.hydrate(record)
            except ItemValidationError as e:
                skipped += 1
                logger.warning("Skipping invalid stored game", position=position, error=str(e))
                continue
            if game.id in seen_ids:
                skipped += 1
                logger.warning("Skipping duplicate stored id", game_id=game.id)
                continue
            seen_ids.add(game.id)
            games.append(game)

        self._games = games
        self._loaded = True
        self.history.load()
        logger.info("Collection loaded", item_count=len(games), skipped=skipped)
        return self.items

    def start(self) -> None:
        """Start the background autosave interval."""
        self.autosave.start()

    def get_item(self, item_id: str) -> Game | None:
        for game in self._games:
            if game.id == item_id:
                return game
        return None

    def require_item(self, item_id: str) -> Game:
        game = self.get_item(item_id)
        if game is None:
            raise ItemNotFoundError(item_id)
        return game

    def add_item(self, draft: GameDraft) -> Game:
        """Validate ``draft`` and append it as a new game.

        Raises:
            ItemValidationError: If the draft is invalid.
        """
        fields = GameValidator.validate(draft.to_record())
        now = self._clock()
        game = Game(id=self._unique_id(), created_at=now, updated_at=now, **fields)
        self._replace_games([*self._games, game])
        logger.info("Game added", game_id=game.id, title=game.title)
        self._notify(
            NotificationLevel.SUCCESS,
            "Game added!",
            f"{game.title} has been added to your collection.",
        )
        return game

    def update_item(self, item_id: str, draft: GameDraft) -> Game:
        """Replace every editable field of an existing game.

        Raises:
            ItemNotFoundError: If no game has ``item_id``.
            ItemValidationError: If the draft is invalid.
        """
        existing = self.require_item(item_id)
        fields = GameValidator.validate(draft.to_record())
        updated = existing.touched(self._clock(), **fields)
        self._swap(updated)
        logger.info("Game updated", game_id=item_id)
        self._notify(NotificationLevel.SUCCESS, "Game updated!", f"{updated.title} has been updated.")
        return updated

    def set_status(self, item_id: str, status: GameStatus | str) -> Game:
        existing = self.require_item(item_id)
        new_status, error = GameValidator.validate_status(status)
        if error:
            raise ItemValidationError([error], title=existing.title)
        if new_status is existing.status:
            return existing
        updated = existing.touched(self._clock(), status=new_status)
        self._swap(updated)
        logger.info("Game status changed", game_id=item_id, status=new_status.value)
        return updated

    def delete_item(self, item_id: str) -> Game:
        existing = self.require_item(item_id)
        self._replace_games([g for g in self._games if g.id != item_id])
        logger.info("Game deleted", game_id=item_id)
        self._notify(
            NotificationLevel.SUCCESS,
            "Game deleted",
            f"{existing.title} has been removed from your collection.",
        )
        return existing

    def import_file(self, content: str, format: ExportFormat | str) -> ImportResult:
        """Import games from file content and append the accepted ones."""
        result = self.transcoder.import_games(content, format, self._games)
        if result.imported:
            self._replace_games([*self._games, *result.imported])
        if result.success:
            self._notify(NotificationLevel.SUCCESS, "Import complete", result.summary)
        else:
            self._notify(NotificationLevel.ERROR, "Import failed", result.summary)
        return result

    def export(self, options: ExportOptions | None = None) -> ExportResult:
        result = self.transcoder.export_games(self._games, options or ExportOptions())
        if not result.success:
            self._notify(NotificationLevel.ERROR, "Export failed", result.error or "Export failed")
        return result

    def statistics(self) -> CollectionStats:
        return compute_statistics(self._games)

    def filter_items(self, options: FilterOptions | None = None, term: str | None = None) -> list[Game]:
        """Library view: facets and sort over the collection.

        ``term`` defaults to the search index's committed query.
        """
        if term is None:
            term = self.search.committed_query
        return filter_games(self._games, options or FilterOptions(), term)

    def flush(self) -> bool:
        return self.autosave.flush()

    def close(self, flush_pending: bool = True) -> None:
        """Stop timers. With ``flush_pending`` any unsaved snapshot is written first."""
        if self._closed:
            return
        if flush_pending and self.autosave.has_unsaved_changes:
            self.autosave.flush()
        self.autosave.close()
        self.search.close()
        self._closed = True
        logger.info("Collection closed", item_count=len(self._games))

    def __enter__(self) -> "CollectionController":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _unique_id(self) -> str:
        taken = {g.id for g in self._games}
        item_id = self._id_factory()
        while item_id in taken:
            item_id = self._id_factory()
        return item_id

    def _swap(self, updated: Game) -> None:
        self._replace_games([updated if g.id == updated.id else g for g in self._games])

    def _replace_games(self, games: Sequence[Game]) -> None:
        self._games = list(games)
        self.autosave.save(self._games)

    def _notify(self, level: NotificationLevel, title: str, message: str) -> None:
        deliver(self._notifier, Notification(level=level, title=title, message=message))
