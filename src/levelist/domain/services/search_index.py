"""Debounced search over the game collection.

The index stages the raw query typed by the user and commits it after a
quiet period; filtering and ranking only ever use the committed query while
suggestions follow the raw query so they update on every keystroke.

Query history is kept most-recent-first, capped, and persisted under its
own storage key so it survives across sessions.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from levelist.core.exceptions import StorageError
from levelist.core.logging import get_logger
from levelist.core.scheduler import Scheduler, TimerSlot
from levelist.domain.entities import Game, GameStatus, Genre

if TYPE_CHECKING:
    from levelist.infrastructure.storage.store_adapter import StoreAdapter

logger = get_logger(__name__)

MIN_SUGGESTION_QUERY = 2
MIN_HISTORY_QUERY = 3


class SuggestionType(str, Enum):
    TITLE = "title"
    DEVELOPER = "developer"
    GENRE = "genre"
    RECENT = "recent"


@dataclass
class SearchSuggestion:
    """An autocomplete candidate.

    ``count`` is set for developer and genre suggestions (number of games),
    ``game`` for title suggestions.
    """

    type: SuggestionType
    value: str
    count: int | None = None
    game: Game | None = None


def matches_query(game: Game, query: str) -> bool:
    """Case-insensitive substring match on title, description, developer or genres."""
    needle = query.casefold()
    if not needle:
        return True
    haystacks = [game.title, game.description or "", game.developer or ""]
    haystacks.extend(g.value for g in game.genres)
    return any(needle in text.casefold() for text in haystacks)


def rank_key(game: Game, query: str) -> tuple[int, str, str]:
    """Exact title match first, then title prefix, then the rest; alphabetical within a tier."""
    needle = query.casefold()
    title = game.title.casefold()
    if title == needle:
        tier = 0
    elif title.startswith(needle):
        tier = 1
    else:
        tier = 2
    return tier, title, game.title


class SearchHistory:
    """Capped, most-recent-first list of committed queries.

    Storage failures are logged and never raised; the in-memory list stays
    usable for the rest of the session.
    """

    def __init__(self, store: "StoreAdapter", key: str, max_items: int = 10) -> None:
        self._store = store
        self.key = key
        self.max_items = max_items
        self._entries: list[str] = []

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def load(self) -> list[str]:
        try:
            raw: Any = self._store.load_json(self.key, default=[])
        except StorageError as e:
            logger.warning("Failed to load search history", key=self.key, error=str(e))
            raw = []
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed search history", key=self.key)
            raw = []
        entries: list[str] = []
        for term in raw:
            if isinstance(term, str) and term.strip() and term not in entries:
                entries.append(term)
        self._entries = entries[: self.max_items]
        return self.entries

    def add(self, term: str) -> bool:
        """Insert ``term`` at the front, moving it there if already present.

        Returns:
            False when the term is blank, True otherwise.
        """
        term = term.strip()
        if not term:
            return False
        if self._entries and self._entries[0] == term:
            return True
        self._entries = [term] + [t for t in self._entries if t != term]
        del self._entries[self.max_items :]
        self._persist()
        return True

    def clear(self) -> None:
        self._entries = []
        try:
            self._store.remove(self.key)
        except StorageError as e:
            logger.warning("Failed to clear search history", key=self.key, error=str(e))

    def _persist(self) -> None:
        try:
            self._store.save_json(self.key, self._entries)
        except StorageError as e:
            logger.warning("Failed to save search history", key=self.key, error=str(e))


class SearchIndex:
    """Filters, ranks and suggests over the current collection.

    The collection is read through ``games_provider`` each time results or
    suggestions are requested, so the index never holds a stale snapshot.

    Example:
        index = SearchIndex(lambda: controller.items, scheduler, history)
        index.set_query("ghost")      # debounced
        index.suggestions()           # follows the raw query immediately
        index.results(status=GameStatus.COMPLETED)
    """

    def __init__(
        self,
        games_provider: Callable[[], Sequence[Game]],
        scheduler: Scheduler,
        history: SearchHistory,
        debounce_seconds: float = 0.3,
        history_idle_seconds: float = 2.0,
        max_suggestions: int = 8,
        recent_suggestions: int = 5,
        on_change: Callable[["SearchIndex"], None] | None = None,
    ) -> None:
        self._games_provider = games_provider
        self.history = history
        self.debounce_seconds = debounce_seconds
        self.history_idle_seconds = history_idle_seconds
        self.max_suggestions = max_suggestions
        self.recent_suggestions = recent_suggestions
        self._on_change = on_change
        self._debounce = TimerSlot(scheduler, name="search-debounce")
        self._history_idle = TimerSlot(scheduler, name="search-history")
        self._query = ""
        self._committed = ""
        self._searching = False
        self._closed = False

    @property
    def query(self) -> str:
        """The raw, staged query."""
        return self._query

    @property
    def committed_query(self) -> str:
        return self._committed

    @property
    def searching(self) -> bool:
        """True while a raw query change waits for the debounce to commit it."""
        return self._searching

    @property
    def closed(self) -> bool:
        return self._closed

    def set_query(self, term: str) -> None:
        if self._closed:
            logger.warning("Ignoring query on closed search index")
            return
        self._query = term
        if term == self._committed:
            self._debounce.disarm()
            self._searching = False
        else:
            self._searching = True
            self._debounce.arm(self.debounce_seconds, self._commit)

        if term.strip() and len(term) >= MIN_HISTORY_QUERY:
            self._history_idle.arm(self.history_idle_seconds, lambda: self.history.add(term))
        else:
            self._history_idle.disarm()
        self._notify()

    def commit_query(self) -> None:
        """Commit the staged query now instead of waiting for the debounce."""
        self._debounce.disarm()
        self._commit()

    def _commit(self) -> None:
        self._committed = self._query
        self._searching = False
        logger.debug("Search query committed", query=self._committed)
        self._notify()

    def clear_search(self) -> None:
        self._debounce.disarm()
        self._history_idle.disarm()
        self._query = ""
        self._committed = ""
        self._searching = False
        self._notify()

    def add_to_history(self, term: str) -> bool:
        return self.history.add(term)

    def clear_history(self) -> None:
        self.history.clear()
        self._notify()

    def select_suggestion(self, suggestion: SearchSuggestion) -> None:
        self.set_query(suggestion.value)
        self._history_idle.disarm()
        self.history.add(suggestion.value)

    def results(
        self, status: GameStatus | None = None, genre: Genre | None = None
    ) -> list[Game]:
        """Games matching the committed query and the optional filters.

        With a non-empty committed query the result is ranked; otherwise the
        collection order is kept.
        """
        query = self._committed
        matched = [
            game
            for game in self._games_provider()
            if (status is None or game.status == status)
            and (genre is None or genre in game.genres)
            and matches_query(game, query)
        ]
        if query:
            matched.sort(key=lambda game: rank_key(game, query))
        return matched

    def suggestions(self) -> list[SearchSuggestion]:
        term = self._query
        if len(term) < MIN_SUGGESTION_QUERY:
            return [
                SearchSuggestion(type=SuggestionType.RECENT, value=entry)
                for entry in self.history.entries[: self.recent_suggestions]
            ]

        needle = term.casefold()
        games = list(self._games_provider())
        seen: set[str] = set()
        result: list[SearchSuggestion] = []

        for game in games:
            key = game.title.casefold()
            if needle in key and key not in seen:
                seen.add(key)
                result.append(SearchSuggestion(type=SuggestionType.TITLE, value=game.title, game=game))

        developers: dict[str, SearchSuggestion] = {}
        for game in games:
            if not game.developer:
                continue
            key = game.developer.casefold()
            if needle not in key or key in seen:
                continue
            if key in developers:
                developers[key].count = (developers[key].count or 0) + 1
            else:
                developers[key] = SearchSuggestion(
                    type=SuggestionType.DEVELOPER, value=game.developer, count=1
                )
        seen.update(developers)
        result.extend(developers.values())

        genre_counts: dict[Genre, int] = {}
        for game in games:
            for genre in game.genres:
                genre_counts[genre] = genre_counts.get(genre, 0) + 1
        for genre, count in genre_counts.items():
            key = genre.value.casefold()
            if needle in key and key not in seen:
                seen.add(key)
                result.append(SearchSuggestion(type=SuggestionType.GENRE, value=genre.value, count=count))

        return result[: self.max_suggestions]

    def close(self) -> None:
        """Cancel pending timers; the index accepts no further queries."""
        self._debounce.disarm()
        self._history_idle.disarm()
        self._closed = True

    def __enter__(self) -> "SearchIndex":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self)
        except Exception:
            logger.exception("Search change listener failed")
