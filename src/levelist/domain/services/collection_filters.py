"""Faceted filtering and sorting of the collection (library view)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Sequence

from levelist.domain.entities import Game, GameStatus, Genre, Platform

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SortField(str, Enum):
    TITLE = "title"
    DATE_ADDED = "date_added"
    RATING = "rating"
    HOURS_PLAYED = "hours_played"
    COMPLETION_DATE = "completion_date"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class FilterOptions:
    """Facets for the library view.

    Each list facet keeps games matching any listed value; an empty list
    disables the facet. A rating bound excludes unrated games.
    """

    genres: list[Genre] = field(default_factory=list)
    platforms: list[Platform] = field(default_factory=list)
    statuses: list[GameStatus] = field(default_factory=list)
    min_rating: float | None = None
    max_rating: float | None = None
    sort_by: SortField = SortField.TITLE
    sort_order: SortOrder = SortOrder.ASC


def _matches_term(game: Game, term: str) -> bool:
    fields = [game.title, game.developer or "", game.publisher or ""]
    fields.extend(g.value for g in game.genres)
    fields.extend(p.value for p in game.platforms)
    return any(term in value.casefold() for value in fields)


def _sort_key(sort_by: SortField) -> Any:
    if sort_by is SortField.TITLE:
        return lambda g: (g.title.casefold(), g.title)
    if sort_by is SortField.DATE_ADDED:
        return lambda g: g.created_at
    if sort_by is SortField.RATING:
        return lambda g: g.rating or 0
    if sort_by is SortField.HOURS_PLAYED:
        return lambda g: g.hours_played or 0
    return lambda g: g.completion_date or _EPOCH


def filter_games(games: Sequence[Game], options: FilterOptions, term: str = "") -> list[Game]:
    """Apply the free-text term and facets, then sort."""
    result = list(games)

    needle = term.strip().casefold()
    if needle:
        result = [g for g in result if _matches_term(g, needle)]
    if options.genres:
        result = [g for g in result if any(genre in g.genres for genre in options.genres)]
    if options.platforms:
        result = [g for g in result if any(p in g.platforms for p in options.platforms)]
    if options.statuses:
        result = [g for g in result if g.status in options.statuses]
    if options.min_rating is not None:
        result = [g for g in result if g.rating is not None and g.rating >= options.min_rating]
    if options.max_rating is not None:
        result = [g for g in result if g.rating is not None and g.rating <= options.max_rating]

    result.sort(key=_sort_key(options.sort_by), reverse=options.sort_order is SortOrder.DESC)
    return result
