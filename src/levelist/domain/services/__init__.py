"""Domain services for LevelList.

Services contain business logic that doesn't naturally fit within a single entity.
"""

from levelist.domain.services.collection_filters import (
    FilterOptions,
    SortField,
    SortOrder,
    filter_games,
)
from levelist.domain.services.collection_stats import CollectionStats, compute_statistics
from levelist.domain.services.game_validator import GameValidator
from levelist.domain.services.search_index import (
    SearchHistory,
    SearchIndex,
    SearchSuggestion,
    SuggestionType,
)
from levelist.domain.services.transcoder import (
    ExportFormat,
    ExportOptions,
    ExportResult,
    ImportResult,
    Transcoder,
)

__all__ = [
    "CollectionStats",
    "ExportFormat",
    "ExportOptions",
    "ExportResult",
    "FilterOptions",
    "GameValidator",
    "ImportResult",
    "SearchHistory",
    "SearchIndex",
    "SearchSuggestion",
    "SortField",
    "SortOrder",
    "SuggestionType",
    "Transcoder",
    "compute_statistics",
    "filter_games",
]
