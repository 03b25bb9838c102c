"""Domain entities for LevelList.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from levelist.domain.entities.candidate_record import CandidateRecord
from levelist.domain.entities.game import (
    DATE_FIELDS,
    RATING_MAX,
    RATING_MIN,
    WIRE_FIELDS,
    Game,
    GameStatus,
    Genre,
    Platform,
    format_timestamp,
    parse_timestamp,
    utcnow,
)

__all__ = [
    "CandidateRecord",
    "DATE_FIELDS",
    "Game",
    "GameStatus",
    "Genre",
    "Platform",
    "RATING_MAX",
    "RATING_MIN",
    "WIRE_FIELDS",
    "format_timestamp",
    "parse_timestamp",
    "utcnow",
]
