"""Game entity - one entry of a personal game collection.

Games are the unit the rest of the core moves around: the controller mutates
them, the autosave engine persists full lists of them, the transcoder
converts them to and from files and the search index ranks them.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

RATING_MIN = 1
RATING_MAX = 10


class GameStatus(str, Enum):
    """Lifecycle state of a game in the collection."""

    WANT_TO_PLAY = "want_to_play"
    CURRENTLY_PLAYING = "currently_playing"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DROPPED = "dropped"


class Platform(str, Enum):
    """Platforms a game can be tagged with."""

    PC = "pc"
    PLAYSTATION_5 = "ps5"
    PLAYSTATION_4 = "ps4"
    XBOX_SERIES = "xbox_series"
    XBOX_ONE = "xbox_one"
    NINTENDO_SWITCH = "nintendo_switch"
    MOBILE = "mobile"
    VR = "vr"


class Genre(str, Enum):
    """Closed genre vocabulary used for categorising games."""

    ACTION = "action"
    ADVENTURE = "adventure"
    RPG = "rpg"
    STRATEGY = "strategy"
    SIMULATION = "simulation"
    SPORTS = "sports"
    RACING = "racing"
    FIGHTING = "fighting"
    SHOOTER = "shooter"
    PUZZLE = "puzzle"
    HORROR = "horror"
    PLATFORMER = "platformer"
    INDIE = "indie"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime | None) -> str | None:
    """Render a timestamp as ISO 8601 UTC with a ``Z`` suffix."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO 8601 string (or pass through a datetime) as an aware UTC datetime.

    Raises:
        ValueError: If the value is not a datetime or an ISO 8601 string.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Expected ISO 8601 timestamp, got {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# Wire name -> attribute name, in export order.
WIRE_FIELDS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "genres": "genres",
    "platforms": "platforms",
    "status": "status",
    "rating": "rating",
    "hoursPlayed": "hours_played",
    "completionDate": "completion_date",
    "startDate": "start_date",
    "notes": "notes",
    "coverImageUrl": "cover_image_url",
    "releaseDate": "release_date",
    "developer": "developer",
    "publisher": "publisher",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

DATE_FIELDS = frozenset(
    {"completion_date", "start_date", "release_date", "created_at", "updated_at"}
)


@dataclass
class Game:
    """A single game in the collection.

    Attributes:
        id: Opaque identifier, unique within the collection and never reassigned.
        title: Display title (non-empty).
        genres: Genre tags (at least one).
        platforms: Platform tags (at least one).
        status: Current lifecycle state.
        rating: Optional personal rating between 1 and 10.
        hours_played: Optional non-negative play time in hours.
        created_at: When the game entered the collection.
        updated_at: Last mutation time, never earlier than ``created_at``.
    """

    id: str
    title: str
    genres: list[Genre]
    platforms: list[Platform]
    status: GameStatus = GameStatus.WANT_TO_PLAY
    rating: int | float | None = None
    hours_played: int | float | None = None
    description: str | None = None
    notes: str | None = None
    developer: str | None = None
    publisher: str | None = None
    cover_image_url: str | None = None
    release_date: datetime | None = None
    start_date: datetime | None = None
    completion_date: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        """Validate game data after initialization."""
        if not self.id:
            raise ValueError("Game ID is required")
        if not self.title or not self.title.strip():
            raise ValueError("Game title is required")
        if not self.genres:
            raise ValueError("At least one genre is required")
        if not self.platforms:
            raise ValueError("At least one platform is required")
        if self.rating is not None and not RATING_MIN <= self.rating <= RATING_MAX:
            raise ValueError(f"Rating must be between {RATING_MIN} and {RATING_MAX}")
        if self.hours_played is not None and self.hours_played < 0:
            raise ValueError("Hours played cannot be negative")
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be earlier than created_at")

    def touched(self, now: datetime | None = None, **changes: Any) -> "Game":
        """Return a copy with ``changes`` applied and a fresh ``updated_at``.

        ``id`` and ``created_at`` are preserved.
        """
        changes.pop("id", None)
        changes.pop("created_at", None)
        stamp = max(now or utcnow(), self.created_at)
        return replace(self, updated_at=stamp, **changes)

    def has_platform(self, platform: Platform) -> bool:
        return platform in self.platforms

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape, omitting absent values."""
        data: dict[str, Any] = {}
        for wire_name, attr in WIRE_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if attr in DATE_FIELDS:
                value = format_timestamp(value)
            elif attr in ("genres", "platforms"):
                value = [v.value for v in value]
            elif attr == "status":
                value = value.value
            data[wire_name] = value
        return data
