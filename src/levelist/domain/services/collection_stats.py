"""Collection statistics for dashboards and the ``stats`` command."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Sequence

from levelist.domain.entities import Game, GameStatus, Genre, Platform, format_timestamp


@dataclass
class CollectionStats:
    """Aggregates over a collection snapshot.

    Attributes:
        total: Number of games.
        by_status: Game count per status (every status present, possibly 0).
        total_hours: Sum of hours played over games that report it.
        average_rating: Mean rating over rated games, ``None`` when none are rated.
        completion_rate: Percentage of games with status ``completed``.
        top_genres: Most common genres with counts, most common first.
        top_platforms: Most common platforms with counts, most common first.
        recently_completed: Completed games with a completion date, newest first.
    """

    total: int = 0
    by_status: dict[GameStatus, int] = field(default_factory=dict)
    total_hours: float = 0
    average_rating: float | None = None
    completion_rate: float = 0.0
    top_genres: list[tuple[Genre, int]] = field(default_factory=list)
    top_platforms: list[tuple[Platform, int]] = field(default_factory=list)
    recently_completed: list[Game] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "byStatus": {status.value: count for status, count in self.by_status.items()},
            "totalHours": self.total_hours,
            "averageRating": self.average_rating,
            "completionRate": self.completion_rate,
            "topGenres": [[genre.value, count] for genre, count in self.top_genres],
            "topPlatforms": [[p.value, count] for p, count in self.top_platforms],
            "recentlyCompleted": [
                {"title": g.title, "completionDate": format_timestamp(g.completion_date)}
                for g in self.recently_completed
            ],
        }


def compute_statistics(games: Sequence[Game], top_n: int = 5, recent_n: int = 5) -> CollectionStats:
    total = len(games)
    by_status = {status: 0 for status in GameStatus}
    genre_counts: Counter[Genre] = Counter()
    platform_counts: Counter[Platform] = Counter()
    total_hours: float = 0
    ratings: list[float] = []

    for game in games:
        by_status[game.status] += 1
        genre_counts.update(game.genres)
        platform_counts.update(game.platforms)
        total_hours += game.hours_played or 0
        if game.rating is not None:
            ratings.append(game.rating)

    completed = [
        g for g in games if g.status == GameStatus.COMPLETED and g.completion_date is not None
    ]
    completed.sort(key=lambda g: g.completion_date, reverse=True)

    return CollectionStats(
        total=total,
        by_status=by_status,
        total_hours=total_hours,
        average_rating=round(sum(ratings) / len(ratings), 2) if ratings else None,
        completion_rate=round(by_status[GameStatus.COMPLETED] / total * 100, 1) if total else 0.0,
        top_genres=genre_counts.most_common(top_n),
        top_platforms=platform_counts.most_common(top_n),
        recently_completed=completed[:recent_n],
    )
