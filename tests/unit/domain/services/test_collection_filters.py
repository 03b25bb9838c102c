"""Unit tests for library filtering and sorting."""

from datetime import datetime, timezone

import pytest

from levelist.domain.entities import GameStatus, Genre, Platform
from levelist.domain.services import FilterOptions, SortField, SortOrder, filter_games


def titles(games):
    return [g.title for g in games]


class TestFilterGames:
    """Test suite for filter_games."""

    def test_default_sorts_by_title(self, sample_games):
        assert titles(filter_games(sample_games, FilterOptions())) == [
            "Ghost of Tsushima",
            "Ghostrunner",
            "Hades",
            "Stardew Valley",
        ]

    def test_term_matches_publisher_and_platform(self, sample_games):
        assert titles(filter_games(sample_games, FilterOptions(), term="sony")) == [
            "Ghost of Tsushima"
        ]
        assert titles(filter_games(sample_games, FilterOptions(), term="nintendo")) == [
            "Hades",
            "Stardew Valley",
        ]

    def test_facets_match_any_value(self, sample_games):
        options = FilterOptions(genres=[Genre.RPG, Genre.SIMULATION])
        assert titles(filter_games(sample_games, options)) == ["Hades", "Stardew Valley"]

        options = FilterOptions(
            platforms=[Platform.PC], statuses=[GameStatus.COMPLETED, GameStatus.ON_HOLD]
        )
        assert titles(filter_games(sample_games, options)) == ["Ghost of Tsushima", "Hades"]

    def test_rating_bounds_exclude_unrated(self, sample_games):
        options = FilterOptions(min_rating=1)
        assert "Stardew Valley" not in titles(filter_games(sample_games, options))

        options = FilterOptions(min_rating=8, max_rating=9)
        assert titles(filter_games(sample_games, options)) == ["Ghost of Tsushima"]

    @pytest.mark.parametrize(
        "sort_by, order, expected",
        [
            (SortField.RATING, SortOrder.DESC, ["Hades", "Ghost of Tsushima", "Ghostrunner", "Stardew Valley"]),
            (SortField.HOURS_PLAYED, SortOrder.ASC, ["Stardew Valley", "Ghostrunner", "Ghost of Tsushima", "Hades"]),
            (SortField.COMPLETION_DATE, SortOrder.DESC, ["Ghost of Tsushima", "Hades", "Ghostrunner", "Stardew Valley"]),
        ],
    )
    def test_sorting(self, sample_games, sort_by, order, expected):
        options = FilterOptions(sort_by=sort_by, sort_order=order)
        assert titles(filter_games(sample_games, options)) == expected

    def test_date_added_sort(self, sample_games, game_factory):
        newer = game_factory(
            id="g9",
            title="Balatro",
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            updated_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )
        options = FilterOptions(sort_by=SortField.DATE_ADDED, sort_order=SortOrder.DESC)
        assert filter_games([*sample_games, newer], options)[0].title == "Balatro"

    def test_input_is_not_mutated(self, sample_games):
        original = list(sample_games)
        filter_games(sample_games, FilterOptions(sort_order=SortOrder.DESC))
        assert sample_games == original
