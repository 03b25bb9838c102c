"""Unit tests for GameValidator."""

from datetime import datetime, timezone

import pytest

from levelist.core.exceptions import ItemValidationError
from levelist.domain.entities import CandidateRecord, GameStatus, Genre, Platform
from levelist.domain.services import GameValidator


def record(**data) -> CandidateRecord:
    base = {"title": "Celeste", "genres": ["platformer"], "platforms": ["pc"]}
    base.update(data)
    return CandidateRecord(data=base, source="json", position=1)


class TestValidateFields:
    """Test suite for single-field validators."""

    def test_title_required(self):
        value, error = GameValidator.validate_title("   ")
        assert value is None
        assert error.code == "required"

    def test_title_is_stripped(self):
        assert GameValidator.validate_title("  Celeste ") == ("Celeste", None)

    def test_choices_accept_comma_string_and_dedupe(self):
        chosen, errors = GameValidator.validate_choices("rpg, Action,rpg", Genre, "genres")
        assert chosen == [Genre.RPG, Genre.ACTION]
        assert errors == []

    def test_choices_accept_member_names(self):
        chosen, errors = GameValidator.validate_choices(["PLAYSTATION_5"], Platform, "platforms")
        assert chosen == [Platform.PLAYSTATION_5]
        assert errors == []

    def test_choices_reject_unknown_values(self):
        chosen, errors = GameValidator.validate_choices(["rpg", "mmo"], Genre, "genres")
        assert chosen == [Genre.RPG]
        assert errors[0].code == "invalid_choice"
        assert "mmo" in errors[0].message

    def test_choices_require_one_value(self):
        _, errors = GameValidator.validate_choices([], Genre, "genres")
        assert errors[0].code == "required"

    def test_status_defaults_when_blank(self):
        assert GameValidator.validate_status("") == (GameStatus.WANT_TO_PLAY, None)
        assert GameValidator.validate_status("Completed") == (GameStatus.COMPLETED, None)

    @pytest.mark.parametrize("value", [0, 11, "12", 10.5])
    def test_rating_out_of_range_is_rejected_not_clamped(self, value):
        rating, error = GameValidator.validate_rating(value)
        assert rating is None
        assert error.code == "out_of_range"

    @pytest.mark.parametrize("value, expected", [("7", 7), (7.0, 7), (8.5, 8.5), (None, None)])
    def test_rating_coercion(self, value, expected):
        assert GameValidator.validate_rating(value) == (expected, None)

    def test_rating_rejects_booleans_and_text(self):
        assert GameValidator.validate_rating(True)[1].code == "invalid_number"
        assert GameValidator.validate_rating("great")[1].code == "invalid_number"

    def test_hours_must_be_non_negative(self):
        assert GameValidator.validate_hours("-2")[1].code == "out_of_range"
        assert GameValidator.validate_hours("0") == (0, None)

    def test_url_requires_http_scheme(self):
        assert GameValidator.validate_url("ftp://x.org/a.png", "coverImageUrl")[1].code == (
            "invalid_url_format"
        )
        assert GameValidator.validate_url("https://x.org/a.png", "coverImageUrl") == (
            "https://x.org/a.png",
            None,
        )

    def test_datetime_parsing(self):
        value, error = GameValidator.validate_datetime("2024-01-02", "startDate")
        assert error is None
        assert value == datetime(2024, 1, 2, tzinfo=timezone.utc)
        assert GameValidator.validate_datetime("soon", "startDate")[1].code == (
            "invalid_datetime_format"
        )


class TestValidateRecord:
    """Test suite for whole-record validation."""

    def test_returns_game_arguments(self):
        fields = GameValidator.validate(record(rating="9", hoursPlayed=3, developer="Maddy Makes Games"))
        assert fields["title"] == "Celeste"
        assert fields["genres"] == [Genre.PLATFORMER]
        assert fields["platforms"] == [Platform.PC]
        assert fields["rating"] == 9
        assert fields["hours_played"] == 3
        assert fields["developer"] == "Maddy Makes Games"
        assert fields["status"] == GameStatus.WANT_TO_PLAY
        assert "id" not in fields

    def test_collects_every_error(self):
        with pytest.raises(ItemValidationError) as exc_info:
            GameValidator.validate(record(title="", genres=[], rating=42))
        fields = {e.field for e in exc_info.value.errors}
        assert fields == {"title", "genres", "rating"}
        assert "Unknown title" in str(exc_info.value)

    def test_hydrate_keeps_id_and_timestamps(self):
        game = GameValidator.hydrate(
            record(
                id="abc",
                createdAt="2024-01-01T00:00:00Z",
                updatedAt="2024-02-01T00:00:00Z",
            )
        )
        assert game.id == "abc"
        assert game.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert game.updated_at == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_hydrate_repairs_updated_before_created(self):
        game = GameValidator.hydrate(
            record(id="abc", createdAt="2024-02-01T00:00:00Z", updatedAt="2024-01-01T00:00:00Z")
        )
        assert game.updated_at == game.created_at

    def test_hydrate_requires_id(self):
        with pytest.raises(ItemValidationError) as exc_info:
            GameValidator.hydrate(record())
        assert exc_info.value.errors[0].field == "id"
