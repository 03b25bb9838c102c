"""Unit tests for the error taxonomy."""

from levelist.core.exceptions import (
    FieldError,
    ItemNotFoundError,
    ItemValidationError,
    LevelListError,
    ParseError,
    StorageError,
)


def test_validation_error_lists_fields():
    error = ItemValidationError(
        [
            FieldError(field="title", message="Title is required", code="required"),
            FieldError(field="rating", message="Rating must be between 1 and 10", code="out_of_range"),
        ]
    )
    assert isinstance(error, LevelListError)
    assert str(error) == (
        "Invalid game data: Unknown title "
        "(title: Title is required; rating: Rating must be between 1 and 10)"
    )
    assert [e.code for e in error.errors] == ["required", "out_of_range"]


def test_storage_error_includes_key():
    assert str(StorageError("Failed to write", key="levelist-games")) == (
        "Failed to write (key 'levelist-games')"
    )
    assert StorageError("boom").key is None


def test_not_found_and_parse_errors():
    assert str(ItemNotFoundError("abc")) == "Game 'abc' not found"
    assert isinstance(ParseError("bad"), LevelListError)
