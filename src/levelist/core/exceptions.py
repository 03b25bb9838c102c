"""Exceptions raised across the LevelList core."""

from dataclasses import dataclass


class LevelListError(Exception):
    """Base class for all LevelList errors."""
    pass


@dataclass
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str
    code: str


class ItemValidationError(LevelListError):
    """Raised when a game record is missing required fields or holds invalid values."""

    def __init__(self, errors: list[FieldError], title: str | None = None):
        self.errors = errors
        self.title = title
        details = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Invalid game data: {title or 'Unknown title'} ({details})")


class ParseError(LevelListError):
    """Raised when a file's top-level structure cannot be parsed."""
    pass


class StorageError(LevelListError):
    """Raised when the underlying key-value store fails to read or write."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(f"{message} (key '{key}')" if key is not None else message)


class ItemNotFoundError(LevelListError):
    """Raised when a game id is not present in the collection."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Game '{item_id}' not found")
