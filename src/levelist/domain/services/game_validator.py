"""Game validation service.

Checks candidate records (from drafts, imported files or stored snapshots)
and converts them into the strictly typed field values a ``Game`` needs.
Every check collects a ``FieldError`` instead of stopping at the first one.
"""

import math
import re
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

from levelist.core.exceptions import FieldError, ItemValidationError
from levelist.domain.entities import (
    RATING_MAX,
    RATING_MIN,
    CandidateRecord,
    Game,
    GameStatus,
    Genre,
    Platform,
    parse_timestamp,
)

# URL validation pattern (simplified)
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)

TEXT_FIELDS = {
    "description": "description",
    "notes": "notes",
    "developer": "developer",
    "publisher": "publisher",
}

OPTIONAL_DATE_FIELDS = {
    "releaseDate": "release_date",
    "startDate": "start_date",
    "completionDate": "completion_date",
}

E = TypeVar("E", bound=Enum)


def _lookup_enum(enum_cls: type[E], value: Any) -> E | None:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    needle = value.strip().lower()
    for member in enum_cls:
        if member.value == needle or member.name.lower() == needle:
            return member
    return None


def _coerce_number(value: Any) -> int | float:
    """Convert a JSON number or numeric string, preferring ``int`` for whole values."""
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = int(text)
        except ValueError:
            number = float(text)
    else:
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if isinstance(number, float):
        if not math.isfinite(number):
            raise ValueError("number must be finite")
        if number.is_integer():
            return int(number)
    return number


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class GameValidator:
    """Validator for game records keyed by wire field names.

    Validates required fields, the closed vocabularies, numeric bounds and
    date formats, and returns ``Game`` constructor arguments.
    """

    @classmethod
    def validate_title(cls, value: Any) -> tuple[str | None, FieldError | None]:
        if _is_blank(value):
            return None, FieldError(field="title", message="Title is required", code="required")
        if not isinstance(value, str):
            return None, FieldError(
                field="title",
                message=f"Expected text value, got {type(value).__name__}",
                code="invalid_type",
            )
        return value.strip(), None

    @classmethod
    def validate_choices(
        cls, value: Any, enum_cls: type[E], field_name: str
    ) -> tuple[list[E], list[FieldError]]:
        """Validate a multi-valued vocabulary field.

        Accepts a list of values or a comma-separated string. Duplicates are
        collapsed while keeping the first occurrence order.
        """
        if isinstance(value, str):
            raw_values: list[Any] = [part for part in value.split(",") if part.strip()]
        elif isinstance(value, (list, tuple)):
            raw_values = list(value)
        elif value is None:
            raw_values = []
        else:
            return [], [
                FieldError(
                    field=field_name,
                    message=f"Expected a list, got {type(value).__name__}",
                    code="invalid_type",
                )
            ]

        chosen: list[E] = []
        errors: list[FieldError] = []
        for raw in raw_values:
            member = _lookup_enum(enum_cls, raw)
            if member is None:
                errors.append(
                    FieldError(
                        field=field_name,
                        message=f"Unknown value '{raw}'",
                        code="invalid_choice",
                    )
                )
            elif member not in chosen:
                chosen.append(member)

        if not chosen and not errors:
            errors.append(
                FieldError(
                    field=field_name,
                    message=f"At least one value is required for {field_name}",
                    code="required",
                )
            )
        return chosen, errors

    @classmethod
    def validate_status(cls, value: Any) -> tuple[GameStatus, FieldError | None]:
        if _is_blank(value):
            return GameStatus.WANT_TO_PLAY, None
        status = _lookup_enum(GameStatus, value)
        if status is None:
            return GameStatus.WANT_TO_PLAY, FieldError(
                field="status", message=f"Unknown status '{value}'", code="invalid_choice"
            )
        return status, None

    @classmethod
    def validate_rating(cls, value: Any) -> tuple[int | float | None, FieldError | None]:
        """Ratings outside the 1-10 range are rejected, never clamped."""
        if _is_blank(value):
            return None, None
        try:
            rating = _coerce_number(value)
        except ValueError as e:
            return None, FieldError(field="rating", message=str(e), code="invalid_number")
        if not RATING_MIN <= rating <= RATING_MAX:
            return None, FieldError(
                field="rating",
                message=f"Rating must be between {RATING_MIN} and {RATING_MAX}, got {rating}",
                code="out_of_range",
            )
        return rating, None

    @classmethod
    def validate_hours(cls, value: Any) -> tuple[int | float | None, FieldError | None]:
        if _is_blank(value):
            return None, None
        try:
            hours = _coerce_number(value)
        except ValueError as e:
            return None, FieldError(field="hoursPlayed", message=str(e), code="invalid_number")
        if hours < 0:
            return None, FieldError(
                field="hoursPlayed", message="Hours played cannot be negative", code="out_of_range"
            )
        return hours, None

    @classmethod
    def validate_text(cls, value: Any, field_name: str) -> tuple[str | None, FieldError | None]:
        if _is_blank(value):
            return None, None
        if not isinstance(value, str):
            return None, FieldError(
                field=field_name,
                message=f"Expected text value, got {type(value).__name__}",
                code="invalid_type",
            )
        return value, None

    @classmethod
    def validate_url(cls, value: Any, field_name: str) -> tuple[str | None, FieldError | None]:
        text, error = cls.validate_text(value, field_name)
        if error or text is None:
            return None, error
        if not URL_PATTERN.match(text.strip()):
            return None, FieldError(
                field=field_name,
                message="Invalid URL format. Must start with http:// or https://",
                code="invalid_url_format",
            )
        return text.strip(), None

    @classmethod
    def validate_datetime(
        cls, value: Any, field_name: str
    ) -> tuple[datetime | None, FieldError | None]:
        """Accepts ISO 8601 strings (date-only strings included) or datetimes."""
        if _is_blank(value):
            return None, None
        try:
            return parse_timestamp(value), None
        except ValueError:
            return None, FieldError(
                field=field_name,
                message="Invalid datetime format. Use ISO 8601 format (e.g., 2024-01-01T12:00:00Z)",
                code="invalid_datetime_format",
            )

    @classmethod
    def validate(cls, record: CandidateRecord) -> dict[str, Any]:
        """Validate a candidate record and return ``Game`` keyword arguments.

        ``id``, ``createdAt`` and ``updatedAt`` are not part of the result;
        callers decide whether to keep or regenerate them.

        Raises:
            ItemValidationError: If any field is invalid.
        """
        errors: list[FieldError] = []
        fields: dict[str, Any] = {}

        title, error = cls.validate_title(record.get("title"))
        if error:
            errors.append(error)
        fields["title"] = title

        genres, genre_errors = cls.validate_choices(record.get("genres"), Genre, "genres")
        platforms, platform_errors = cls.validate_choices(
            record.get("platforms"), Platform, "platforms"
        )
        errors.extend(genre_errors)
        errors.extend(platform_errors)
        fields["genres"] = genres
        fields["platforms"] = platforms

        checks = [
            ("status", cls.validate_status(record.get("status"))),
            ("rating", cls.validate_rating(record.get("rating"))),
            ("hours_played", cls.validate_hours(record.get("hoursPlayed"))),
            ("cover_image_url", cls.validate_url(record.get("coverImageUrl"), "coverImageUrl")),
        ]
        for wire_name, attr in TEXT_FIELDS.items():
            checks.append((attr, cls.validate_text(record.get(wire_name), wire_name)))
        for wire_name, attr in OPTIONAL_DATE_FIELDS.items():
            checks.append((attr, cls.validate_datetime(record.get(wire_name), wire_name)))

        for attr, (value, error) in checks:
            if error:
                errors.append(error)
            fields[attr] = value

        if errors:
            raise ItemValidationError(errors, title=record.title_hint)
        return fields

    @classmethod
    def hydrate(cls, record: CandidateRecord) -> Game:
        """Rebuild a stored game, keeping its id and timestamps.

        Raises:
            ItemValidationError: If the record is invalid or lacks an id.
        """
        fields = cls.validate(record)
        item_id = record.get("id")
        if _is_blank(item_id):
            raise ItemValidationError(
                [FieldError(field="id", message="Stored game has no id", code="required")],
                title=record.title_hint,
            )
        created_at, created_error = cls.validate_datetime(record.get("createdAt"), "createdAt")
        updated_at, updated_error = cls.validate_datetime(record.get("updatedAt"), "updatedAt")
        stamp_errors = [e for e in (created_error, updated_error) if e]
        if stamp_errors:
            raise ItemValidationError(stamp_errors, title=record.title_hint)

        created_at = created_at or updated_at
        extra: dict[str, Any] = {}
        if created_at is not None:
            extra["created_at"] = created_at
            extra["updated_at"] = max(updated_at or created_at, created_at)
        try:
            return Game(id=str(item_id), **fields, **extra)
        except ValueError as e:
            raise ItemValidationError(
                [FieldError(field="record", message=str(e), code="invalid_record")],
                title=record.title_hint,
            ) from e
