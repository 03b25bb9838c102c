"""Import/export service for game collections.

Converts the in-memory collection to and from four file formats:

* ``json``   - structural export, fields selected by the option toggles
* ``csv``    - tabular export with one row per game
* ``steam``  - lossy Steam-like catalog projection (PC games only)
* ``backup`` - versioned envelope, lossless for every game field

Neither ``export_games`` nor ``import_games`` raises: failures are reported
in the returned ``ExportResult`` / ``ImportResult``.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Callable

from levelist.core.exceptions import ItemValidationError, ParseError
from levelist.core.logging import LoggingContext, get_logger
from levelist.domain.entities import (
    DATE_FIELDS,
    WIRE_FIELDS,
    CandidateRecord,
    Game,
    GameStatus,
    Platform,
    parse_timestamp,
    utcnow,
)
from levelist.domain.services import format_codecs
from levelist.domain.services.game_validator import GameValidator

logger = get_logger(__name__)

DEFAULT_BASE_NAME = "levelist-games"


class ExportFormat(str, Enum):
    """Supported file formats. The same value selects the parser on import."""

    JSON = "json"
    CSV = "csv"
    STEAM = "steam"
    BACKUP = "backup"

    @property
    def extension(self) -> str:
        return "csv" if self is ExportFormat.CSV else "json"


@dataclass
class ExportOptions:
    """Export configuration.

    The three ``include_*`` toggles choose optional field groups for the JSON
    and CSV formats. ``include_platforms`` / ``include_statuses`` keep games
    matching any listed value and ``date_range`` keeps games whose
    ``created_at`` lies inside the inclusive range.
    """

    format: ExportFormat = ExportFormat.JSON
    include_metadata: bool = True
    include_notes: bool = True
    include_ratings: bool = True
    include_platforms: list[Platform] = field(default_factory=list)
    include_statuses: list[GameStatus] = field(default_factory=list)
    date_range: tuple[datetime, datetime] | None = None


@dataclass
class ExportResult:
    success: bool
    content: str = ""
    filename: str = ""
    item_count: int = 0
    error: str | None = None


@dataclass
class ImportResult:
    """Summary of one import.

    ``success`` is true when at least one game was imported, even if other
    records failed. Duplicates are counted, not reported as errors.
    """

    success: bool = False
    imported: list[Game] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duplicates: int = 0
    total: int = 0

    @property
    def summary(self) -> str:
        """One human-readable line suitable for a notification."""
        if not self.success and self.errors and not self.total:
            return self.errors[0]
        parts = [f"Imported {len(self.imported)} of {self.total} games"]
        if self.duplicates:
            parts.append(f"{self.duplicates} duplicate(s) skipped")
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        return ", ".join(parts)


def _new_id() -> str:
    return uuid.uuid4().hex


class Transcoder:
    """Service converting game collections to and from external formats."""

    _PARSERS: dict[ExportFormat, Callable[[str], list[CandidateRecord]]] = {
        ExportFormat.JSON: format_codecs.parse_json,
        ExportFormat.CSV: format_codecs.parse_csv,
        ExportFormat.STEAM: format_codecs.parse_steam,
        ExportFormat.BACKUP: format_codecs.parse_backup,
    }

    def __init__(
        self,
        app_version: str = format_codecs.BACKUP_VERSION,
        base_name: str = DEFAULT_BASE_NAME,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self.app_version = app_version
        self.base_name = base_name
        self._clock = clock
        self._id_factory = id_factory

    def export_filename(
        self, format: ExportFormat, base_name: str | None = None, today: date | None = None
    ) -> str:
        """Build ``<base>-<YYYY-MM-DD>.<ext>`` for a download."""
        day = today or self._clock().date()
        return f"{base_name or self.base_name}-{day.isoformat()}.{ExportFormat(format).extension}"

    @staticmethod
    def filter_for_export(games: list[Game], options: ExportOptions) -> list[Game]:
        selected = list(games)
        if options.include_platforms:
            wanted = set(options.include_platforms)
            selected = [g for g in selected if wanted.intersection(g.platforms)]
        if options.include_statuses:
            statuses = set(options.include_statuses)
            selected = [g for g in selected if g.status in statuses]
        if options.date_range is not None:
            start, end = (parse_timestamp(v) for v in options.date_range)
            selected = [g for g in selected if start <= g.created_at <= end]
        return selected

    def export_games(self, games: list[Game], options: ExportOptions) -> ExportResult:
        """Serialize ``games`` according to ``options``."""
        try:
            export_format = ExportFormat(options.format)
            selected = self.filter_for_export(games, options)
            now = self._clock()
            if export_format is ExportFormat.JSON:
                content = format_codecs.encode_json(
                    selected, options.include_metadata, options.include_notes, options.include_ratings
                )
            elif export_format is ExportFormat.CSV:
                content = format_codecs.encode_csv(
                    selected, options.include_metadata, options.include_notes, options.include_ratings
                )
            elif export_format is ExportFormat.STEAM:
                selected = [g for g in selected if g.has_platform(Platform.PC)]
                content = format_codecs.encode_steam(selected, now)
            else:
                content = format_codecs.encode_backup(selected, now, self.app_version)
        except Exception as e:
            logger.exception("Export failed", format=str(options.format))
            return ExportResult(success=False, error=f"Export failed: {e}")

        logger.info("Collection exported", format=export_format.value, item_count=len(selected))
        return ExportResult(
            success=True,
            content=content,
            filename=self.export_filename(export_format, today=now.date()),
            item_count=len(selected),
        )

    @staticmethod
    def _rehydrate_dates(record: CandidateRecord) -> None:
        """Convert date-valued wire fields to datetimes where they parse.

        Unparseable values are left in place for validation to report.
        """
        for wire_name, attr in WIRE_FIELDS.items():
            if attr not in DATE_FIELDS:
                continue
            value = record.get(wire_name)
            if isinstance(value, str) and value.strip():
                try:
                    record.set(wire_name, parse_timestamp(value))
                except ValueError:
                    pass

    def import_games(
        self, content: str, format: ExportFormat, existing_games: list[Game]
    ) -> ImportResult:
        """Parse, validate and deduplicate ``content`` against ``existing_games``.

        Duplicate detection compares titles case-insensitively against the
        existing collection only, not against other records of the same file.
        Accepted games get a fresh id and fresh timestamps.
        """
        result = ImportResult()
        try:
            import_format = ExportFormat(format)
        except ValueError:
            result.errors.append(f"Import failed: unsupported format '{format}'")
            return result

        with LoggingContext(operation="import", format=import_format.value):
            if not content or not content.strip():
                result.errors.append("Import failed: the file is empty or could not be parsed")
                logger.warning("Import rejected empty content")
                return result

            try:
                candidates = self._PARSERS[import_format](content)
            except ParseError as e:
                result.errors.append(f"Import failed: {e}")
                logger.warning("Import parse failed", error=str(e))
                return result
            except Exception as e:
                result.errors.append(f"Import failed: {e}")
                logger.exception("Unexpected error while parsing import")
                return result

            result.total = len(candidates)
            existing_titles = {g.title.casefold() for g in existing_games}
            now = self._clock()

            for candidate in candidates:
                self._rehydrate_dates(candidate)
                try:
                    fields = GameValidator.validate(candidate)
                    if fields["title"].casefold() in existing_titles:
                        result.duplicates += 1
                        continue
                    game = Game(id=self._id_factory(), created_at=now, updated_at=now, **fields)
                except ItemValidationError as e:
                    result.errors.append(f"Record {candidate.position}: {e}")
                    continue
                except Exception as e:
                    result.errors.append(
                        f'Error processing game "{candidate.title_hint}": {e}'
                    )
                    continue
                result.imported.append(game)

            result.success = bool(result.imported)
            logger.info(
                "Import finished",
                total=result.total,
                imported=len(result.imported),
                duplicates=result.duplicates,
                errors=len(result.errors),
            )
        return result
