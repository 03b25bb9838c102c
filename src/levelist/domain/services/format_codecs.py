"""Per-format encoders and parsers used by the transcoder.

Encoders take already-filtered games and return file content. Parsers take
raw file content and return ``CandidateRecord`` objects; they raise
``ParseError`` when the top-level structure is unusable and otherwise leave
per-record problems to validation.
"""

import csv
import io
import json
import math
import platform as host_platform
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from levelist.core.exceptions import ParseError
from levelist.domain.entities import (
    CandidateRecord,
    Game,
    GameStatus,
    Genre,
    Platform,
    format_timestamp,
)

BACKUP_VERSION = "1.0.0"
EXPORTED_BY = "LevelList"
UNKNOWN = "Unknown"

# Lower-cased CSV header -> wire field. Columns not listed here are dropped.
CSV_COLUMNS: dict[str, str] = {
    "title": "title",
    "status": "status",
    "genres": "genres",
    "categories": "genres",
    "platforms": "platforms",
    "rating": "rating",
    "hours played": "hoursPlayed",
    "developer": "developer",
    "publisher": "publisher",
    "release date": "releaseDate",
    "notes": "notes",
    "description": "description",
}

MULTI_VALUED = frozenset({"genres", "platforms"})


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def load_json(content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e.msg} at line {e.lineno} column {e.colno}") from e


class BackupMetadata(BaseModel):
    """Provenance block of a backup file."""

    model_config = ConfigDict(populate_by_name=True)

    app_version: str = Field(default=BACKUP_VERSION, alias="appVersion")
    exported_by: str = Field(default=EXPORTED_BY, alias="exportedBy")
    platform: str = UNKNOWN


class BackupEnvelope(BaseModel):
    """Versioned full-fidelity backup of a collection."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = BACKUP_VERSION
    timestamp: str | None = None
    games_count: int = Field(default=0, alias="gamesCount")
    games: list[Any]
    metadata: BackupMetadata = Field(default_factory=BackupMetadata)


# ---------------------------------------------------------------------------
# Encoders


def encode_json(
    games: list[Game],
    include_metadata: bool,
    include_notes: bool,
    include_ratings: bool,
) -> str:
    rows = []
    for game in games:
        full = game.to_dict()
        row: dict[str, Any] = {
            "id": full["id"],
            "title": full["title"],
            "genres": full["genres"],
            "platforms": full["platforms"],
            "status": full["status"],
        }
        extras: list[str] = []
        if include_metadata:
            extras += [
                "description",
                "developer",
                "publisher",
                "releaseDate",
                "coverImageUrl",
                "createdAt",
                "updatedAt",
            ]
        if include_notes:
            extras.append("notes")
        if include_ratings:
            extras += ["rating", "hoursPlayed", "startDate", "completionDate"]
        for key in extras:
            if key in full:
                row[key] = full[key]
        rows.append(row)
    return dump_json(rows)


def _csv_number(value: int | float | None) -> str:
    return "" if value is None else str(value)


def encode_csv(
    games: list[Game],
    include_metadata: bool,
    include_notes: bool,
    include_ratings: bool,
) -> str:
    headers = ["Title", "Status", "Genres", "Platforms"]
    if include_ratings:
        headers += ["Rating", "Hours Played"]
    if include_metadata:
        headers += ["Developer", "Publisher", "Release Date"]
    if include_notes:
        headers.append("Notes")

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for game in games:
        row = [
            game.title,
            game.status.value,
            ", ".join(g.value for g in game.genres),
            ", ".join(p.value for p in game.platforms),
        ]
        if include_ratings:
            row += [_csv_number(game.rating), _csv_number(game.hours_played)]
        if include_metadata:
            row += [
                game.developer or "",
                game.publisher or "",
                game.release_date.date().isoformat() if game.release_date else "",
            ]
        if include_notes:
            row.append(game.notes or "")
        writer.writerow(row)

    content = buffer.getvalue()
    return content[:-1] if content.endswith("\n") else content


def encode_steam(games: list[Game], now: datetime) -> str:
    entries = [
        {
            "appid": game.id,
            "title": game.title,
            "released": game.release_date.year if game.release_date else now.year,
            "developer": game.developer or UNKNOWN,
            "publisher": game.publisher or UNKNOWN,
            "playtime_forever": round_half_up((game.hours_played or 0) * 60),
        }
        for game in games
        if game.has_platform(Platform.PC)
    ]
    return dump_json({"list": entries})


def encode_backup(games: list[Game], now: datetime, app_version: str) -> str:
    envelope = BackupEnvelope(
        version=BACKUP_VERSION,
        timestamp=format_timestamp(now),
        games_count=len(games),
        games=[game.to_dict() for game in games],
        metadata=BackupMetadata(
            app_version=app_version,
            exported_by=EXPORTED_BY,
            platform=host_platform.system() or UNKNOWN,
        ),
    )
    return dump_json(envelope.model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# Parsers


def parse_json(content: str) -> list[CandidateRecord]:
    """Accept a top-level array or an object wrapping a ``games`` array."""
    data = load_json(content)
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("games"), list):
        items = data["games"]
    else:
        raise ParseError("Expected a JSON array or an object with a 'games' array")
    return [CandidateRecord.from_raw(item, "json", i) for i, item in enumerate(items, 1)]


def parse_csv(content: str) -> list[CandidateRecord]:
    """Parse CSV with a header row. Quoted cells may contain commas and quotes."""
    try:
        rows = [row for row in csv.reader(io.StringIO(content.strip())) if any(c.strip() for c in row)]
    except csv.Error as e:
        raise ParseError(f"Invalid CSV: {e}") from e
    if not rows:
        raise ParseError("CSV file has no header row")

    columns = [CSV_COLUMNS.get(h.strip().strip('"').lower()) for h in rows[0]]

    records = []
    for position, row in enumerate(rows[1:], 1):
        record = CandidateRecord(source="csv", position=position)
        for column, cell in zip(columns, row):
            value = cell.strip()
            if column is None or not value:
                continue
            if column in MULTI_VALUED:
                record.set(column, [part.strip() for part in value.split(",") if part.strip()])
            else:
                record.set(column, value)
        records.append(record)
    return records


def _steam_release_date(item: dict[str, Any]) -> Any:
    if item.get("release_date"):
        return item["release_date"]
    released = item.get("released")
    if isinstance(released, int) and not isinstance(released, bool):
        return f"{released:04d}-01-01"
    return None


def parse_steam(content: str) -> list[CandidateRecord]:
    """Map Steam-like entries, filling in defaults the format cannot carry."""
    data = load_json(content)
    if not isinstance(data, dict):
        raise ParseError("Expected a JSON object with a 'list' or 'games' array")
    entries = data.get("list")
    if not isinstance(entries, list):
        entries = data.get("games")
    if not isinstance(entries, list):
        raise ParseError("Expected a JSON object with a 'list' or 'games' array")

    records = []
    for position, item in enumerate(entries, 1):
        if not isinstance(item, dict):
            records.append(CandidateRecord(source="steam", position=position))
            continue
        playtime = item.get("playtime_forever")
        hours = None
        if isinstance(playtime, (int, float)) and not isinstance(playtime, bool) and playtime:
            hours = round_half_up(playtime / 60)
        data_fields = {
            "title": item.get("title") or item.get("name"),
            "description": item.get("short_description") or None,
            "genres": [Genre.ACTION.value],
            "platforms": [Platform.PC.value],
            "status": GameStatus.WANT_TO_PLAY.value,
            "developer": item.get("developer"),
            "publisher": item.get("publisher"),
            "releaseDate": _steam_release_date(item),
            "hoursPlayed": hours,
        }
        records.append(CandidateRecord(data=data_fields, source="steam", position=position))
    return records


def parse_backup(content: str) -> list[CandidateRecord]:
    data = load_json(content)
    if not isinstance(data, dict):
        raise ParseError("Invalid backup format")
    try:
        envelope = BackupEnvelope.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Invalid backup format: {e.error_count()} structural error(s)") from e
    return [
        CandidateRecord.from_raw(item, "backup", i) for i, item in enumerate(envelope.games, 1)
    ]
