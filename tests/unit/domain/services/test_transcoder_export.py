"""Unit tests for Transcoder exports."""

import csv
import io
import json
from datetime import date, datetime, timezone

import pytest

from levelist.domain.entities import GameStatus, Platform
from levelist.domain.services import ExportFormat, ExportOptions, Transcoder


@pytest.fixture
def transcoder(clock) -> Transcoder:
    return Transcoder(app_version="1.0.0", clock=clock)


class TestExportFilename:
    """Test suite for download file names."""

    @pytest.mark.parametrize(
        "fmt, expected",
        [
            (ExportFormat.JSON, "levelist-games-2024-06-01.json"),
            (ExportFormat.CSV, "levelist-games-2024-06-01.csv"),
            (ExportFormat.STEAM, "levelist-games-2024-06-01.json"),
            (ExportFormat.BACKUP, "levelist-games-2024-06-01.json"),
        ],
    )
    def test_extension_follows_format(self, transcoder, fmt, expected):
        assert transcoder.export_filename(fmt) == expected

    @pytest.mark.parametrize(
        "fmt, expected",
        [
            (ExportFormat.JSON, "json"),
            (ExportFormat.CSV, "csv"),
            (ExportFormat.STEAM, "json"),
            (ExportFormat.BACKUP, "json"),
        ],
    )
    def test_format_extension(self, fmt, expected):
        assert fmt.extension == expected

    def test_custom_base_name_and_day(self, transcoder):
        assert transcoder.export_filename(
            ExportFormat.CSV, base_name="my-games", today=date(2023, 12, 31)
        ) == "my-games-2023-12-31.csv"


class TestJsonExport:
    """Test suite for the structural JSON export."""

    def test_all_groups_included_by_default(self, transcoder, sample_games):
        result = transcoder.export_games(sample_games, ExportOptions())

        assert result.success
        assert result.item_count == 4
        rows = json.loads(result.content)
        ghost = rows[0]
        assert ghost["title"] == "Ghost of Tsushima"
        assert ghost["developer"] == "Sucker Punch"
        assert ghost["rating"] == 9
        assert ghost["hoursPlayed"] == 55.5
        assert ghost["releaseDate"] == "2020-07-17T00:00:00Z"
        assert ghost["createdAt"] == "2024-01-01T00:00:00Z"

    def test_toggles_remove_optional_groups(self, transcoder, sample_games):
        options = ExportOptions(include_metadata=False, include_notes=False, include_ratings=False)

        rows = json.loads(transcoder.export_games(sample_games, options).content)

        assert set(rows[0]) == {"id", "title", "genres", "platforms", "status"}

    def test_filters_by_status_and_platform(self, transcoder, sample_games):
        options = ExportOptions(
            include_statuses=[GameStatus.COMPLETED], include_platforms=[Platform.PLAYSTATION_5]
        )
        result = transcoder.export_games(sample_games, options)
        assert [row["title"] for row in json.loads(result.content)] == ["Ghost of Tsushima"]
        assert result.item_count == 1

    def test_filters_by_creation_range(self, transcoder, sample_games, game_factory):
        recent = game_factory(
            id="g9",
            title="Balatro",
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            updated_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )
        options = ExportOptions(
            date_range=(
                datetime(2024, 4, 1, tzinfo=timezone.utc),
                datetime(2024, 6, 1, tzinfo=timezone.utc),
            )
        )
        result = transcoder.export_games([*sample_games, recent], options)
        assert [row["title"] for row in json.loads(result.content)] == ["Balatro"]


class TestCsvExport:
    """Test suite for CSV export."""

    def test_header_and_multi_valued_cells(self, transcoder, sample_games):
        result = transcoder.export_games(sample_games, ExportOptions(format=ExportFormat.CSV))

        lines = result.content.split("\n")
        assert lines[0] == (
            "Title,Status,Genres,Platforms,Rating,Hours Played,"
            "Developer,Publisher,Release Date,Notes"
        )
        assert lines[1] == (
            'Ghost of Tsushima,completed,"action, adventure","ps5, pc",9,55.5,'
            "Sucker Punch,Sony,2020-07-17,"
        )
        assert not result.content.endswith("\n")

    def test_header_follows_toggles(self, transcoder, sample_games):
        options = ExportOptions(
            format=ExportFormat.CSV,
            include_metadata=False,
            include_notes=False,
            include_ratings=False,
        )
        content = transcoder.export_games(sample_games, options).content
        assert content.split("\n")[0] == "Title,Status,Genres,Platforms"

    @pytest.mark.parametrize(
        "title",
        ['Say "Hello", World', "Comma, Inc.", 'Only "quotes"', "Plain"],
    )
    def test_awkward_titles_survive_a_csv_reader(self, transcoder, game_factory, title):
        game = game_factory(title=title, notes="line one, line two")
        content = transcoder.export_games([game], ExportOptions(format=ExportFormat.CSV)).content

        rows = list(csv.reader(io.StringIO(content)))

        assert rows[1][0] == title
        assert rows[1][-1] == "line one, line two"


class TestSteamExport:
    """Test suite for the Steam-like projection."""

    def test_only_pc_games_with_defaults(self, transcoder, sample_games):
        result = transcoder.export_games(sample_games, ExportOptions(format=ExportFormat.STEAM))

        entries = json.loads(result.content)["list"]
        assert result.item_count == 3
        assert [e["title"] for e in entries] == ["Ghost of Tsushima", "Ghostrunner", "Hades"]
        assert entries[0]["released"] == 2020
        assert entries[0]["playtime_forever"] == 3330
        assert entries[1]["released"] == 2024
        assert entries[1]["publisher"] == "Unknown"
        assert entries[1]["playtime_forever"] == 480


class TestBackupExport:
    """Test suite for the backup envelope."""

    def test_envelope_shape(self, transcoder, sample_games):
        result = transcoder.export_games(sample_games, ExportOptions(format=ExportFormat.BACKUP))

        envelope = json.loads(result.content)
        assert envelope["version"] == "1.0.0"
        assert envelope["timestamp"] == "2024-06-01T12:00:00Z"
        assert envelope["gamesCount"] == 4
        assert len(envelope["games"]) == 4
        assert envelope["metadata"]["appVersion"] == "1.0.0"
        assert envelope["metadata"]["exportedBy"] == "LevelList"
        assert envelope["games"][2]["description"] == "Defy the god of the dead"

    def test_backup_ignores_field_toggles(self, transcoder, sample_games):
        options = ExportOptions(format=ExportFormat.BACKUP, include_notes=False, include_ratings=False)
        envelope = json.loads(transcoder.export_games(sample_games, options).content)
        assert envelope["games"][0]["rating"] == 9


def test_export_failure_is_reported(transcoder, sample_games):
    result = transcoder.export_games(sample_games, ExportOptions(format="xml"))
    assert not result.success
    assert result.error.startswith("Export failed")
    assert result.content == ""


def test_csv_cell_doubles_inner_quotes(transcoder, game_factory):
    game = game_factory(title='He said "hi", ok')
    content = transcoder.export_games([game], ExportOptions(format=ExportFormat.CSV)).content
    assert content.split("\n")[1].startswith('"He said ""hi"", ok",')
