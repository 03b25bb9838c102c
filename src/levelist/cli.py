"""Command-line interface for LevelList.

Every command opens the collection stored under ``storage_path``, runs
inside an event loop so the autosave timers work as in a long-lived
process, and flushes pending writes before exiting.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Callable, NoReturn, TypeVar

import click

from levelist.application.services.collection_controller import CollectionController
from levelist.application.services.notifications import Notification, NotificationLevel
from levelist.core.config import Settings, get_settings
from levelist.core.logging import configure_logging, get_logger
from levelist.core.scheduler import AsyncioScheduler
from levelist.domain.entities import GameStatus, Genre, Platform
from levelist.domain.services.transcoder import ExportFormat, ExportOptions
from levelist.infrastructure.storage import FileKeyValueStore, StoreAdapter

T = TypeVar("T")

FORMAT_CHOICE = click.Choice([f.value for f in ExportFormat], case_sensitive=False)
STATUS_CHOICE = click.Choice([s.value for s in GameStatus], case_sensitive=False)
GENRE_CHOICE = click.Choice([g.value for g in Genre], case_sensitive=False)
PLATFORM_CHOICE = click.Choice([p.value for p in Platform], case_sensitive=False)


def _echo_notifier(notification: Notification) -> None:
    if notification.level in (NotificationLevel.ERROR, NotificationLevel.WARNING):
        click.echo(f"{notification.title}: {notification.message}", err=True)


def run_with_controller(settings: Settings, action: Callable[[CollectionController], T]) -> T:
    """Load the collection, run ``action`` and close (flushing) afterwards."""

    async def runner() -> T:
        store = StoreAdapter(FileKeyValueStore(settings.storage_path))
        controller = CollectionController(
            store, AsyncioScheduler(), settings=settings, notifier=_echo_notifier
        )
        controller.load()
        controller.start()
        try:
            return action(controller)
        finally:
            controller.close(flush_pending=True)

    return asyncio.run(runner())


@click.group()
@click.version_option(version="0.1.0", prog_name="LevelList")
@click.option(
    "--storage-path",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding the collection (overrides config)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides config)",
)
@click.pass_context
def cli(ctx: click.Context, storage_path: str | None, log_level: str | None) -> None:
    """LevelList - a personal video game collection tracker."""
    overrides: dict[str, Any] = {}
    if storage_path:
        overrides["storage_path"] = storage_path
    if log_level:
        overrides["log_level"] = log_level
    settings = get_settings().model_copy(update=overrides)
    configure_logging(settings)
    ctx.obj = settings


@cli.command()
@click.pass_obj
def info(settings: Settings) -> None:
    """Display configuration and collection size."""
    count = run_with_controller(settings, lambda c: len(c.items))
    click.echo(f"""
{settings.app_name} v{settings.app_version}
Environment: {settings.environment}

Storage:
  Path:         {settings.storage_path}
  Collection:   {settings.collection_key}
  History:      {settings.history_key}
  Games:        {count}

Autosave:
  Debounce:     {settings.autosave_debounce_seconds}s
  Interval:     {settings.autosave_interval_seconds}s

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


@cli.command(name="import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=FORMAT_CHOICE, default=None, help="File format")
@click.pass_obj
def import_(settings: Settings, file: Path, fmt: str | None) -> None:
    """Import games from FILE into the collection."""
    if fmt is None:
        fmt = ExportFormat.CSV.value if file.suffix.lower() == ".csv" else ExportFormat.JSON.value
    content = file.read_text(encoding="utf-8")
    logger = get_logger(__name__)
    logger.info("Importing file", path=str(file), format=fmt)

    result = run_with_controller(settings, lambda c: c.import_file(content, ExportFormat(fmt)))

    click.echo(result.summary)
    for error in result.errors:
        click.echo(f"  {error}", err=True)
    if not result.success:
        raise SystemExit(1)


@cli.command()
@click.option("--format", "fmt", type=FORMAT_CHOICE, default="json", help="Export format")
@click.option("--out", type=click.Path(dir_okay=True, path_type=Path), default=None,
              help="Output file or directory (default: stdout)")
@click.option("--metadata/--no-metadata", default=True, help="Include descriptive fields")
@click.option("--notes/--no-notes", default=True, help="Include personal notes")
@click.option("--ratings/--no-ratings", default=True, help="Include ratings and play data")
@click.option("--platform", "platforms", type=PLATFORM_CHOICE, multiple=True,
              help="Only games on this platform (repeatable)")
@click.option("--status", "statuses", type=STATUS_CHOICE, multiple=True,
              help="Only games with this status (repeatable)")
@click.pass_obj
def export(
    settings: Settings,
    fmt: str,
    out: Path | None,
    metadata: bool,
    notes: bool,
    ratings: bool,
    platforms: tuple[str, ...],
    statuses: tuple[str, ...],
) -> None:
    """Export the collection."""
    options = ExportOptions(
        format=ExportFormat(fmt),
        include_metadata=metadata,
        include_notes=notes,
        include_ratings=ratings,
        include_platforms=[Platform(p) for p in platforms],
        include_statuses=[GameStatus(s) for s in statuses],
    )
    result = run_with_controller(settings, lambda c: c.export(options))
    if not result.success:
        click.echo(f"Error: {result.error}", err=True)
        raise SystemExit(1)

    if out is None:
        click.echo(result.content)
        return
    target = out / result.filename if out.is_dir() else out
    target.write_text(result.content, encoding="utf-8")
    click.echo(f"Exported {result.item_count} games to {target}")


@cli.command()
@click.argument("query")
@click.option("--status", type=STATUS_CHOICE, default=None, help="Only games with this status")
@click.option("--genre", type=GENRE_CHOICE, default=None, help="Only games in this genre")
@click.pass_obj
def search(settings: Settings, query: str, status: str | None, genre: str | None) -> None:
    """Search the collection by title, description, developer or genre."""

    def run(controller: CollectionController) -> list[str]:
        controller.search.set_query(query)
        controller.search.commit_query()
        controller.search.add_to_history(query)
        games = controller.search.results(
            status=GameStatus(status) if status else None,
            genre=Genre(genre) if genre else None,
        )
        return [f"{g.title} [{g.status.value}] ({', '.join(p.value for p in g.platforms)})" for g in games]

    lines = run_with_controller(settings, run)
    if not lines:
        click.echo("No games found.")
        return
    for line in lines:
        click.echo(line)


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False, help="Print as JSON")
@click.pass_obj
def stats(settings: Settings, as_json: bool) -> None:
    """Show collection statistics."""
    result = run_with_controller(settings, lambda c: c.statistics())
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    average = "n/a" if result.average_rating is None else f"{result.average_rating}"
    click.echo(f"Total games:     {result.total}")
    click.echo(f"Total hours:     {result.total_hours}")
    click.echo(f"Average rating:  {average}")
    click.echo(f"Completion rate: {result.completion_rate}%")
    click.echo("By status:")
    for status, count in result.by_status.items():
        click.echo(f"  {status.value:<18} {count}")
    if result.top_genres:
        click.echo("Top genres: " + ", ".join(f"{g.value} ({n})" for g, n in result.top_genres))
    if result.top_platforms:
        click.echo(
            "Top platforms: " + ", ".join(f"{p.value} ({n})" for p, n in result.top_platforms)
        )


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `levelist` command is run
    or when using `python -m levelist`.
    """
    cli()


if __name__ == "__main__":
    main()
