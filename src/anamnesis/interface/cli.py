"""anamnesis CLI: review recording, due queue, forecast and stats commands."""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer

from anamnesis.application.config import AppConfig, resolve_config
from anamnesis.application.review_service import ReviewService
from anamnesis.application.scheduler import priority_score
from anamnesis.application.utils.dates import local_now
from anamnesis.consts import VERSION
from anamnesis.domain.errors import SchedulingError
from anamnesis.domain.models import ProgressItem
from anamnesis.infrastructure.adapters.file_progress import (
    FileProgressRepository,
    item_to_mapping,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="anamnesis: SM-2 review scheduling for lesson progress.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage anamnesis configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

LOG_LEVELS = {0: logging.WARNING, 1: logging.WARNING, 2: logging.INFO}  # 3+ is DEBUG

ProgressFileArg = Annotated[
    Path | None,
    typer.Argument(help="Progress file (.yaml or .json). Defaults to 'progress_file' in config."),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_service(ctx: typer.Context, progress_file: Path | None) -> ReviewService:
    config: AppConfig = ctx.obj["config"]
    path = progress_file or config.progress_file
    if path is None:
        typer.secho(
            "No progress file given. Pass one or set 'progress_file' in config.", fg="red"
        )
        raise typer.Exit(2)
    return ReviewService(FileProgressRepository(path), bounds=config.ease_bounds())


def _run(coro) -> Any:
    """Run a service coroutine, turning domain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except SchedulingError as e:
        logger.debug("Command failed", exc_info=True)
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1)


def _parse_moment(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"'{value}' is not an ISO-8601 date or datetime")


def _describe(item: ProgressItem) -> str:
    due = item.next_review_date.isoformat() if item.next_review_date else "now"
    return (
        f"{item.lesson_id}: due {due}, interval {item.interval}d, "
        f"ease {item.ease_factor:.2f}, reps {item.repetition}, mastery {item.mastery_level}, "
        f"lapses {item.lapses}, streak {item.streak}"
    )


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    min_ease: Annotated[float | None, typer.Option(help="Lower ease factor bound.")] = None,
    max_ease: Annotated[float | None, typer.Option(help="Upper ease factor bound.")] = None,
):
    """Global settings for anamnesis."""
    ctx.ensure_object(dict)
    try:
        config = resolve_config({"min_ease": min_ease, "max_ease": max_ease})
    except SchedulingError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red", err=True)
        raise typer.Exit(2)

    level = config.verbose + verbose
    logging.getLogger().setLevel(LOG_LEVELS.get(level, logging.DEBUG))
    ctx.obj["config"] = config


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    lesson_id: Annotated[str, typer.Argument(help="Lesson to grade.")],
    quality: Annotated[int, typer.Argument(min=0, max=5, help="Recall quality, 0-5.")],
    progress_file: ProgressFileArg = None,
    at: Annotated[
        str | None, typer.Option("--at", help="Review time (ISO-8601). Defaults to now.")
    ] = None,
):
    """[bold green]Record[/bold green] a graded review and reschedule the lesson."""
    service = _build_service(ctx, progress_file)
    item = _run(service.record_review(lesson_id, quality, reviewed_at=_parse_moment(at)))
    typer.echo(_describe(item))


@app.command()
def due(
    ctx: typer.Context,
    progress_file: ProgressFileArg = None,
    limit: Annotated[int | None, typer.Option(min=1, help="Maximum lessons to list.")] = None,
    offset: Annotated[int, typer.Option(min=0, help="Skip this many lessons.")] = 0,
    at: Annotated[str | None, typer.Option("--at", help="Evaluate at this time.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Emit JSON.")] = False,
):
    """List due lessons, most urgent first."""
    config: AppConfig = ctx.obj["config"]
    service = _build_service(ctx, progress_file)
    now = _parse_moment(at) or local_now()
    queue = _run(
        service.get_due_reviews(now=now, limit=limit or config.review_limit, offset=offset)
    )

    if as_json:
        rows = [
            {**item_to_mapping(item), "priority": round(priority_score(item, now), 2)}
            for item in queue
        ]
        typer.echo(json.dumps(rows, indent=2))
        return

    if not queue:
        typer.secho("Nothing due.", fg="green")
        return
    for item in queue:
        typer.echo(f"[{priority_score(item, now):7.2f}] {_describe(item)}")


@app.command()
def forecast(
    ctx: typer.Context,
    progress_file: ProgressFileArg = None,
    days: Annotated[int, typer.Option(min=0, help="Days to look ahead.")] = 1,
    at: Annotated[str | None, typer.Option("--at", help="Evaluate at this time.")] = None,
):
    """Count lessons due now or within the next DAYS days."""
    service = _build_service(ctx, progress_file)
    count = _run(service.count_upcoming(days_ahead=days, now=_parse_moment(at)))
    typer.echo(f"{count} lesson(s) due within {days} day(s)")


@app.command()
def stats(
    ctx: typer.Context,
    progress_file: ProgressFileArg = None,
    at: Annotated[str | None, typer.Option("--at", help="Evaluate at this time.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Emit JSON.")] = False,
):
    """Summarize progress: due, new, learning, mastered, ease and retention."""
    service = _build_service(ctx, progress_file)
    summary = asdict(_run(service.get_stats(now=_parse_moment(at))))

    if as_json:
        typer.echo(json.dumps(summary, indent=2))
        return

    dist = summary.pop("ease_distribution")
    for key, value in summary.items():
        typer.echo(f"{key.replace('_', ' '):>17}: {value}")
    typer.echo(f"{'ease low/med/high':>17}: {dist['low']}/{dist['medium']}/{dist['high']}")


@app.command()
def show(
    ctx: typer.Context,
    lesson_id: Annotated[str, typer.Argument(help="Lesson to show.")],
    progress_file: ProgressFileArg = None,
):
    """Show the stored scheduling state of one lesson."""
    service = _build_service(ctx, progress_file)
    item = _run(service.get_lesson(lesson_id))
    typer.echo(_describe(item))


@app.command()
def reset(
    ctx: typer.Context,
    lesson_id: Annotated[str, typer.Argument(help="Lesson to reset.")],
    progress_file: ProgressFileArg = None,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Skip the confirmation prompt.")
    ] = False,
):
    """Forget a lesson's history; it becomes new and due immediately."""
    if not force:
        typer.confirm(f"Reset all progress for '{lesson_id}'?", abort=True)
    service = _build_service(ctx, progress_file)
    item = _run(service.reset_lesson(lesson_id))
    typer.secho(f"Reset {item.lesson_id}.", fg="green")


@app.command()
def version():
    """Print the anamnesis version."""
    typer.echo(VERSION)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config: AppConfig = ctx.obj["config"]
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
