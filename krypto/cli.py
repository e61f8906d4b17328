"""
krypto: terminal front-end for the review engine.

Commands:
- krypto init     - Create the item universe
- krypto queue    - Show the next review batch
- krypto grade    - Record one review
- krypto stats    - Per-type progress, unlock gates and streaks
- krypto item     - Show one item's scheduling state
- krypto export   - Write a JSON backup
- krypto import   - Restore from a JSON backup
- krypto reset    - Clear all progress
"""
from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from .config import Settings, get_settings
from .engine import ReviewEngine, load_snapshot, now_ms, save_snapshot
from .srs.errors import KryptoError
from .srs.models import ItemType, ReviewItem


# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="krypto",
    help="krypto: spaced repetition for Greek letters and endings",
    no_args_is_help=True,
)
console = Console()

TYPE_COLORS = {
    ItemType.LETTER: "cyan",
    ItemType.NOUN_ENDING: "magenta",
    ItemType.VERB_ENDING: "blue",
}


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr (and an optional rotating file)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="10 MB",
            retention=3,
            encoding="utf-8",
        )


@app.callback()
def _setup() -> None:
    configure_logging(get_settings())


@contextmanager
def _engine() -> Iterator[ReviewEngine]:
    """Engine for one command; engine errors end the command with exit code 1."""
    engine = None
    try:
        engine = ReviewEngine.from_settings(get_settings())
        yield engine
    except KryptoError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(1)
    finally:
        if engine is not None and hasattr(engine.store, "close"):
            engine.store.close()


# =============================================================================
# Display Helpers
# =============================================================================


def style_item_type(item_type: ItemType) -> str:
    color = TYPE_COLORS[item_type]
    return f"[{color}]{item_type.value}[/{color}]"


def format_timestamp(ms: int) -> str:
    if ms <= 0:
        return "never"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def display_item(engine: ReviewEngine, item: ReviewItem) -> None:
    """Show an item's full state as a panel."""
    status = engine.classify(item)

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Type", style_item_type(item.item_type))
    table.add_row("Status", f"[{status.color}]{status.value}[/{status.color}]")
    table.add_row("Easiness", f"{item.easiness_factor:.2f}")
    table.add_row("Interval", f"{item.interval_days} d")
    table.add_row("Repetitions", str(item.repetitions))
    table.add_row("Next review", format_timestamp(item.next_review_date))
    table.add_row("Last review", format_timestamp(item.last_review_date))
    table.add_row("Reviews", f"{item.correct_reviews}/{item.total_reviews}")
    table.add_row("Accuracy", f"{item.accuracy * 100:.1f}%")
    table.add_row("Avg response", f"{item.average_response_time:.0f} ms")

    console.print(Panel(table, title=item.id, title_align="left", border_style="cyan"))


# =============================================================================
# Commands
# =============================================================================


@app.command()
def init() -> None:
    """Create default-state items for the whole universe."""
    with _engine() as engine:
        created = engine.initialize(now_ms())

    if created:
        console.print(f"[green]Created {created} review items[/green]")
    else:
        console.print("[yellow]Already initialized, nothing to do.[/yellow]")


@app.command()
def queue(
    item_type: Optional[ItemType] = typer.Option(
        None,
        "--type", "-t",
        help="Restrict to one item type",
    ),
    size: Optional[int] = typer.Option(
        None,
        "--size", "-n",
        help="Batch size (defaults to QUIZ_SIZE)",
    ),
    ratio: Optional[float] = typer.Option(
        None,
        "--ratio", "-r",
        help="Maximum share of new items, 0-1",
    ),
) -> None:
    """Show the next mixed review batch."""
    with _engine() as engine:
        try:
            batch = engine.get_queue(now_ms(), item_type, size=size, new_item_ratio=ratio)
        except ValueError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            raise typer.Exit(1)

    if not batch:
        console.print("[green]Nothing due for review![/green]")
        return

    table = Table(title=f"Review batch ({len(batch)})")
    table.add_column("#", style="dim")
    table.add_column("ID")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Interval", justify="right")

    for i, item in enumerate(batch, 1):
        status = "[green]new[/green]" if item.is_new else "[yellow]due[/yellow]"
        table.add_row(
            str(i), item.id, style_item_type(item.item_type), status, f"{item.interval_days} d"
        )

    console.print(table)


@app.command()
def grade(
    item_id: str = typer.Argument(..., help="Item to grade"),
    correct: bool = typer.Option(
        ...,
        "--correct/--wrong",
        help="Whether the answer was correct",
    ),
    response_ms: int = typer.Option(
        ...,
        "--ms",
        help="Response time in milliseconds",
    ),
) -> None:
    """Record one review and show the updated state."""
    with _engine() as engine:
        item = engine.grade_review(item_id, correct, response_ms, now_ms())
        display_item(engine, item)


@app.command()
def stats(
    item_type: Optional[ItemType] = typer.Option(
        None,
        "--type", "-t",
        help="Show a single item type",
    ),
) -> None:
    """Show per-type statistics, unlock gates and practice streaks."""
    with _engine() as engine:
        progress = engine.get_progress(now_ms())

    types = [item_type] if item_type else list(ItemType)

    table = Table(title="Learning Statistics")
    table.add_column("Type")
    table.add_column("Total", justify="right")
    table.add_column("Mastered", justify="right", style="green")
    table.add_column("Learning", justify="right", style="yellow")
    table.add_column("Not started", justify="right", style="dim")
    table.add_column("Accuracy", justify="right")
    table.add_column("Due", justify="right")
    table.add_column("Unlocked")

    for t in types:
        s = progress.stats[t]
        unlocked = "[green]yes[/green]" if progress.is_unlocked(t) else "[red]no[/red]"
        table.add_row(
            style_item_type(t),
            str(s.total),
            f"{s.mastered} ({s.mastery_percent:.0f}%)",
            str(s.learning),
            str(s.not_started),
            f"{s.overall_accuracy:.1f}%",
            str(s.due_now),
            unlocked,
        )

    console.print(table)

    activity = progress.activity
    summary = Table(show_header=False, box=None)
    summary.add_column("Metric", style="dim")
    summary.add_column("Value", style="bold")

    summary.add_row("Current streak", f"{activity.current_streak} days")
    summary.add_row("Best streak", f"{activity.best_streak} days")
    summary.add_row("Last practice", format_timestamp(activity.last_practice_date))
    summary.add_row("Sessions", str(activity.total_sessions))
    summary.add_row("Reviews", str(activity.total_reviews))
    summary.add_row("Time spent", f"{activity.total_time_spent_ms / 60000:.1f} min")

    console.print("\n[bold]Practice[/bold]")
    console.print(summary)


@app.command()
def item(item_id: str = typer.Argument(..., help="Item to show")) -> None:
    """Show one item's scheduling state."""
    with _engine() as engine:
        display_item(engine, engine.get_item(item_id))


@app.command("export")
def export_cmd(path: Path = typer.Argument(..., help="Destination JSON file")) -> None:
    """Write all items and the review log to a JSON file."""
    with _engine() as engine:
        data = engine.export_data(now_ms())
    save_snapshot(path, data)
    console.print(f"[green]Exported {len(data['items'])} items to {path}[/green]")


@app.command("import")
def import_cmd(path: Path = typer.Argument(..., help="JSON backup to restore")) -> None:
    """Restore items and reviews from a JSON backup."""
    if not path.exists():
        console.print(f"[bold red]Error:[/bold red] {path} not found")
        raise typer.Exit(1)

    with _engine() as engine:
        try:
            count = engine.import_data(load_snapshot(path))
        except (json.JSONDecodeError, KeyError, ValueError) as exc:
            console.print(f"[bold red]Error:[/bold red] invalid backup: {exc}")
            raise typer.Exit(1)

    console.print(f"[green]Imported {count} items from {path}[/green]")


@app.command()
def reset(
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
) -> None:
    """Clear all progress and recreate the universe."""
    if not confirm and not Confirm.ask(
        "Reset ALL review progress? This cannot be undone!", default=False
    ):
        raise typer.Exit(0)

    with _engine() as engine:
        count = engine.reset(now_ms())

    console.print(f"[green]All review progress has been reset ({count} items).[/green]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
