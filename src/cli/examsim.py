"""
Operator CLI for the exam simulator.

Commands:
    examsim validate           - Load the bank (+ packs) and summarise it
    examsim preview MODE       - Show the question ids a mode + seed produces
    examsim due                - Spaced-repetition items due on a date
    examsim history            - List stored sessions

Usage:
    examsim validate data/economics_exam_bank_v1.json --packs data/packs
    examsim preview full_sim_2 --seed 42 --include-mcq
    examsim due --date 2026-01-10
"""

from __future__ import annotations

import sys
from collections import Counter
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from src.bank.loader import BankCache, BankLoadError
from src.bank.models import ExamBank
from src.bank.resolve import UnknownExamSetError
from src.core.modes import ExamType
from src.review.store import ReviewStore
from src.selection.categories import LEGACY_SCHEME
from src.session.builder import create_session
from src.session.history import SessionHistoryStore
from src.storage.kv import JsonFileStore

console = Console()

app = typer.Typer(
    name="examsim",
    help="Exam simulator: bank validation, selection preview and review state",
    no_args_is_help=True,
)


def _load_bank(bank_path: Optional[Path], packs: Optional[Path]) -> ExamBank:
    settings = get_settings()
    cache = BankCache(
        path=bank_path or settings.bank_path,
        url=None if bank_path else settings.bank_url,
        pack_dir=packs or settings.pack_dir,
    )
    try:
        return cache.get()
    except BankLoadError as e:
        logger.error(str(e))
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1) from e


def _data_store(data_dir: Optional[Path]) -> JsonFileStore:
    return JsonFileStore(data_dir or get_settings().data_dir)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def validate(
    bank_path: Annotated[
        Optional[Path], typer.Argument(help="Bank document (defaults to EXAMSIM_BANK_PATH)")
    ] = None,
    packs: Annotated[
        Optional[Path], typer.Option("--packs", "-p", help="Directory of supplementary packs")
    ] = None,
) -> None:
    """
    Validate a bank and print counts per question type and category.

    Exit codes:
        0 - Bank is valid
        1 - Bank could not be loaded or failed validation
    """
    bank = _load_bank(bank_path, packs)

    by_type = Counter(q.question_type.value for q in bank.bank)
    by_category = Counter(LEGACY_SCHEME.classify(q.topic, q.prompt) for q in bank.bank)

    table = Table(title=f"{bank.module} ({bank.assessment}) v{bank.version}")
    table.add_column("Question type", style="cyan")
    table.add_column("Count", justify="right")
    for question_type, count in sorted(by_type.items()):
        table.add_row(question_type, str(count))
    console.print(table)

    categories = Table(title="Topic categories")
    categories.add_column("Category", style="magenta")
    categories.add_column("Count", justify="right")
    for category in LEGACY_SCHEME.categories:
        categories.add_row(category, str(by_category.get(category, 0)))
    console.print(categories)

    console.print(
        f"[green]✓ {len(bank.bank)} questions, {len(bank.exam_sets)} exam sets, "
        f"{len(bank.templates)} templates[/green]"
    )


@app.command()
def preview(
    mode: Annotated[ExamType, typer.Argument(help="Exam type to assemble")],
    seed: Annotated[Optional[str], typer.Option("--seed", "-s", help="Integer or string seed")] = None,
    set_id: Annotated[Optional[str], typer.Option("--set", help="Legacy exam set id")] = None,
    include_mcq: Annotated[bool, typer.Option("--include-mcq", help="Full sim 2: add 5 MCQs")] = False,
    pack: Annotated[Optional[str], typer.Option("--pack", help="Drill pack or topic")] = None,
    shuffle: Annotated[bool, typer.Option("--shuffle", help="Shuffle the question order")] = False,
    bank_path: Annotated[Optional[Path], typer.Option("--bank", "-b", help="Bank document")] = None,
    packs: Annotated[Optional[Path], typer.Option("--packs", "-p", help="Pack directory")] = None,
    data_dir: Annotated[Optional[Path], typer.Option("--data-dir", help="Persistence directory")] = None,
) -> None:
    """Print the question ids a mode would produce, without saving a session."""
    bank = _load_bank(bank_path, packs)
    review_map = ReviewStore(_data_store(data_dir)).load() if mode is ExamType.REVIEW else None
    parsed_seed = int(seed) if seed is not None and seed.lstrip("-").isdigit() else seed

    try:
        result = create_session(
            bank,
            mode,
            seed=parsed_seed,
            set_id=set_id,
            shuffle=shuffle,
            include_mcq=include_mcq,
            pack=pack,
            review_map=review_map,
        )
    except UnknownExamSetError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1) from e

    if not result.ok:
        console.print(Panel(result.error or "", title="Selection failed", border_style="red"))
        raise typer.Exit(1)

    session = result.session
    table = Table(title=f"{mode.value} seed={session.seed} ({session.time_limit_seconds // 60} min)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Id", style="cyan")
    table.add_column("Type")
    table.add_column("Topic")
    for index, question in enumerate(result.questions, start=1):
        table.add_row(str(index), question.entry_id, question.type.value, question.question.topic)
    console.print(table)


@app.command()
def due(
    on: Annotated[
        Optional[str], typer.Option("--date", "-d", help="Date to evaluate (YYYY-MM-DD, default today)")
    ] = None,
    data_dir: Annotated[Optional[Path], typer.Option("--data-dir", help="Persistence directory")] = None,
) -> None:
    """Show spaced-repetition items due on a date."""
    try:
        today = date.fromisoformat(on) if on else date.today()
    except ValueError as e:
        console.print(f"[red]✗ Invalid date: {on}[/red]")
        raise typer.Exit(2) from e

    store = ReviewStore(_data_store(data_dir))
    review_map = store.load()
    due_ids = store.due_ids(today)

    console.print(f"[bold]{len(due_ids)}[/bold] due on {today.isoformat()} ({len(review_map)} tracked)")
    if due_ids:
        table = Table()
        table.add_column("Id", style="cyan")
        table.add_column("Topic")
        table.add_column("Stage", justify="right")
        table.add_column("Next review")
        for question_id in due_ids:
            entry = review_map[question_id]
            table.add_row(entry.id, entry.topic, str(entry.stage), entry.next_review.isoformat())
        console.print(table)


@app.command()
def history(
    data_dir: Annotated[Optional[Path], typer.Option("--data-dir", help="Persistence directory")] = None,
) -> None:
    """List stored sessions, most recent first."""
    store = SessionHistoryStore(_data_store(data_dir), limit=get_settings().history_limit)
    sessions = store.load_sessions()
    if not sessions:
        console.print("[dim]No sessions stored.[/dim]")
        return

    active_id = store.get_active_id()
    table = Table(title="Session history")
    table.add_column("Id", style="cyan")
    table.add_column("Type")
    table.add_column("Mode")
    table.add_column("Created")
    table.add_column("Questions", justify="right")
    table.add_column("Status")
    for session in sessions:
        status = "submitted" if session.submitted_at else "in progress"
        marker = " *" if session.id == active_id else ""
        table.add_row(
            session.id + marker,
            session.exam_type.value,
            session.mode.value,
            _format_time(session.created_at),
            str(len(session.question_ids)),
            status,
        )
    console.print(table)


def _format_time(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB", retention=5)

    app()


if __name__ == "__main__":
    main()
