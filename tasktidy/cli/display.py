"""
Rich display helpers for the tasktidy CLI.
All terminal output goes through this module for consistency.
"""
from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..ingest.guard import IngestResult
from ..storage.models import DeduplicationStat, DuplicateGroup, Task

console = Console()


def _table() -> Table:
    return Table(
        show_header=True,
        header_style="bold",
        box=None,
        padding=(0, 1),
        show_edge=False,
    )


def _confidence_style(confidence: int) -> str:
    if confidence >= 85:
        return "bold green"
    if confidence >= 65:
        return "green"
    return "yellow"


# ── Task list ─────────────────────────────────────────────────────────────────

def print_task_list(tasks: list[Task]) -> None:
    if not tasks:
        console.print("[dim]No tasks found. Run 'tasktidy add' or 'tasktidy import' first.[/dim]")
        return

    table = _table()
    table.add_column("ID", style="dim", width=8, no_wrap=True)
    table.add_column("Created", width=13, no_wrap=True)
    table.add_column("Title", min_width=28)
    table.add_column("Source", style="cyan", width=9, no_wrap=True)
    table.add_column("Source ID", style="dim", width=12, no_wrap=True)
    table.add_column("Status", width=11, no_wrap=True)

    for t in tasks:
        table.add_row(
            t.id,
            t.created_at.strftime("%b %d  %H:%M"),
            t.title,
            t.source.value,
            (t.source_id or "—")[:12],
            t.status.value,
        )

    console.print(table)


# ── Duplicate groups ──────────────────────────────────────────────────────────

def print_group(group: DuplicateGroup, index: Optional[int] = None) -> None:
    prefix = f"{index}. " if index is not None else ""
    sources = ", ".join(s.value for s in group.sources)
    console.print(
        f"[bold]{prefix}\"{group.original.title}\"[/bold]  "
        f"[dim]{group.id}[/dim]"
    )
    console.print(
        f"   {group.total_count} similar tasks · "
        f"[{_confidence_style(group.confidence)}]{group.confidence}% confidence[/] · "
        f"[dim]Sources: {sources}[/dim]"
    )

    table = _table()
    table.add_column("", width=2, no_wrap=True)
    table.add_column("ID", style="dim", width=8, no_wrap=True)
    table.add_column("Title", min_width=28)
    table.add_column("Source", style="cyan", width=9, no_wrap=True)
    table.add_column("Priority", width=8, no_wrap=True)
    table.add_column("Created", width=13, no_wrap=True)

    for task in group.members:
        marker = "★" if task is group.original else ""
        table.add_row(
            marker,
            task.id,
            task.title,
            task.source.value,
            str(task.priority) if task.priority is not None else "—",
            task.created_at.strftime("%b %d  %H:%M"),
        )
    console.print(table)
    console.print()


def print_groups(groups: list[DuplicateGroup]) -> None:
    if not groups:
        console.print("[dim]No potential duplicates found.[/dim]")
        return

    console.print(
        f"\n[bold yellow]⚠[/bold yellow]  {len(groups)} group(s) of potentially "
        "duplicate tasks found\n"
    )
    for i, group in enumerate(groups, start=1):
        print_group(group, i)


# ── Stats ─────────────────────────────────────────────────────────────────────

def print_stats(stats: Optional[DeduplicationStat], timeframe: str) -> None:
    if stats is None:
        console.print("[dim]Deduplication statistics are unavailable right now.[/dim]")
        return

    console.print(Panel.fit(
        f"[bold]Duplicate prevention[/bold]  ·  last {timeframe}",
        border_style="dim",
    ))
    console.print(
        f"  Tasks processed:     [bold]{stats.total_tasks}[/bold]\n"
        f"  Duplicates avoided:  [bold green]{stats.duplicates_avoided}[/bold green]\n"
        f"  Deduplication rate:  [bold magenta]{stats.deduplication_rate}%[/bold magenta]"
    )
    console.print()

    if not stats.sources:
        return

    table = _table()
    table.add_column("Source", style="cyan", width=10, no_wrap=True)
    table.add_column("Tasks", width=6, no_wrap=True)
    table.add_column("Avoided", width=8, no_wrap=True)

    for source, data in sorted(stats.sources.items()):
        table.add_row(
            source,
            str(data.count),
            Text(str(data.duplicates), style="green" if data.duplicates else "dim"),
        )
    console.print(table)
    console.print()


def print_ingest_result(result: IngestResult) -> None:
    print_success(f"{result.created} task(s) created")
    if result.duplicates:
        print_info(f"  {result.duplicates} duplicate(s) skipped")
    if result.errors:
        print_warn(f"{result.errors} task(s) failed to save")


# ── Utility ───────────────────────────────────────────────────────────────────

def print_error(msg: str) -> None:
    console.print(f"\n[bold red]Error:[/bold red] {msg}\n")


def print_success(msg: str) -> None:
    console.print(f"[bold green]✓[/bold green]  {msg}")


def print_warn(msg: str) -> None:
    console.print(f"[yellow]⚠[/yellow]   {msg}")


def print_info(msg: str) -> None:
    console.print(f"[dim]{msg}[/dim]")
