"""
tasktidy CLI commands.

Commands:
  list          List a user's tasks
  add           Add a task through the duplicate guard
  import        Bulk-import tasks from a JSON file through the guard
  dupes         Show groups of potentially duplicate tasks
  merge         Keep one task of a group and delete the rest
  tidy          Keep the newest task of a group (or of every group)
  review        Walk through each group: keep one, keep newest, or ignore
  stats         Show duplicate prevention statistics
  config show   Print the effective configuration
  config path   Show the config file location
"""
from __future__ import annotations

import logging
from typing import Optional

import typer
import yaml
from rich.console import Console

from ..config import CONFIG_FILE, Config, load_config
from ..dedup.resolver import DuplicateResolver, newest_member
from ..dedup.stats import get_stats
from ..errors import TaskTidyError, ValidationError
from ..ingest.guard import create_task_if_unique, ingest_tasks
from ..ingest.json_adapter import load_tasks
from ..storage.db import Database
from ..storage.models import DuplicateGroup, Task, TaskSource, TaskStatus
from . import display

app = typer.Typer(
    name="tasktidy",
    help="Find and clean up duplicate tasks.",
    no_args_is_help=True,
    add_completion=False,
    pretty_exceptions_enable=False,
)
console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _bootstrap(user: Optional[str]) -> tuple[Config, Database, str]:
    config = load_config()
    _setup_logging(config.display.log_level)
    try:
        db = Database(config.db_path)
    except TaskTidyError as exc:
        display.print_error(f"Could not open task store: {exc}")
        raise typer.Exit(1)
    return config, db, user or config.user.user_id


def _resolver(config: Config, db: Database) -> DuplicateResolver:
    return DuplicateResolver(
        db,
        threshold=config.dedup.similarity_threshold,
        integration_sources=config.dedup.integration_sources,
    )


def _analyze(resolver: DuplicateResolver, user_id: str) -> list[DuplicateGroup]:
    try:
        return resolver.analyze_user(user_id)
    except TaskTidyError as exc:
        display.print_error(f"Could not load tasks: {exc}")
        raise typer.Exit(1)


_USER_OPTION = typer.Option(None, "--user", "-u", help="User or family id (default: from config)")


# ── list ──────────────────────────────────────────────────────────────────────

@app.command(name="list")
def list_tasks(
    user: Optional[str] = _USER_OPTION,
    status: Optional[TaskStatus] = typer.Option(None, "--status", "-s"),
) -> None:
    """List tasks, oldest first."""
    _, db, user_id = _bootstrap(user)
    display.print_task_list(db.list_tasks(user_id, status=status))


# ── add / import ──────────────────────────────────────────────────────────────

@app.command()
def add(
    title: str = typer.Argument(..., help="Task title"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    source: TaskSource = typer.Option(TaskSource.MANUAL, "--source"),
    source_id: Optional[str] = typer.Option(
        None, "--source-id", help="External id (calendar event, email message...)"
    ),
    priority: Optional[int] = typer.Option(None, "--priority", "-p"),
    user: Optional[str] = _USER_OPTION,
) -> None:
    """Add a task unless it duplicates one already stored."""
    _, db, user_id = _bootstrap(user)
    task = Task(
        title=title,
        description=description,
        source=source,
        source_id=source_id,
        priority=priority,
    )
    try:
        created = create_task_if_unique(db, user_id, task)
    except TaskTidyError as exc:
        display.print_error(str(exc))
        raise typer.Exit(1)

    if created:
        display.print_success(f"Created task {created.id}: {created.title}")
    else:
        display.print_warn(f"Skipped duplicate task: {title}")


@app.command(name="import")
def import_tasks(
    path: str = typer.Argument(..., help="JSON file with a list of tasks"),
    user: Optional[str] = _USER_OPTION,
) -> None:
    """Bulk-import tasks, skipping duplicates."""
    _, db, user_id = _bootstrap(user)
    try:
        tasks = load_tasks(path, user_id)
    except (OSError, ValidationError) as exc:
        display.print_error(str(exc))
        raise typer.Exit(1)

    result = ingest_tasks(db, user_id, tasks)
    display.print_ingest_result(result)


# ── dupes ─────────────────────────────────────────────────────────────────────

@app.command()
def dupes(user: Optional[str] = _USER_OPTION) -> None:
    """Show groups of potentially duplicate tasks."""
    config, db, user_id = _bootstrap(user)
    resolver = _resolver(config, db)
    groups = _analyze(resolver, user_id)
    display.print_groups(groups)


# ── merge / tidy ──────────────────────────────────────────────────────────────

@app.command()
def merge(
    group_id: str = typer.Argument(..., help="Group id as shown by 'tasktidy dupes'"),
    keep: str = typer.Argument(..., help="Id of the task to keep"),
    user: Optional[str] = _USER_OPTION,
) -> None:
    """Keep one task of a duplicate group and delete the others."""
    config, db, user_id = _bootstrap(user)
    resolver = _resolver(config, db)
    _analyze(resolver, user_id)

    if resolver.merge_duplicates(group_id, keep):
        display.print_success(f"Kept {keep}, removed the other duplicates in {group_id}")
    else:
        display.print_error(
            f"Could not merge {group_id}. Run 'tasktidy dupes' to refresh and try again."
        )
        raise typer.Exit(1)


@app.command()
def tidy(
    group_id: Optional[str] = typer.Argument(
        None, help="Group id (default: every group)"
    ),
    user: Optional[str] = _USER_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """Keep the newest task of each duplicate group and delete the rest."""
    config, db, user_id = _bootstrap(user)
    resolver = _resolver(config, db)
    groups = _analyze(resolver, user_id)

    if group_id is not None:
        group = resolver.get_group(group_id)
        if group is None:
            display.print_error(f"Group '{group_id}' not found.")
            raise typer.Exit(1)
        groups = [group]

    if not groups:
        display.print_info("No potential duplicates found.")
        return

    removable = sum(g.total_count - 1 for g in groups)
    if not yes and not typer.confirm(
        f"Delete {removable} duplicate task(s) across {len(groups)} group(s)?"
    ):
        raise typer.Exit(0)

    failed = 0
    for group in groups:
        if not resolver.remove_all_but_newest(group):
            failed += 1

    if failed:
        display.print_warn(f"{failed} group(s) could not be merged. Try again later.")
        raise typer.Exit(1)
    display.print_success(f"Removed {removable} duplicate task(s)")


# ── review ────────────────────────────────────────────────────────────────────

@app.command()
def review(user: Optional[str] = _USER_OPTION) -> None:
    """
    Walk through each duplicate group.
    For each one choose a task number to keep, 'n' to keep the newest,
    or press Enter to ignore it for now.
    """
    config, db, user_id = _bootstrap(user)
    resolver = _resolver(config, db)
    groups = _analyze(resolver, user_id)

    if not groups:
        display.print_info("No potential duplicates found.")
        return

    merged = 0
    for index, group in enumerate(groups, start=1):
        display.print_group(group, index)
        choice = typer.prompt(
            f"Keep which task? [1-{group.total_count}, n=newest, Enter=ignore]",
            default="",
            show_default=False,
        ).strip().lower()

        if not choice:
            resolver.dismiss(group.id)
            continue

        if choice == "n":
            keep = newest_member(group)
        elif choice.isdigit() and 1 <= int(choice) <= group.total_count:
            keep = group.members[int(choice) - 1]
        else:
            display.print_warn(f"Unrecognized choice '{choice}', ignoring this group.")
            resolver.dismiss(group.id)
            continue

        if resolver.merge_duplicates(group.id, keep.id):
            merged += 1
            display.print_success(f"Kept \"{keep.title}\" ({keep.id})")
        else:
            display.print_error(f"Could not merge {group.id}; it was left unchanged.")

    console.print()
    ignored = len(groups) - merged - len(resolver.groups)
    display.print_info(
        f"{merged} group(s) merged, {ignored} ignored. "
        "Run 'tasktidy dupes' to re-check."
    )


# ── stats ─────────────────────────────────────────────────────────────────────

@app.command()
def stats(
    timeframe: Optional[str] = typer.Option(
        None, "--timeframe", "-t", help="Look-back window, e.g. '7 days' or '24h'"
    ),
    user: Optional[str] = _USER_OPTION,
) -> None:
    """Show how many duplicates were prevented, per source."""
    config, db, user_id = _bootstrap(user)
    window = timeframe or config.stats.default_timeframe
    try:
        result = get_stats(db, user_id, window)
    except ValidationError as exc:
        display.print_error(str(exc))
        raise typer.Exit(1)
    display.print_stats(result, window)


# ── config ────────────────────────────────────────────────────────────────────

config_app = typer.Typer(name="config", help="View configuration.", no_args_is_help=True)
app.add_typer(config_app)


@config_app.command("show")
def config_show() -> None:
    """Print current configuration."""
    config = load_config()
    console.print(yaml.safe_dump(config.model_dump(mode="json"), default_flow_style=False))


@config_app.command("path")
def config_path() -> None:
    """Show path to the config file."""
    console.print(str(CONFIG_FILE))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
