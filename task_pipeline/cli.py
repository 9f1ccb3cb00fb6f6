"""CLI for the task pipeline."""

import json
import time
from datetime import date, datetime
from pathlib import Path
from typing import NoReturn, Optional, Union

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from task_pipeline.extractors.pipeline import parse_task
from task_pipeline.models import Category, StoredTask, TaskDraft, category_label, format_time_of_day
from task_pipeline.normalizers.category import matched_keywords
from task_pipeline.reminders import Reminder, print_reminders, scan_reminders
from task_pipeline.task_store import BATCH_ACTIONS, TaskNotFoundError, TaskStore

# Load environment variables (override=True to beat shell env vars)
load_dotenv(override=True)

app = typer.Typer(
    name="task-pipeline",
    help="Turn free-form task sentences into structured tasks",
    add_completion=False,
)
console = Console()

STORE_OPTION_HELP = "Task store file (default: TASK_STORE_PATH env var or .cache/tasks.json)"


def _open_store(store_path: Optional[Path]) -> TaskStore:
    return TaskStore(store_path)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


def _day(value: Optional[datetime]) -> date:
    return value.date() if value else date.today()


def print_draft(draft: Union[TaskDraft, StoredTask]) -> None:
    """Print a parsed draft (or stored task) as a two-column table."""
    table = Table(title="Parsed task", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Title", escape(draft.title))
    table.add_row("Category", category_label(draft.category))
    table.add_row("Due", draft.due_date.isoformat() if draft.due_date else "-")
    table.add_row("Start", format_time_of_day(draft.start_time) or "-")
    table.add_row("End", format_time_of_day(draft.end_time) or "-")
    table.add_row("Links", escape("\n".join(draft.links)) or "-")
    table.add_row("Details", escape(draft.details) or "-")

    console.print(table)


def print_tasks(tasks: list[StoredTask], title: str) -> None:
    """Print a summary table of stored tasks."""
    table = Table(title=f"{title} ({len(tasks)})")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan", max_width=25)
    table.add_column("Due", style="red")
    table.add_column("Time", style="magenta")
    table.add_column("Category", style="blue")
    table.add_column("Done", justify="center")

    for task in tasks:
        start = format_time_of_day(task.start_time)
        end = format_time_of_day(task.end_time)
        time_str = f"{start}-{end}" if start and end else (start or end or "-")

        table.add_row(
            task.id,
            escape(task.title),
            task.due_date.isoformat() if task.due_date else "?",
            time_str,
            category_label(task.category),
            "✓" if task.completed else "",
        )

    console.print(table)


@app.command()
def parse(
    text: str = typer.Argument(..., help="Task sentence to parse"),
    now: Optional[datetime] = typer.Option(None, "--now", "-n", help="Reference time (default: current time)"),
    as_json: bool = typer.Option(False, "--json", help="Print the draft as JSON"),
    explain: bool = typer.Option(False, "--explain", "-e", help="Show matched category keywords"),
):
    """Parse a task sentence without storing it."""
    if not text.strip():
        _fail("Task text must not be empty")

    draft = parse_task(text, now or datetime.now())

    if as_json:
        typer.echo(json.dumps(draft.to_record(), ensure_ascii=False, indent=2))
        return

    print_draft(draft)

    if explain:
        hits = matched_keywords(draft.details)
        console.print("\n[bold]Category keywords:[/bold]")
        if not hits:
            console.print("  [dim]none matched[/dim]")
        for category, keywords in hits.items():
            console.print(f"  {category_label(category)}: {escape(', '.join(keywords))}")


@app.command()
def add(
    text: str = typer.Argument(..., help="Task sentence"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Parse a task sentence and save it to the store."""
    store = _open_store(store_path)
    try:
        task = store.create(text)
    except ValueError as e:
        _fail(str(e))

    console.print(f"[green]Added task {task.id}[/green]")
    print_draft(task)


@app.command("list")
def list_tasks(
    include_completed: bool = typer.Option(True, "--all/--pending", help="Include completed tasks"),
    category: Optional[Category] = typer.Option(None, "--category", "-c", help="Only this category"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """List stored tasks."""
    tasks = _open_store(store_path).get_all()

    if not include_completed:
        tasks = [task for task in tasks if not task.completed]
    if category:
        tasks = [task for task in tasks if task.category == category]

    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        raise typer.Exit(0)

    print_tasks(tasks, title="Tasks")


@app.command()
def done(
    task_id: str = typer.Argument(..., help="Task ID"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Mark a task as completed."""
    store = _open_store(store_path)
    try:
        task = store.update(task_id, completed=True)
    except TaskNotFoundError:
        _fail(f"Task not found: {task_id}")

    console.print(f"[green]Completed: {escape(task.title)}[/green]")


@app.command()
def update(
    task_id: str = typer.Argument(..., help="Task ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    due: Optional[datetime] = typer.Option(None, "--due", "-d", formats=["%Y-%m-%d"]),
    start: Optional[str] = typer.Option(None, "--start", help="Start time HH:MM"),
    end: Optional[str] = typer.Option(None, "--end", help="End time HH:MM"),
    category: Optional[Category] = typer.Option(None, "--category", "-c"),
    completed: Optional[bool] = typer.Option(None, "--completed/--not-completed"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Update fields of a stored task."""
    changes = {
        "title": title,
        "due_date": due.date() if due else None,
        "start_time": start,
        "end_time": end,
        "category": category,
        "completed": completed,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        _fail("Nothing to update")

    store = _open_store(store_path)
    try:
        task = store.update(task_id, **changes)
    except TaskNotFoundError:
        _fail(f"Task not found: {task_id}")
    except ValueError as e:
        _fail(str(e))

    print_tasks([task], title="Updated")


@app.command()
def delete(
    task_id: str = typer.Argument(..., help="Task ID"),
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Delete a task."""
    if not confirm:
        typer.confirm(f"Delete task '{task_id}'?", abort=True)

    store = _open_store(store_path)
    try:
        store.delete(task_id)
    except TaskNotFoundError:
        _fail(f"Task not found: {task_id}")

    console.print(f"[green]Deleted task {task_id}[/green]")


@app.command()
def batch(
    action: str = typer.Argument(..., help=f"One of: {', '.join(sorted(BATCH_ACTIONS))}"),
    task_ids: list[str] = typer.Argument(..., help="Task IDs"),
    data: Optional[str] = typer.Option(None, "--data", help="JSON object of fields (for 'update')"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Delete, complete or update several tasks at once."""
    try:
        changes = json.loads(data) if data else None
    except json.JSONDecodeError as e:
        _fail(f"Invalid --data JSON: {e}")
    if changes is not None and not isinstance(changes, dict):
        _fail("--data must be a JSON object")

    store = _open_store(store_path)
    try:
        affected = store.batch(action, task_ids, changes)
    except ValueError as e:
        _fail(str(e))

    console.print(f"[green]{action}: {affected} task(s)[/green]")


def _scan_store(store_path: Optional[Path], today: Optional[datetime]) -> list[Reminder]:
    """Scan the store once; save it when a reminder flag was set."""
    store = _open_store(store_path)
    reminders = scan_reminders(store.get_all(), _day(today))
    if reminders:
        store.save()
    return reminders


@app.command()
def remind(
    today: Optional[datetime] = typer.Option(None, "--today", formats=["%Y-%m-%d"], help="Override today's date"),
    watch: bool = typer.Option(False, "--watch", "-w", help="Keep rescanning on a timer"),
    interval: int = typer.Option(600, "--interval", "-i", min=1, help="Seconds between scans in watch mode"),
    max_scans: int = typer.Option(0, "--max-scans", min=0, help="Stop after this many scans (0 = run until Ctrl+C)"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Show due reminders and mark them as sent."""
    if not watch:
        print_reminders(_scan_store(store_path, today))
        return

    console.print(f"[bold]Watching for reminders every {interval}s[/bold] [dim](Ctrl+C to stop)[/dim]")
    scans = 0
    try:
        while True:
            # Reopened each time so tasks added meanwhile are seen
            reminders = _scan_store(store_path, today)
            if reminders:
                print_reminders(reminders)

            scans += 1
            if max_scans and scans >= max_scans:
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped watching[/yellow]")

    console.print(f"[dim]{scans} scan(s) done[/dim]")


@app.command()
def stats(
    today: Optional[datetime] = typer.Option(None, "--today", formats=["%Y-%m-%d"], help="Override today's date"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Show task statistics."""
    result = _open_store(store_path).stats(_day(today))

    console.print(f"\n[bold]Task Statistics[/bold]")
    console.print(f"  Total: {result['total']}")
    console.print(f"  Completed: [green]{result['completed']}[/green]")
    console.print(f"  Pending: {result['pending']}")
    console.print(f"  Overdue: [red]{result['overdue']}[/red]")
    console.print(f"  Due today: [yellow]{result['dueToday']}[/yellow]")
    console.print(f"  Due tomorrow: {result['dueTomorrow']}")
    console.print(f"  Due this week: {result['dueThisWeek']}")

    console.print(f"\n[bold]By Category:[/bold]")
    for category, count in result["byCategory"].items():
        console.print(f"  {category_label(category)}: {count}")


@app.command()
def export(
    output: Path = typer.Option(Path("tasks-export.json"), "--output", "-o", help="Export file"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Export all tasks to a JSON file."""
    data = _open_store(store_path).export_data()

    with open(output, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    console.print(f"[green]Exported {len(data['tasks'])} tasks to {output}[/green]")


@app.command("import")
def import_tasks(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File produced by 'export'"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """Import tasks from an export file, skipping ids already stored."""
    try:
        with open(input_file, encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON in {input_file}: {e}")

    store = _open_store(store_path)
    try:
        imported, total = store.import_data(payload)
    except ValueError as e:
        _fail(str(e))

    console.print(f"[green]Imported {imported} new task(s), {total} total[/green]")


if __name__ == "__main__":
    app()
