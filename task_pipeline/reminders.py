"""Due-date reminders for stored tasks.

Each task can fire two reminders, each at most once:
- "today" when it is due today
- "three_days" when it is due three days from today
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from rich.console import Console
from rich.markup import escape

from task_pipeline.models import StoredTask, category_label, format_time_of_day

console = Console()

REMINDER_LEAD_DAYS = 3
DETAILS_PREVIEW_LENGTH = 50


@dataclass
class Reminder:
    """A reminder ready to be shown to the user."""

    type: str  # "today" or "three_days"
    task: StoredTask
    message: str
    time: Optional[str] = None


def _time_line(task: StoredTask) -> Optional[str]:
    if task.start_time is None:
        return None
    return f"时间: {format_time_of_day(task.start_time)}"


def scan_reminders(tasks: list[StoredTask], today: date) -> list[Reminder]:
    """Collect due reminders and mark them as sent on the tasks.

    Only open tasks with a due date are considered. A flag that is already
    set is never fired again.
    """
    lead_date = today + timedelta(days=REMINDER_LEAD_DAYS)
    reminders = []

    for task in tasks:
        if task.due_date is None or task.completed:
            continue

        if task.due_date == today and not task.today_reminded:
            reminders.append(Reminder(
                type="today",
                task=task,
                message=f"今天截止: {task.title}",
                time=_time_line(task),
            ))
            task.today_reminded = True

        if task.due_date == lead_date and not task.three_day_reminded:
            reminders.append(Reminder(
                type="three_days",
                task=task,
                message=f"{REMINDER_LEAD_DAYS}天后截止: {task.title}",
                time=_time_line(task),
            ))
            task.three_day_reminded = True

    return reminders


def print_reminders(reminders: list[Reminder]) -> None:
    """Print reminders to the console."""
    if not reminders:
        console.print("[dim]No reminders due[/dim]")
        return

    console.print(f"\n[bold]📋 {len(reminders)} reminder(s)[/bold]")
    for reminder in reminders:
        console.print(f"🔔 {escape(reminder.message)}")
        if reminder.time:
            console.print(f"   {reminder.time}")
        console.print(f"   分类: {category_label(reminder.task.category)}")
        console.print(f"   [dim]详情: {escape(reminder.task.details[:DETAILS_PREVIEW_LENGTH])}...[/dim]")
        console.print()
