"""JSON file store for parsed tasks."""

import json
import os
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from rich.console import Console

from task_pipeline.extractors.pipeline import parse_task
from task_pipeline.models import Category, StoredTask

console = Console()

STORE_DIR = Path(".cache")
STORE_FILE = STORE_DIR / "tasks.json"

EXPORT_VERSION = "2.0"

# Never overwritten through update()/batch()
PROTECTED_FIELDS = {"id", "created_at"}

# camelCase record keys -> model field names
ALIAS_TO_FIELD = {
    field.alias: name for name, field in StoredTask.model_fields.items() if field.alias
}

BATCH_ACTIONS = {"delete", "complete", "update"}


class TaskNotFoundError(KeyError):
    """Raised when a task id is not in the store."""


def default_store_path() -> Path:
    """Store location from TASK_STORE_PATH, else the local cache file."""
    env_path = os.environ.get("TASK_STORE_PATH")
    return Path(env_path) if env_path else STORE_FILE


class TaskStore:
    """Manages the persistent list of tasks, kept in insertion order."""

    def __init__(self, store_path: Optional[Path] = None):
        self.store_path = Path(store_path) if store_path else default_store_path()
        self._tasks: list[StoredTask] = []
        self._load()

    def _load(self) -> None:
        """Load store from disk. A missing file is an empty store."""
        if not self.store_path.exists():
            return
        try:
            with open(self.store_path, encoding="utf-8") as f:
                data = json.load(f)
            self._tasks = [StoredTask.model_validate(item) for item in data]
            console.print(f"[dim]Loaded {len(self._tasks)} tasks from store[/dim]")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, TypeError, ValidationError) as e:
            console.print(f"[yellow]Failed to load task store: {e}[/yellow]")
            self._tasks = []

    def save(self) -> None:
        """Write the store to disk."""
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_path, "w", encoding="utf-8") as f:
            json.dump(
                [task.to_record() for task in self._tasks],
                f,
                ensure_ascii=False,
                indent=2,
            )

    def _new_id(self, now: datetime) -> str:
        """Millisecond timestamp id, suffixed if already taken."""
        base = str(int(now.timestamp() * 1000))
        existing = {task.id for task in self._tasks}
        task_id, n = base, 1
        while task_id in existing:
            task_id = f"{base}-{n}"
            n += 1
        return task_id

    def _index(self, task_id: str) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        raise TaskNotFoundError(task_id)

    def create(self, text: str, now: Optional[datetime] = None) -> StoredTask:
        """Parse text into a new task and persist it.

        Raises:
            ValueError: text is empty or whitespace only.
        """
        if not isinstance(text, str) or not text.strip():
            raise ValueError("Task text must not be empty")

        now = now or datetime.now()
        draft = parse_task(text, now)
        task = StoredTask.from_draft(draft, self._new_id(now), now)

        self._tasks.append(task)
        self.save()
        return task

    def get_all(self) -> list[StoredTask]:
        """Get all tasks in store."""
        return list(self._tasks)

    def get(self, task_id: str) -> StoredTask:
        return self._tasks[self._index(task_id)]

    def _apply(self, task: StoredTask, changes: dict[str, Any], now: datetime) -> StoredTask:
        renamed = {ALIAS_TO_FIELD.get(k, k): v for k, v in changes.items()}
        allowed = {k: v for k, v in renamed.items() if k not in PROTECTED_FIELDS}
        merged = {**task.model_dump(), **allowed, "updated_at": now}
        return StoredTask.model_validate(merged)

    def update(self, task_id: str, now: Optional[datetime] = None, **changes: Any) -> StoredTask:
        """Merge changes into a task; id and creation time never change."""
        index = self._index(task_id)
        task = self._apply(self._tasks[index], changes, now or datetime.now())
        self._tasks[index] = task
        self.save()
        return task

    def delete(self, task_id: str) -> None:
        del self._tasks[self._index(task_id)]
        self.save()

    def batch(
        self,
        action: str,
        task_ids: list[str],
        data: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Apply delete/complete/update to many tasks at once.

        Unknown ids are ignored. Returns the number of tasks affected.

        Raises:
            ValueError: unsupported action.
        """
        if action not in BATCH_ACTIONS:
            raise ValueError(f"Unsupported batch action: {action}")

        now = now or datetime.now()
        ids = set(task_ids)
        affected = sum(1 for task in self._tasks if task.id in ids)

        if action == "delete":
            self._tasks = [task for task in self._tasks if task.id not in ids]
        else:
            changes = {"completed": True} if action == "complete" else (data or {})
            self._tasks = [
                self._apply(task, changes, now) if task.id in ids else task
                for task in self._tasks
            ]

        self.save()
        return affected

    def export_data(self, now: Optional[datetime] = None) -> dict:
        """Snapshot of the whole store for backup."""
        return {
            "exportDate": (now or datetime.now()).isoformat(),
            "tasks": [task.to_record() for task in self._tasks],
            "version": EXPORT_VERSION,
        }

    def import_data(self, payload: Any) -> tuple[int, int]:
        """Merge an export payload; tasks whose id already exists are skipped.

        Returns:
            (number imported, total after import)

        Raises:
            ValueError: payload has no task list, or a task is malformed.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("tasks"), list):
            raise ValueError("Import payload must contain a 'tasks' list")

        existing = {task.id for task in self._tasks}
        new_tasks = []
        for item in payload["tasks"]:
            try:
                task = StoredTask.model_validate(item)
            except ValidationError as e:
                raise ValueError(f"Malformed task in import: {e}") from e
            if task.id in existing:
                continue
            existing.add(task.id)
            new_tasks.append(task)

        self._tasks.extend(new_tasks)
        self.save()
        return len(new_tasks), len(self._tasks)

    def stats(self, today: Optional[date] = None) -> dict:
        """Get store statistics relative to today."""
        today = today or date.today()
        tomorrow = today + timedelta(days=1)
        next_week = today + timedelta(days=7)

        pending = [task for task in self._tasks if not task.completed]
        dated = [task for task in pending if task.due_date]

        by_category = {category.value: 0 for category in Category}
        for task in self._tasks:
            by_category[task.category.value] += 1

        return {
            "total": len(self._tasks),
            "completed": len(self._tasks) - len(pending),
            "pending": len(pending),
            "overdue": sum(1 for t in dated if t.due_date < today),
            "dueToday": sum(1 for t in dated if t.due_date == today),
            "dueTomorrow": sum(1 for t in dated if t.due_date == tomorrow),
            "dueThisWeek": sum(1 for t in dated if today < t.due_date <= next_week),
            "byCategory": by_category,
        }
