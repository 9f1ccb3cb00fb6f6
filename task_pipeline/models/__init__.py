"""Data models for the task pipeline."""

from task_pipeline.models.task import (
    CATEGORY_LABELS,
    Category,
    StoredTask,
    TaskDraft,
    category_label,
    format_time_of_day,
)

__all__ = [
    "CATEGORY_LABELS",
    "Category",
    "StoredTask",
    "TaskDraft",
    "category_label",
    "format_time_of_day",
]
