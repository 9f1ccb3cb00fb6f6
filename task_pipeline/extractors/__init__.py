"""Task text → TaskDraft extraction.

This package turns a free-form task sentence into a structured draft:
1. Links are pulled out of the text
2. Due date and time-of-day are resolved against a reference "now"
3. A category is picked from bilingual keyword families
4. A short title is distilled from what remains
"""

from task_pipeline.extractors.calendar import days_until_weekday
from task_pipeline.extractors.links import extract_links
from task_pipeline.extractors.temporal import (
    TemporalResult,
    resolve_due_date,
    resolve_temporal,
    resolve_time_of_day,
)
from task_pipeline.extractors.title import extract_title
from task_pipeline.extractors.pipeline import parse_task

__all__ = [
    "days_until_weekday",
    "extract_links",
    "TemporalResult",
    "resolve_due_date",
    "resolve_temporal",
    "resolve_time_of_day",
    "extract_title",
    "parse_task",
]
