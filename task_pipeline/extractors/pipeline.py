"""Text → TaskDraft parsing pipeline.

Stages, each reading the link-free text:
1. Links (removed before anything else looks at the text)
2. Due date and time-of-day
3. Category
4. Title

Pure and deterministic for a given (text, now); the caller supplies "now".
"""

from task_pipeline.extractors.links import extract_links
from task_pipeline.extractors.temporal import Reference, resolve_temporal
from task_pipeline.extractors.title import extract_title
from task_pipeline.models import TaskDraft
from task_pipeline.normalizers.category import classify_category


def parse_task(text: str, now: Reference) -> TaskDraft:
    """Parse one free-form task sentence into a draft.

    Args:
        text: Raw task text; callers reject blank input beforehand.
        now: Reference timestamp that relative phrases are resolved against.
    """
    remainder, links = extract_links(text)
    details = remainder.strip()

    temporal = resolve_temporal(details, now)

    return TaskDraft(
        title=extract_title(details),
        description=text,
        details=details,
        due_date=temporal.due_date,
        start_time=temporal.start_time,
        end_time=temporal.end_time,
        category=classify_category(details),
        links=links,
    )
