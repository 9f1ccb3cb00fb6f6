"""Data models for parsed and stored tasks."""

from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class Category(str, Enum):
    """Closed set of task categories."""

    STUDY = "study"
    WORK = "work"
    PERSONAL = "personal"
    OTHER = "other"


CATEGORY_LABELS = {
    Category.STUDY: "📚 学习",
    Category.WORK: "💼 工作",
    Category.PERSONAL: "🏠 生活",
    Category.OTHER: "📁 其他",
}


def category_label(category: Optional[str]) -> str:
    """Display name for a category, falling back to the 'other' label."""
    try:
        return CATEGORY_LABELS[Category(category)]
    except ValueError:
        return CATEGORY_LABELS[Category.OTHER]


def format_time_of_day(value: Optional[time]) -> Optional[str]:
    """Render a time-of-day as HH:MM."""
    if value is None:
        return None
    return value.strftime("%H:%M")


class TaskDraft(BaseModel):
    """Structured result of parsing one free-form task sentence."""

    title: str = Field(min_length=1)
    description: str  # Raw input, verbatim
    details: str  # Input with links removed

    due_date: Optional[date] = Field(default=None, alias="dueDate")
    start_time: Optional[time] = Field(default=None, alias="startTime")
    end_time: Optional[time] = Field(default=None, alias="endTime")

    category: Category = Category.OTHER
    links: list[str] = Field(default_factory=list)

    class Config:
        frozen = True
        populate_by_name = True

    @field_serializer("start_time", "end_time")
    def _serialize_time(self, value: Optional[time]) -> Optional[str]:
        return format_time_of_day(value)

    @field_serializer("category")
    def _serialize_category(self, value: Category) -> str:
        return value.value

    def to_record(self) -> dict:
        """JSON-ready dict using the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


class StoredTask(BaseModel):
    """A persisted task: a draft plus identity, timestamps and reminder flags."""

    id: str
    title: str
    description: str = ""
    details: str = ""

    due_date: Optional[date] = Field(default=None, alias="dueDate")
    start_time: Optional[time] = Field(default=None, alias="startTime")
    end_time: Optional[time] = Field(default=None, alias="endTime")

    category: Category = Category.OTHER
    links: list[str] = Field(default_factory=list)

    completed: bool = False
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    # Reminder flags, set once by the reminder scanner and never cleared
    today_reminded: bool = Field(default=False, alias="todayReminded")
    three_day_reminded: bool = Field(default=False, alias="threeDayReminded")

    class Config:
        populate_by_name = True
        validate_assignment = True
        extra = "ignore"

    @field_serializer("start_time", "end_time")
    def _serialize_time(self, value: Optional[time]) -> Optional[str]:
        return format_time_of_day(value)

    @field_serializer("category")
    def _serialize_category(self, value: Category) -> str:
        return value.value

    @classmethod
    def from_draft(cls, draft: TaskDraft, task_id: str, now: datetime) -> "StoredTask":
        """Attach identity and timestamps to a freshly parsed draft."""
        return cls(
            id=task_id,
            created_at=now,
            updated_at=now,
            **draft.model_dump(),
        )

    def to_record(self) -> dict:
        """JSON-ready dict in the on-disk (camelCase) shape."""
        return self.model_dump(mode="json", by_alias=True)
