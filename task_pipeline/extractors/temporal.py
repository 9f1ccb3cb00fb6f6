"""Temporal resolution for task text.

Finds a due date and a time of day in link-free task text, resolved
against a caller-supplied reference timestamp. The clock is never read here.

Dates come from two ordered rule families:
1. Relative phrases (今天, 明天, 下周三, 3天后, in a week ...)
2. Absolute dates (8.14, 3月15日, 2025-03-15 ...)

Times come from one ordered list, ranges before single instants.

In every list the first matching rule wins and the rest are skipped.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Union

from task_pipeline.extractors.calendar import days_until_weekday

Reference = Union[datetime, date]


@dataclass(frozen=True)
class TemporalResult:
    """Resolved due date and time-of-day for one task."""

    due_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


@dataclass(frozen=True)
class RelativeRule:
    """Phrase mapped to a day offset from the reference date."""

    name: str
    pattern: re.Pattern
    offset: Callable[[re.Match, date], int]


@dataclass(frozen=True)
class AbsoluteRule:
    """Date shape mapped to (year, month, day); year None means reference year."""

    name: str
    pattern: re.Pattern
    parts: Callable[[re.Match], tuple[Optional[int], int, int]]


@dataclass(frozen=True)
class TimeRule:
    """Time phrase mapped to a (start, end) pair; end is None for instants."""

    name: str
    pattern: re.Pattern
    resolve: Callable[[re.Match], Optional[tuple[time, Optional[time]]]]


def _fixed(days: int) -> Callable[[re.Match, date], int]:
    return lambda match, today: days


def _next_weekday(weekday: int) -> Callable[[re.Match, date], int]:
    return lambda match, today: days_until_weekday(weekday, today)


def _first_group(match: re.Match) -> str:
    return next(g for g in match.groups() if g is not None)


# (weekday index, Chinese suffix after 下周, English name)
WEEKDAYS = [
    (0, "一", "monday"),
    (1, "二", "tuesday"),
    (2, "三", "wednesday"),
    (3, "四", "thursday"),
    (4, "五", "friday"),
    (5, "六", "saturday"),
    (6, "日|天", "sunday"),
]

RELATIVE_RULES: list[RelativeRule] = [
    RelativeRule("today", re.compile(r"今天|today", re.I), _fixed(0)),
    RelativeRule("tomorrow", re.compile(r"明天|(?<!after )tomorrow", re.I), _fixed(1)),
    RelativeRule(
        "day_after_tomorrow",
        re.compile(r"(?<!大)后天|day after tomorrow", re.I),
        _fixed(2),
    ),
    RelativeRule("two_days_after_tomorrow", re.compile(r"大后天"), _fixed(3)),
    *[
        RelativeRule(
            f"next_{english}",
            re.compile(rf"下周(?:{chinese})|next {english}", re.I),
            _next_weekday(index),
        )
        for index, chinese, english in WEEKDAYS
    ],
    RelativeRule(
        "in_n_days",
        re.compile(r"(\d+)天后|in (\d+) days?", re.I),
        lambda match, today: int(_first_group(match)),
    ),
    RelativeRule("in_a_week", re.compile(r"一周后|next week|in (?:a|one) week", re.I), _fixed(7)),
    RelativeRule("in_two_weeks", re.compile(r"两周后|in (?:two|2) weeks", re.I), _fixed(14)),
    RelativeRule("in_a_month", re.compile(r"一个月后|in (?:a|one) month", re.I), _fixed(30)),
]

# Date shapes
NUMERIC_DATE_PATTERN = re.compile(r"(\d{1,2})[./-](\d{1,2})(?:[./-](\d{2,4}))?")
LOCALIZED_DATE_PATTERN = re.compile(r"(?<![\d年])(\d{1,2})月(\d{1,2})[日号]?")
FULL_DATE_PATTERN = re.compile(r"(\d{4})[年/-](\d{1,2})[月/-](\d{1,2})[日号]?")


def _numeric_parts(match: re.Match) -> tuple[Optional[int], int, int]:
    year = None
    if match.group(3):
        year = int(match.group(3))
        if year < 100:
            year += 2000  # 24 -> 2024
    return year, int(match.group(1)), int(match.group(2))


ABSOLUTE_RULES: list[AbsoluteRule] = [
    AbsoluteRule("numeric", NUMERIC_DATE_PATTERN, _numeric_parts),
    AbsoluteRule(
        "localized",
        LOCALIZED_DATE_PATTERN,
        lambda match: (None, int(match.group(1)), int(match.group(2))),
    ),
    AbsoluteRule(
        "full",
        FULL_DATE_PATTERN,
        lambda match: (int(match.group(1)), int(match.group(2)), int(match.group(3))),
    ),
]


def _clock(hour: int, minute: int = 0) -> Optional[time]:
    if 0 <= hour <= 23 and 0 <= minute <= 59:
        return time(hour, minute)
    return None


def _morning(hour: int) -> int:
    return 0 if hour == 12 else hour


def _afternoon(hour: int) -> int:
    return hour if hour == 12 else hour + 12


def _instant(value: Optional[time]) -> Optional[tuple[time, Optional[time]]]:
    if value is None:
        return None
    return value, None


def _span(start: Optional[time], end: Optional[time]) -> Optional[tuple[time, Optional[time]]]:
    if start is None or end is None:
        return None
    return start, end


def _hour_span(match: re.Match, shift: Callable[[int], int]) -> Optional[tuple[time, Optional[time]]]:
    return _span(_clock(shift(int(match.group(1)))), _clock(shift(int(match.group(2)))))


def _period_instant(match: re.Match, shift: Callable[[int], int]) -> Optional[tuple[time, Optional[time]]]:
    minute = match.group(3)
    return _instant(_clock(shift(int(_first_group(match))), int(minute) if minute else 0))


# Time phrases
MORNING_RANGE_PATTERN = re.compile(r"上午(\d{1,2})[点时]?[-到至](\d{1,2})[点时]?")
AFTERNOON_RANGE_PATTERN = re.compile(r"(?:下午|晚上)(\d{1,2})[点时]?[-到至](\d{1,2})[点时]?")
CLOCK_RANGE_PATTERN = re.compile(r"(\d{1,2}):(\d{1,2})[-到至](\d{1,2}):(\d{1,2})")
HOUR_RANGE_PATTERN = re.compile(r"(\d{1,2})[点时]?[-到至](\d{1,2})[点时]")
# English forms take an optional :MM, as in 9am or 2:30pm
MORNING_HOUR_PATTERN = re.compile(
    r"上午(\d{1,2})[点时]?|(?<![\d:])(\d{1,2})(?::(\d{2}))?\s*am(?![a-z])", re.I
)
AFTERNOON_HOUR_PATTERN = re.compile(
    r"(?:下午|晚上)(\d{1,2})[点时]?|(?<![\d:])(\d{1,2})(?::(\d{2}))?\s*pm(?![a-z])", re.I
)
NOON_PATTERN = re.compile(r"中午(?:\d{1,2}[点时]?)?|(?<![a-z])noon(?![a-z])", re.I)
CLOCK_PATTERN = re.compile(r"(\d{1,2}):(\d{1,2})")
HOUR_PATTERN = re.compile(r"(\d{1,2})[点时]")

TIME_RULES: list[TimeRule] = [
    TimeRule("morning_range", MORNING_RANGE_PATTERN, lambda m: _hour_span(m, _morning)),
    TimeRule("afternoon_range", AFTERNOON_RANGE_PATTERN, lambda m: _hour_span(m, _afternoon)),
    TimeRule(
        "clock_range",
        CLOCK_RANGE_PATTERN,
        lambda m: _span(
            _clock(int(m.group(1)), int(m.group(2))),
            _clock(int(m.group(3)), int(m.group(4))),
        ),
    ),
    TimeRule("hour_range", HOUR_RANGE_PATTERN, lambda m: _hour_span(m, lambda hour: hour)),
    TimeRule(
        "morning_hour",
        MORNING_HOUR_PATTERN,
        lambda m: _period_instant(m, _morning),
    ),
    TimeRule(
        "afternoon_hour",
        AFTERNOON_HOUR_PATTERN,
        lambda m: _period_instant(m, _afternoon),
    ),
    TimeRule("noon", NOON_PATTERN, lambda m: (time(12, 0), None)),
    TimeRule("clock", CLOCK_PATTERN, lambda m: _instant(_clock(int(m.group(1)), int(m.group(2))))),
    TimeRule("hour", HOUR_PATTERN, lambda m: _instant(_clock(int(m.group(1))))),
]

# Extra spans stripped from titles that never resolve a value on their own
HOUR_MINUTE_PATTERN = re.compile(r"\d{1,2}[点时]\d{1,2}分?")
PERIOD_WORD_PATTERN = re.compile(r"上午|下午|晚上|中午")

# Everything a title should lose. Time phrases go first so that an hour
# range such as 3-5点 is not half-eaten by the numeric date shape, and the
# full date goes before the shorter date shapes for the same reason.
TEMPORAL_PHRASE_PATTERNS: list[re.Pattern] = [
    HOUR_MINUTE_PATTERN,
    *[rule.pattern for rule in TIME_RULES],
    FULL_DATE_PATTERN,
    LOCALIZED_DATE_PATTERN,
    NUMERIC_DATE_PATTERN,
    *[rule.pattern for rule in RELATIVE_RULES],
    PERIOD_WORD_PATTERN,
]


def _reference_date(now: Reference) -> date:
    return now.date() if isinstance(now, datetime) else now


def build_calendar_date(year: int, month: int, day: int) -> Optional[date]:
    """Build a date, letting days past the month's end carry forward.

    Month must be 1-12 and day 1-31; 2月30日 becomes early March.
    Returns None when the values are out of range or unrepresentable.
    """
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    try:
        return date(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def resolve_relative_date(text: str, now: Reference) -> Optional[date]:
    """Apply the first matching relative rule."""
    today = _reference_date(now)
    for rule in RELATIVE_RULES:
        match = rule.pattern.search(text)
        if match:
            try:
                return today + timedelta(days=rule.offset(match, today))
            except (ValueError, OverflowError):
                return None  # Offset too large for the calendar
    return None


def resolve_absolute_date(text: str, now: Reference) -> Optional[date]:
    """Apply absolute rules in order; rejected candidates fall through."""
    today = _reference_date(now)
    start_of_year = date(today.year, 1, 1)

    for rule in ABSOLUTE_RULES:
        match = rule.pattern.search(text)
        if not match:
            continue

        year, month, day = rule.parts(match)
        candidate = build_calendar_date(today.year if year is None else year, month, day)
        if candidate is None:
            continue

        if candidate >= start_of_year or candidate.year > today.year:
            return candidate

    return None


def resolve_due_date(text: str, now: Reference) -> Optional[date]:
    """Relative phrases first; absolute dates only if none matched."""
    if any(rule.pattern.search(text) for rule in RELATIVE_RULES):
        return resolve_relative_date(text, now)
    return resolve_absolute_date(text, now)


def resolve_time_of_day(text: str) -> tuple[Optional[time], Optional[time]]:
    """Return (start, end) from the first time rule that resolves."""
    for rule in TIME_RULES:
        match = rule.pattern.search(text)
        if not match:
            continue
        resolved = rule.resolve(match)
        if resolved is not None:
            return resolved
    return None, None


def resolve_temporal(text: str, now: Reference) -> TemporalResult:
    """Resolve due date and time-of-day independently of each other."""
    start, end = resolve_time_of_day(text)
    return TemporalResult(
        due_date=resolve_due_date(text, now),
        start_time=start,
        end_time=end,
    )
