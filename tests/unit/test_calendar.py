"""Tests for calendar helpers."""

from datetime import date

import pytest

from task_pipeline.extractors.calendar import days_until_weekday

MONDAY = date(2024, 6, 10)
SUNDAY = date(2024, 6, 16)


class TestDaysUntilWeekday:
    """Tests for the next-weekday offset."""

    @pytest.mark.parametrize("target,expected", [
        (0, 7),  # Same weekday -> next week, never today
        (1, 1),
        (2, 2),
        (4, 4),
        (6, 6),
    ])
    def test_from_monday(self, target: int, expected: int):
        """Offsets from a Monday."""
        assert days_until_weekday(target, MONDAY) == expected

    def test_wraps_around_week(self):
        """From Sunday, Monday is one day away."""
        assert days_until_weekday(0, SUNDAY) == 1

    def test_always_within_a_week(self):
        """Every weekday is between 1 and 7 days away."""
        for target in range(7):
            days = days_until_weekday(target, MONDAY)
            assert 1 <= days <= 7
