"""Calendar arithmetic helpers."""

from datetime import date


def days_until_weekday(target: int, today: date) -> int:
    """Days from today to the next given weekday (Monday = 0).

    Never returns 0: if today already is the target weekday, the answer
    is next week's occurrence.
    """
    days = (target - today.weekday()) % 7
    return days or 7
