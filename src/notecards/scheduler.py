"""Interval scheduling for graded review items."""
from typing import Optional

from notecards.models import Grade

DAY_MS = 86_400_000
AGAIN_INTERVAL_MS = DAY_MS // 4  # 6 hours

GRADE_MULTIPLIERS = {
    Grade.HARD: 1.2,
    Grade.GOOD: 2.5,
    Grade.EASY: 4,
}


def next_interval(grade: Grade, previous_interval_ms: Optional[float] = None) -> float:
    """Calculate the next review interval in milliseconds.

    Args:
        grade: Recall quality for this review.
        previous_interval_ms: Interval used for the last scheduling, or None
            for an item that has never been graded.

    Returns:
        The new interval. ``again`` always resets to six hours; the other
        grades scale the previous interval (one day when there is none).
        No cap or fuzz is applied.
    """
    if grade == Grade.AGAIN:
        return AGAIN_INTERVAL_MS
    base = previous_interval_ms or DAY_MS
    return base * GRADE_MULTIPLIERS[grade]
