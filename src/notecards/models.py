"""Data classes for the review domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Grade(str, Enum):
    """Recall quality, ordered from weakest to strongest."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @property
    def rank(self) -> int:
        return _GRADE_ORDER.index(self)

    # str comparisons would order grades alphabetically
    def __lt__(self, other):
        if not isinstance(other, Grade):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Grade):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Grade):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Grade):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str) -> "Grade":
        """Normalize a user-supplied grade name. Raises ValueError if unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"unknown grade: {value!r}") from None

    @classmethod
    def from_key(cls, key: str) -> Optional["Grade"]:
        """Map a practice shortcut (1-4 or a/h/g/e) to a grade."""
        return GRADE_KEYS.get(key.strip().lower())


_GRADE_ORDER = [Grade.AGAIN, Grade.HARD, Grade.GOOD, Grade.EASY]

GRADE_KEYS = {
    "1": Grade.AGAIN, "a": Grade.AGAIN,
    "2": Grade.HARD, "h": Grade.HARD,
    "3": Grade.GOOD, "g": Grade.GOOD,
    "4": Grade.EASY, "e": Grade.EASY,
}


@dataclass(frozen=True)
class ReviewItem:
    id: str
    front: str
    back: str
    due_date: datetime
    tags: frozenset = field(default_factory=frozenset)
    deck_id: Optional[str] = None
    review_count: int = 0
    last_reviewed: Optional[datetime] = None
    next_interval: Optional[float] = None


@dataclass(frozen=True)
class ReviewResult:
    card_id: str
    grade: Grade
    review_time: int  # ms since the card was presented
    reviewed_at: datetime


@dataclass(frozen=True)
class ReviewSession:
    id: str
    started_at: datetime
    cards_reviewed: int = 0
    cards_remaining: int = 0
    results: tuple = ()
