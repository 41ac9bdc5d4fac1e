from datetime import datetime, timedelta, timezone

import pytest

from notecards.models import ReviewItem

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; advance it by hand."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += timedelta(milliseconds=ms)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_notecards.db")
    return db_path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_item():
    def _make(card_id: str, **kwargs) -> ReviewItem:
        kwargs.setdefault("front", f"front {card_id}")
        kwargs.setdefault("back", f"back {card_id}")
        kwargs.setdefault("due_date", START)
        return ReviewItem(id=card_id, **kwargs)
    return _make
