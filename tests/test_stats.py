# tests/test_stats.py
from datetime import timedelta

from notecards.db import init_db
from notecards.decks import save_deck
from notecards.engine import ReviewEngine
from notecards.models import Grade, ReviewSession
from notecards.stats import due_label, get_deck_stats, next_review_label, summarize_session
from conftest import START


def test_summarize_empty_session():
    summary = summarize_session(ReviewSession(id="s", started_at=START, cards_remaining=3))
    assert summary["cards_reviewed"] == 0
    assert summary["progress"] == 0
    assert summary["grades"] == {"again": 0, "hard": 0, "good": 0, "easy": 0}
    assert summary["average_review_time_ms"] == 0
    assert summary["retention"] == 0.0


def test_summarize_graded_session(make_item, clock):
    engine = ReviewEngine(clock=clock)
    engine.load_deck([make_item(x) for x in "abcd"])
    engine.start_session()
    for g, ms in [(Grade.AGAIN, 1000), (Grade.GOOD, 2000), (Grade.EASY, 3000)]:
        clock.advance(ms)
        engine.grade(g)
    summary = summarize_session(engine.session)
    assert summary["cards_reviewed"] == 3
    assert summary["cards_remaining"] == 1
    assert summary["progress"] == 75
    assert summary["grades"] == {"again": 1, "hard": 0, "good": 1, "easy": 1}
    assert summary["average_review_time_ms"] == 2000
    assert summary["retention"] == 66.7


def test_get_deck_stats(tmp_db, make_item):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [
        make_item("a"),
        make_item("b", review_count=2, due_date=START + timedelta(days=3)),
        make_item("c", review_count=1, due_date=START - timedelta(days=1)),
    ])
    stats = get_deck_stats(tmp_db, "d", now=START)
    assert stats == {"total": 3, "due": 2, "new": 1, "reviewed": 2}


def test_next_review_label(make_item):
    assert next_review_label([], now=START) is None
    assert next_review_label([make_item("a")], now=START) == "Today"
    assert next_review_label([make_item("a", due_date=START - timedelta(days=4))], now=START) == "Today"
    tomorrow = [make_item("a", due_date=START + timedelta(days=1))]
    assert next_review_label(tomorrow, now=START) == "Tomorrow"
    later = [make_item("a", due_date=START + timedelta(days=10)),
             make_item("b", due_date=START + timedelta(days=5))]
    assert next_review_label(later, now=START) == "2026-03-06"


def test_due_label():
    assert due_label(None, now=START) is None
    assert due_label(START - timedelta(hours=30), now=START) == "Today"
    assert due_label(START + timedelta(hours=12), now=START) == "Tomorrow"
    assert due_label(START + timedelta(days=2), now=START) == "2026-03-03"
