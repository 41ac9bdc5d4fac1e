"""Session summaries and deck statistics."""
from datetime import datetime, timedelta, timezone

from notecards.decks import get_deck
from notecards.models import Grade, ReviewItem, ReviewSession


def summarize_session(session: ReviewSession) -> dict:
    total = session.cards_reviewed + session.cards_remaining
    counts = {g.value: 0 for g in Grade}
    for r in session.results:
        counts[r.grade.value] += 1
    results = len(session.results)
    recalled = counts[Grade.GOOD.value] + counts[Grade.EASY.value]
    return {
        "cards_reviewed": session.cards_reviewed,
        "cards_remaining": session.cards_remaining,
        "progress": round(session.cards_reviewed / total * 100) if total else 0,
        "grades": counts,
        "average_review_time_ms": (
            round(sum(r.review_time for r in session.results) / results) if results else 0
        ),
        "retention": round(recalled / results * 100, 1) if results else 0.0,
    }


def get_deck_stats(db_path: str, deck_id: str, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    items = get_deck(db_path, deck_id)
    new = sum(1 for i in items if i.review_count == 0)
    return {
        "total": len(items),
        "due": sum(1 for i in items if i.due_date <= now),
        "new": new,
        "reviewed": len(items) - new,
    }


def due_label(due: datetime | None, now: datetime | None = None) -> str | None:
    """Describe a due date as "Today", "Tomorrow" or an ISO date."""
    if due is None:
        return None
    now = now or datetime.now(timezone.utc)
    earliest = due.astimezone(now.tzinfo).date()
    today = now.date()
    if earliest <= today:
        return "Today"
    if earliest == today + timedelta(days=1):
        return "Tomorrow"
    return earliest.isoformat()


def next_review_label(items: list[ReviewItem], now: datetime | None = None) -> str | None:
    """Label the earliest due date among *items*."""
    if not items:
        return None
    return due_label(min(i.due_date for i in items), now)
