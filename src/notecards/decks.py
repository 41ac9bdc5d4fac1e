"""Deck storage: load decks for practice and merge graded items back."""
import json
import logging
from datetime import datetime, timezone

from notecards.db import get_connection
from notecards.models import Grade, ReviewItem, ReviewResult, ReviewSession

logger = logging.getLogger(__name__)

DEFAULT_DUE_LIMIT = 50


def _ts(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_item(row) -> ReviewItem:
    return ReviewItem(
        id=row["id"],
        front=row["front"],
        back=row["back"],
        tags=frozenset(json.loads(row["tags"] or "[]")),
        deck_id=row["deck_id"],
        due_date=_parse_ts(row["due_date"]),
        review_count=row["review_count"],
        last_reviewed=_parse_ts(row["last_reviewed"]),
        next_interval=row["next_interval"],
    )


def _item_params(item: ReviewItem, deck_id: str | None, position: int) -> tuple:
    return (
        item.id, deck_id, item.front, item.back, json.dumps(sorted(item.tags)),
        _ts(item.due_date), item.review_count, _ts(item.last_reviewed),
        item.next_interval, position,
    )


def save_deck(db_path: str, deck_id: str, items: list[ReviewItem]) -> int:
    """Replace the stored deck with *items*, keeping their order."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM review_items WHERE deck_id = ?", (deck_id,))
    conn.executemany(
        """INSERT OR REPLACE INTO review_items
        (id, deck_id, front, back, tags, due_date, review_count, last_reviewed, next_interval, position)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        [_item_params(item, deck_id, i) for i, item in enumerate(items)],
    )
    conn.commit()
    conn.close()
    logger.info("Saved deck %s with %d cards", deck_id, len(items))
    return len(items)


def save_items(db_path: str, items: list[ReviewItem]) -> None:
    """Merge items returned by a practice run back into storage.

    Items already stored get their scheduling fields updated; unknown items
    are inserted into their own deck.
    """
    conn = get_connection(db_path)
    conn.executemany(
        """INSERT INTO review_items
        (id, deck_id, front, back, tags, due_date, review_count, last_reviewed, next_interval, position)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            due_date = excluded.due_date,
            review_count = excluded.review_count,
            last_reviewed = excluded.last_reviewed,
            next_interval = excluded.next_interval""",
        [_item_params(item, item.deck_id, i) for i, item in enumerate(items)],
    )
    conn.commit()
    conn.close()


def get_deck(db_path: str, deck_id: str) -> list[ReviewItem]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM review_items WHERE deck_id = ? ORDER BY position, id",
        (deck_id,),
    ).fetchall()
    conn.close()
    return [_row_to_item(r) for r in rows]


def get_due_items(
    db_path: str,
    deck_id: str,
    now: datetime | None = None,
    limit: int = DEFAULT_DUE_LIMIT,
) -> list[ReviewItem]:
    """Return items due at *now*, most overdue first."""
    now = now or datetime.now(timezone.utc)
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT * FROM review_items
        WHERE deck_id = ? AND due_date <= ?
        ORDER BY due_date ASC, position ASC
        LIMIT ?""",
        (deck_id, _ts(now), limit),
    ).fetchall()
    conn.close()
    return [_row_to_item(r) for r in rows]


def list_decks(db_path: str) -> list[dict]:
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT deck_id, COUNT(*) as cards, MIN(due_date) as next_due
        FROM review_items
        WHERE deck_id IS NOT NULL
        GROUP BY deck_id
        ORDER BY deck_id"""
    ).fetchall()
    conn.close()
    return [
        {"deck_id": r["deck_id"], "cards": r["cards"], "next_due": _parse_ts(r["next_due"])}
        for r in rows
    ]


def delete_deck(db_path: str, deck_id: str) -> int:
    conn = get_connection(db_path)
    deleted = conn.execute("DELETE FROM review_items WHERE deck_id = ?", (deck_id,)).rowcount
    conn.commit()
    conn.close()
    logger.info("Deleted deck %s (%d cards)", deck_id, deleted)
    return deleted


def save_session(
    db_path: str,
    session: ReviewSession,
    deck_id: str | None = None,
    ended_at: datetime | None = None,
) -> None:
    """Persist a finished session snapshot and its results."""
    conn = get_connection(db_path)
    conn.execute(
        """INSERT OR REPLACE INTO review_sessions
        (id, deck_id, started_at, ended_at, cards_reviewed, cards_remaining)
        VALUES (?, ?, ?, ?, ?, ?)""",
        (session.id, deck_id, _ts(session.started_at), _ts(ended_at),
         session.cards_reviewed, session.cards_remaining),
    )
    conn.execute("DELETE FROM review_results WHERE session_id = ?", (session.id,))
    conn.executemany(
        """INSERT INTO review_results (session_id, card_id, grade, review_time, reviewed_at)
        VALUES (?, ?, ?, ?, ?)""",
        [(session.id, r.card_id, r.grade.value, r.review_time, _ts(r.reviewed_at))
         for r in session.results],
    )
    conn.commit()
    conn.close()
    logger.info("Saved session %s (%d results)", session.id, len(session.results))


def get_session_results(db_path: str, session_id: str) -> list[ReviewResult]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM review_results WHERE session_id = ? ORDER BY id",
        (session_id,),
    ).fetchall()
    conn.close()
    return [
        ReviewResult(
            card_id=r["card_id"],
            grade=Grade(r["grade"]),
            review_time=r["review_time"],
            reviewed_at=_parse_ts(r["reviewed_at"]),
        )
        for r in rows
    ]
