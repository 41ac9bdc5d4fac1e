"""Review engine: deck cursor, flip state, grading and session bookkeeping."""
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Iterable, Optional

from notecards.models import Grade, ReviewItem, ReviewResult, ReviewSession
from notecards.scheduler import next_interval

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InvalidState(Exception):
    """Raised when an operation is not allowed in the engine's current state."""


class EngineState(str, Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    IN_SESSION = "in_session"
    ENDED = "ended"


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return round((end - start) / timedelta(milliseconds=1))


class ReviewEngine:
    """Runs one practice session over an in-memory deck.

    The engine owns its copy of the deck for the duration of a run. It never
    performs I/O: callers load items in, read ``items`` back after grading,
    and persist the snapshot returned by ``end_session``.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self.items: list[ReviewItem] = []
        self.cursor = 0
        self.flipped = False
        self.session: Optional[ReviewSession] = None
        self.presented_at = clock()
        self._ended = False

    def now(self) -> datetime:
        return self._clock()

    @property
    def state(self) -> EngineState:
        if self.session is not None:
            return EngineState.IN_SESSION
        if self._ended:
            return EngineState.ENDED
        return EngineState.LOADED if self.items else EngineState.EMPTY

    @property
    def current_item(self) -> Optional[ReviewItem]:
        if 0 <= self.cursor < len(self.items):
            return self.items[self.cursor]
        return None

    @property
    def is_exhausted(self) -> bool:
        return self.session is not None and self.session.cards_remaining == 0

    def _present(self) -> None:
        self.flipped = False
        self.presented_at = self._clock()

    def load_deck(self, items: Iterable[ReviewItem]) -> None:
        """Replace the deck. Any active session is dropped."""
        self.items = list(items)
        self.cursor = 0
        self.session = None
        self._ended = False
        self._present()
        logger.debug("Loaded deck with %d items", len(self.items))

    def start_session(self) -> ReviewSession:
        if not self.items:
            raise InvalidState("cannot start a session on an empty deck")
        now = self._clock()
        self.session = ReviewSession(
            id=str(uuid.uuid4()),
            started_at=now,
            cards_reviewed=0,
            cards_remaining=len(self.items),
        )
        self._ended = False
        self.presented_at = now
        logger.info("Started session %s: %d cards", self.session.id, len(self.items))
        return self.session

    def end_session(self) -> Optional[ReviewSession]:
        """Finish the active session and return its snapshot (None if none active)."""
        session = self.session
        if session is None:
            return None
        self.session = None
        self._ended = True
        logger.info(
            "Ended session %s: %d reviewed, %d remaining",
            session.id, session.cards_reviewed, session.cards_remaining,
        )
        return session

    def flip(self) -> None:
        self.flipped = not self.flipped

    def next(self) -> None:
        if self.cursor < len(self.items) - 1:
            self.cursor += 1
            self._present()

    def prev(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
            self._present()

    def skip(self) -> None:
        """Move the current item to the end of the deck.

        The cursor stays put, so the following item slides under it. Session
        counters and the skipped item itself are left untouched.
        """
        if self.cursor >= len(self.items) - 1:
            return
        item = self.items.pop(self.cursor)
        self.items.append(item)
        self._present()
        logger.debug("Skipped card %s", item.id)

    def grade(self, grade: Grade) -> Optional[ReviewResult]:
        """Grade the current item, reschedule it and advance.

        Returns the recorded result, or None when there is no active session
        or no current item.
        """
        if self.session is None or self.current_item is None:
            return None

        item = self.current_item
        now = self._clock()
        interval = next_interval(grade, item.next_interval)
        result = ReviewResult(
            card_id=item.id,
            grade=grade,
            review_time=_elapsed_ms(self.presented_at, now),
            reviewed_at=now,
        )
        self.session = replace(
            self.session,
            cards_reviewed=self.session.cards_reviewed + 1,
            cards_remaining=self.session.cards_remaining - 1,
            results=self.session.results + (result,),
        )
        self.items[self.cursor] = replace(
            item,
            due_date=now + timedelta(milliseconds=interval),
            review_count=item.review_count + 1,
            last_reviewed=now,
            next_interval=interval,
        )
        logger.debug(
            "Graded card %s as %s: interval=%.0fms reviews=%d",
            item.id, grade.value, interval, item.review_count + 1,
        )
        self.next()
        return result
