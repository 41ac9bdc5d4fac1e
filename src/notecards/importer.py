"""Import and export of flashcard decks as plain text."""
import json
import logging
import re
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from notecards.models import ReviewItem

logger = logging.getLogger(__name__)

ANKI_MARKERS = ("#notetype:", "#separator:Tab")

SEPARATOR_NAMES = {
    "tab": "\t",
    "comma": ",",
    "semicolon": ";",
    "pipe": "|",
    "colon": ":",
    "space": " ",
}

# Column positions used when an Anki export has no #columns: header
DEFAULT_COLUMNS = {"front": 0, "back": 1, "tags": 2}


def _new_item(front: str, back: str, now: datetime, tags=(), deck_id: str | None = None) -> ReviewItem:
    return ReviewItem(
        id=str(uuid.uuid4()),
        front=front,
        back=back,
        tags=frozenset(tags),
        deck_id=deck_id,
        due_date=now,
        review_count=0,
    )


def deck_id_from_name(name: str) -> str:
    """Turn a deck name into its id: "My Spanish  Deck" -> "my-spanish-deck"."""
    return re.sub(r"\s+", "-", name.strip().lower())


def is_anki_format(text: str) -> bool:
    return any(marker in text for marker in ANKI_MARKERS)


def extract_deck_name(text: str) -> str | None:
    match = re.search(r"^#deck:(.*)$", text, re.MULTILINE)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


def parse_qa_text(text: str, now: datetime | None = None) -> list[ReviewItem]:
    """Parse blank-line separated ``Q:``/``A:`` blocks.

    Blocks without both a question and an answer are dropped.
    """
    now = now or datetime.now(timezone.utc)
    items = []
    for block in re.split(r"\n\s*\n", text.replace("\r\n", "\n")):
        if not block.strip():
            continue
        front = back = ""
        for line in block.split("\n"):
            line = line.strip()
            if line.startswith("Q:"):
                front = line[2:].strip()
            elif line.startswith("A:"):
                back = line[2:].strip()
        if front and back:
            items.append(_new_item(front, back, now))
        else:
            logger.debug("Dropped incomplete Q/A block: %r", block[:40])
    return items


def _parse_separator(value: str) -> str:
    value = value.strip()
    return SEPARATOR_NAMES.get(value.lower(), value) or "\t"


def parse_anki_text(text: str, now: datetime | None = None) -> list[ReviewItem]:
    """Parse an Anki plain-text export.

    Header lines start with ``#``: ``#separator:``, ``#tags:``, ``#columns:``
    and ``#deck:`` are understood, others are ignored. Data lines become one
    card each; lines with fewer than two fields or an empty side are dropped.
    Without a usable ``#columns:`` header every data line is read as
    front/back.
    """
    now = now or datetime.now(timezone.utc)
    lines = text.replace("\r\n", "\n").split("\n")
    separator = "\t"
    deck_tags: list[str] = []
    columns: dict[str, int] = {}
    deck_name = extract_deck_name(text)
    deck_id = deck_id_from_name(deck_name) if deck_name else None

    items = []
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        if line.startswith("#separator:"):
            separator = _parse_separator(line[len("#separator:"):])
            continue
        if line.startswith("#tags:"):
            deck_tags = line[len("#tags:"):].split()
            continue
        if line.startswith("#columns:"):
            names = line[len("#columns:"):].strip().split(separator)
            columns = {name.strip().lower(): i for i, name in enumerate(names)}
            continue
        if line.startswith("#") or not columns:
            continue

        fields = line.split(separator)
        if len(fields) < 2:
            logger.debug("Dropped Anki line with %d field(s)", len(fields))
            continue
        front_idx = columns.get("front", DEFAULT_COLUMNS["front"])
        back_idx = columns.get("back", DEFAULT_COLUMNS["back"])
        tags_idx = columns.get("tags", DEFAULT_COLUMNS["tags"])
        front = fields[front_idx].strip() if front_idx < len(fields) else ""
        back = fields[back_idx].strip() if back_idx < len(fields) else ""
        tags = list(deck_tags)
        if tags_idx < len(fields):
            tags.extend(fields[tags_idx].split())
        if front and back:
            items.append(_new_item(front, back, now, tags, deck_id))

    if items:
        return items

    # No #columns: header (or nothing usable under it): positional fallback
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split(separator)
        if len(fields) < 2:
            continue
        front, back = fields[0].strip(), fields[1].strip()
        if front and back:
            items.append(_new_item(front, back, now, deck_id=deck_id))
    return items


def import_text(text: str, deck_name: str | None = None, now: datetime | None = None) -> list[ReviewItem]:
    """Detect the text format, parse it and tag every item with its deck id."""
    if is_anki_format(text):
        items = parse_anki_text(text, now)
        deck_name = deck_name or extract_deck_name(text)
    else:
        items = parse_qa_text(text, now)
    if deck_name:
        deck_id = deck_id_from_name(deck_name)
        items = [replace(item, deck_id=deck_id) for item in items]
    logger.info("Imported %d cards (deck=%s)", len(items), deck_name)
    return items


def import_file(file_path: str, deck_name: str | None = None, now: datetime | None = None) -> list[ReviewItem]:
    """Import a text file. The deck name defaults to the file's stem."""
    path = Path(file_path)
    text = path.read_text(encoding="utf-8")
    if deck_name is None and not (is_anki_format(text) and extract_deck_name(text)):
        deck_name = path.stem
    return import_text(text, deck_name, now)


def export_qa_text(items: list[ReviewItem]) -> str:
    """Render items as ``Q:``/``A:`` blocks. Cloze brackets become ``...``."""
    parts = []
    for item in items:
        front = re.sub(r"\[([^\]]+)\]", "...", item.front)
        parts.append(f"Q: {front}\nA: {item.back}\n\n")
    return "".join(parts)


def export_json(items: list[ReviewItem]) -> str:
    """Render items as a JSON array, scheduling fields included."""
    return json.dumps(
        [
            {
                "id": item.id,
                "deck_id": item.deck_id,
                "front": item.front,
                "back": item.back,
                "tags": sorted(item.tags),
                "due_date": item.due_date.isoformat(),
                "review_count": item.review_count,
                "last_reviewed": item.last_reviewed.isoformat() if item.last_reviewed else None,
                "next_interval": item.next_interval,
            }
            for item in items
        ],
        indent=2,
    )
