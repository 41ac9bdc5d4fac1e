"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".notecards" / "notecards.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS review_items (
    id TEXT PRIMARY KEY,
    deck_id TEXT,
    front TEXT NOT NULL,
    back TEXT NOT NULL,
    tags TEXT DEFAULT '[]',
    due_date TEXT NOT NULL,
    review_count INTEGER DEFAULT 0,
    last_reviewed TEXT,
    next_interval REAL,
    position INTEGER DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_review_items_deck ON review_items (deck_id, due_date);

CREATE TABLE IF NOT EXISTS review_sessions (
    id TEXT PRIMARY KEY,
    deck_id TEXT,
    started_at TEXT NOT NULL,
    ended_at TEXT,
    cards_reviewed INTEGER DEFAULT 0,
    cards_remaining INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS review_results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL REFERENCES review_sessions(id) ON DELETE CASCADE,
    card_id TEXT NOT NULL,
    grade TEXT NOT NULL,
    review_time INTEGER NOT NULL,
    reviewed_at TEXT NOT NULL
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
