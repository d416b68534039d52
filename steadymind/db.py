"""SQLite database layer. All public functions return Pydantic models."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

from steadymind.config import get_db_path as _config_get_db_path
from steadymind.models import (
    EntryType,
    Habit,
    HabitCreate,
    HabitSummary,
    QAPair,
    ReflectionEntry,
    ReflectionEntryCreate,
)

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS journal_entries (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at      TEXT    NOT NULL,
    type            TEXT    NOT NULL,
    reflection_type TEXT,
    content         TEXT,
    qa_pairs        TEXT    NOT NULL DEFAULT '[]'
);

CREATE TABLE IF NOT EXISTS habits (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT    NOT NULL,
    description TEXT    NOT NULL DEFAULT '',
    system_type TEXT    UNIQUE,
    created_at  TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS habit_completions (
    habit_id INTEGER NOT NULL REFERENCES habits(id) ON DELETE CASCADE,
    date     TEXT    NOT NULL,
    PRIMARY KEY (habit_id, date)
);
"""

DAILY_REFLECTION = "daily_reflection"
_DAILY_REFLECTION_HABIT = HabitCreate(
    title="Daily Reflection",
    description=(
        "Use the journal daily for guided reflection to track your progress, "
        "capture insights, and maintain self-awareness."
    ),
    system_type=DAILY_REFLECTION,
)


def _get_db_path() -> Path:
    """Return the database file path from config (or default)."""
    return _config_get_db_path()


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Open a connection and ensure the schema exists."""
    path = db_path or _get_db_path()
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.executescript(_SCHEMA)
    log.debug("opened database %s", path)
    return conn


# ---------------------------------------------------------------------------
# Journal entries
# ---------------------------------------------------------------------------


def _row_to_entry(row: sqlite3.Row) -> ReflectionEntry:
    """Convert a database row to a ReflectionEntry model.

    Raises ``pydantic.ValidationError`` (or ``json.JSONDecodeError``) for a
    malformed row rather than guessing at missing fields.
    """
    pairs = [QAPair.model_validate(p) for p in json.loads(row["qa_pairs"])]
    return ReflectionEntry(
        id=row["id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        entry_type=EntryType(row["type"]),
        reflection_type=row["reflection_type"],
        content=row["content"],
        qa_pairs=pairs,
    )


def add_entry(conn: sqlite3.Connection, entry_in: ReflectionEntryCreate) -> ReflectionEntry:
    """Insert a journal entry and return it as a model."""
    created = (entry_in.created_at or datetime.now()).isoformat()
    pairs_json = json.dumps([p.model_dump() for p in entry_in.qa_pairs])
    cur = conn.execute(
        "INSERT INTO journal_entries (created_at, type, reflection_type, content, qa_pairs) "
        "VALUES (?, ?, ?, ?, ?)",
        (
            created,
            entry_in.entry_type.value,
            entry_in.reflection_type,
            entry_in.content,
            pairs_json,
        ),
    )
    conn.commit()
    log.info("saved %s entry #%d", entry_in.reflection_type or entry_in.entry_type.value, cur.lastrowid)
    return get_entry(conn, cur.lastrowid)  # type: ignore[arg-type,return-value]


def get_entry(conn: sqlite3.Connection, entry_id: int) -> Optional[ReflectionEntry]:
    """Fetch a single entry by ID."""
    row = conn.execute("SELECT * FROM journal_entries WHERE id = ?", (entry_id,)).fetchone()
    return _row_to_entry(row) if row else None


def list_entries(
    conn: sqlite3.Connection,
    reflection_type: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[ReflectionEntry]:
    """List entries, most recent first.

    Entries with the same timestamp are returned latest-inserted first.
    """
    query = "SELECT * FROM journal_entries"
    params: list[str | int] = []
    if reflection_type is not None:
        query += " WHERE reflection_type = ?"
        params.append(reflection_type)
    query += " ORDER BY created_at DESC, id DESC"
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)
    rows = conn.execute(query, params).fetchall()
    return [_row_to_entry(r) for r in rows]


def delete_entry(conn: sqlite3.Connection, entry_id: int) -> bool:
    """Delete an entry. Returns False if it did not exist."""
    cur = conn.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
    conn.commit()
    return cur.rowcount > 0


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------


def _row_to_habit(row: sqlite3.Row) -> Habit:
    """Convert a database row to a Habit model."""
    return Habit(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        system_type=row["system_type"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def add_habit(conn: sqlite3.Connection, habit_in: HabitCreate) -> Habit:
    """Insert a new habit and return it as a model."""
    cur = conn.execute(
        "INSERT INTO habits (title, description, system_type, created_at) VALUES (?, ?, ?, ?)",
        (habit_in.title, habit_in.description, habit_in.system_type, datetime.now().isoformat()),
    )
    conn.commit()
    row = conn.execute("SELECT * FROM habits WHERE id = ?", (cur.lastrowid,)).fetchone()
    return _row_to_habit(row)


def get_habit_by_system_type(conn: sqlite3.Connection, system_type: str) -> Optional[Habit]:
    row = conn.execute(
        "SELECT * FROM habits WHERE system_type = ?", (system_type,)
    ).fetchone()
    return _row_to_habit(row) if row else None


def ensure_default_habit_exists(conn: sqlite3.Connection) -> Habit:
    """Create the "Daily Reflection" habit unless it is already there."""
    existing = get_habit_by_system_type(conn, DAILY_REFLECTION)
    if existing is not None:
        return existing
    habit = add_habit(conn, _DAILY_REFLECTION_HABIT)
    log.info("created %s habit #%d", habit.title, habit.id)
    return habit


def complete_habit(
    conn: sqlite3.Connection, habit_id: int, on: Optional[date] = None
) -> bool:
    """Check off a habit for a day. Returns False if it was already done."""
    day = (on or date.today()).isoformat()
    cur = conn.execute(
        "INSERT OR IGNORE INTO habit_completions (habit_id, date) VALUES (?, ?)",
        (habit_id, day),
    )
    conn.commit()
    return cur.rowcount > 0


def _completion_dates(conn: sqlite3.Connection, habit_id: int) -> set[date]:
    rows = conn.execute(
        "SELECT date FROM habit_completions WHERE habit_id = ?", (habit_id,)
    ).fetchall()
    return {date.fromisoformat(r["date"]) for r in rows}


def habit_streak(
    conn: sqlite3.Connection, habit_id: int, today: Optional[date] = None
) -> int:
    """Count consecutive days (ending today or yesterday) the habit was done."""
    dates = _completion_dates(conn, habit_id)
    if not dates:
        return 0

    streak = 0
    check_date = today or date.today()

    # Allow streak to start from today or yesterday
    if check_date not in dates:
        check_date -= timedelta(days=1)
        if check_date not in dates:
            return 0

    while check_date in dates:
        streak += 1
        check_date -= timedelta(days=1)

    return streak


def list_habits(conn: sqlite3.Connection) -> list[HabitSummary]:
    """All habits with their current streaks, oldest first."""
    rows = conn.execute("SELECT * FROM habits ORDER BY id ASC").fetchall()
    summaries: list[HabitSummary] = []
    for row in rows:
        habit = _row_to_habit(row)
        dates = _completion_dates(conn, habit.id)
        summaries.append(
            HabitSummary(
                habit=habit,
                streak_days=habit_streak(conn, habit.id),
                last_done=max(dates) if dates else None,
            )
        )
    return summaries
