# Copyright (c) Syntropy Systems
"""SQLite storage layer with WAL mode and append-only streams."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

# SQL schema for the skillforge ledger
SCHEMA = """
-- Run samples (append-only, id is the insertion order)
CREATE TABLE IF NOT EXISTS samples (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    skill_id TEXT NOT NULL,
    elapsed_ms REAL NOT NULL,
    tokens_in INTEGER NOT NULL,
    tokens_out INTEGER NOT NULL,
    success INTEGER NOT NULL,
    timestamp TEXT NOT NULL,
    version TEXT NOT NULL DEFAULT 'v1'
);

-- Lifecycle events (append-only audit trail)
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    module TEXT NOT NULL,  -- profiler, analyzer, optimizer, validator, forge
    action TEXT NOT NULL,
    skill_id TEXT NOT NULL,
    details TEXT
);

-- Skill registry
CREATE TABLE IF NOT EXISTS skills (
    skill_id TEXT PRIMARY KEY,
    path TEXT NOT NULL,
    current_version TEXT NOT NULL DEFAULT 'v1',
    state TEXT NOT NULL DEFAULT 'pending',  -- pending, optimized, promoted, rejected
    token_savings REAL,
    registered_at TEXT,
    updated_at TEXT
);

-- Indexes for windowed reads
CREATE INDEX IF NOT EXISTS idx_samples_skill ON samples(skill_id, id);
CREATE INDEX IF NOT EXISTS idx_events_skill ON events(skill_id);
"""


def get_connection(db_path: Path) -> sqlite3.Connection:
    """
    Get a database connection with proper settings for concurrent access.

    - isolation_level=None so every statement commits on its own
    - WAL mode so readers only ever see fully committed rows
    - busy_timeout to wait for locks instead of failing immediately
    - Row factory for dict-like access
    """
    conn = sqlite3.connect(str(db_path), timeout=5.0, isolation_level=None)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path) -> None:
    """Initialize the database with the schema."""
    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA)
    finally:
        conn.close()


def utcnow() -> str:
    """Get current UTC time as ISO format string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# --- Sample Operations ---

def insert_sample(
    conn: sqlite3.Connection,
    skill_id: str,
    elapsed_ms: float,
    tokens_in: int,
    tokens_out: int,
    success: bool,
    timestamp: str,
    version: str = "v1",
) -> int:
    """Append a run sample and return its insertion id."""
    cursor = conn.execute(
        """
        INSERT INTO samples (skill_id, elapsed_ms, tokens_in, tokens_out, success, timestamp, version)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (skill_id, elapsed_ms, tokens_in, tokens_out, int(success), timestamp, version),
    )
    return cursor.lastrowid


def get_recent_samples(
    conn: sqlite3.Connection,
    skill_id: str,
    limit: int,
) -> list[sqlite3.Row]:
    """Get up to `limit` most recent samples for a skill, oldest first."""
    rows = conn.execute(
        """
        SELECT * FROM (
            SELECT * FROM samples
            WHERE skill_id = ?
            ORDER BY id DESC
            LIMIT ?
        ) ORDER BY id
        """,
        (skill_id, limit),
    ).fetchall()
    return list(rows)


def get_skill_ids(conn: sqlite3.Connection) -> list[str]:
    """Get distinct skill ids from the sample stream in first-seen order."""
    rows = conn.execute(
        """
        SELECT skill_id FROM samples
        GROUP BY skill_id
        ORDER BY MIN(id)
        """
    ).fetchall()
    return [row["skill_id"] for row in rows]


def count_samples(conn: sqlite3.Connection) -> int:
    """Count every stored sample."""
    row = conn.execute("SELECT COUNT(*) AS n FROM samples").fetchone()
    return int(row["n"]) if row else 0


# --- Event Operations ---

def insert_event(
    conn: sqlite3.Connection,
    timestamp: str,
    module: str,
    action: str,
    skill_id: str,
    details: str = "",
) -> int:
    """Append a lifecycle event and return its insertion id."""
    cursor = conn.execute(
        """
        INSERT INTO events (timestamp, module, action, skill_id, details)
        VALUES (?, ?, ?, ?, ?)
        """,
        (timestamp, module, action, skill_id, details),
    )
    return cursor.lastrowid


def get_recent_events(
    conn: sqlite3.Connection,
    limit: int = 50,
    skill_id: str | None = None,
) -> list[sqlite3.Row]:
    """Get the most recent events, newest first."""
    if skill_id is None:
        rows = conn.execute(
            "SELECT * FROM events ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM events WHERE skill_id = ? ORDER BY id DESC LIMIT ?",
            (skill_id, limit),
        ).fetchall()
    return list(rows)


def count_events(conn: sqlite3.Connection) -> int:
    """Count every stored event."""
    row = conn.execute("SELECT COUNT(*) AS n FROM events").fetchone()
    return int(row["n"]) if row else 0


# --- Registry Operations ---

def register_skill(conn: sqlite3.Connection, skill_id: str, path: str) -> bool:
    """
    Register a skill if it is not already known.

    The check and the write are one statement, so concurrent registrations of
    the same id cannot overwrite each other. Returns True if a row was added.
    """
    now = utcnow()
    cursor = conn.execute(
        """
        INSERT INTO skills (skill_id, path, registered_at, updated_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(skill_id) DO NOTHING
        """,
        (skill_id, path, now, now),
    )
    return cursor.rowcount > 0


def get_skill(conn: sqlite3.Connection, skill_id: str) -> sqlite3.Row | None:
    """Get a registry row by skill id."""
    return conn.execute(
        "SELECT * FROM skills WHERE skill_id = ?",
        (skill_id,),
    ).fetchone()


def get_skills(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    """Get every registry row."""
    rows = conn.execute("SELECT * FROM skills ORDER BY skill_id").fetchall()
    return list(rows)


def update_skill_state(
    conn: sqlite3.Connection,
    skill_id: str,
    state: str,
    current_version: str | None = None,
    token_savings: float | None = None,
) -> bool:
    """Set a skill's lifecycle state, optionally bumping its version.

    Returns False if the skill is not registered.
    """
    cursor = conn.execute(
        """
        UPDATE skills
        SET state = ?,
            current_version = COALESCE(?, current_version),
            token_savings = COALESCE(?, token_savings),
            updated_at = ?
        WHERE skill_id = ?
        """,
        (state, current_version, token_savings, utcnow(), skill_id),
    )
    return cursor.rowcount > 0


def iter_rows(conn: sqlite3.Connection, table: str) -> Iterator[sqlite3.Row]:
    """Iterate every row of an append-only table in insertion order."""
    if table not in ("samples", "events"):
        raise ValueError(f"Unknown table: {table}")
    yield from conn.execute(f"SELECT * FROM {table} ORDER BY id")  # noqa: S608
