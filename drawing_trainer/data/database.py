"""
SQLite database initialization and connection management.

Single responsibility: own the connection, create tables, seed default tags.
All actual queries live in Repository.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Default DB lives next to the repo root
DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent.parent / "drawing_trainer.db"

DEFAULT_TAGS = ("Portrait", "Landscape", "Architecture", "Figure", "Still Life", "Animal")

SCHEMA_SQL = """
-- Tags ----------------------------------------------------------------------
CREATE TABLE IF NOT EXISTS tags (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL UNIQUE
);

-- Reference photos ----------------------------------------------------------
CREATE TABLE IF NOT EXISTS reference_photos (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    file_path           TEXT    NOT NULL,
    original_file_name  TEXT    NOT NULL DEFAULT '',
    width               INTEGER NOT NULL DEFAULT 0,
    height              INTEGER NOT NULL DEFAULT 0,
    imported_at         TEXT    NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS reference_photo_tags (
    reference_photo_id  INTEGER NOT NULL REFERENCES reference_photos(id) ON DELETE CASCADE,
    tag_id              INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (reference_photo_id, tag_id)
);

-- Session plans -------------------------------------------------------------
CREATE TABLE IF NOT EXISTS session_plans (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL,
    created_at  TEXT    NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS session_exercises (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    plan_id             INTEGER NOT NULL REFERENCES session_plans(id) ON DELETE CASCADE,
    tag_id              INTEGER NOT NULL REFERENCES tags(id),
    duration_seconds    INTEGER NOT NULL,
    sort_order          INTEGER NOT NULL,
    UNIQUE(plan_id, sort_order)
);

-- Drawing sessions ----------------------------------------------------------
CREATE TABLE IF NOT EXISTS drawing_sessions (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    plan_id         INTEGER REFERENCES session_plans(id) ON DELETE SET NULL,
    started_at      TEXT    NOT NULL,
    completed_at    TEXT,
    is_completed    INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS exercise_results (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id          INTEGER NOT NULL REFERENCES drawing_sessions(id),
    exercise_id         INTEGER REFERENCES session_exercises(id) ON DELETE SET NULL,
    reference_photo_id  INTEGER REFERENCES reference_photos(id) ON DELETE SET NULL,
    sort_order          INTEGER NOT NULL,
    was_skipped         INTEGER NOT NULL DEFAULT 0,
    UNIQUE(session_id, sort_order)
);

-- Gallery -------------------------------------------------------------------
CREATE TABLE IF NOT EXISTS artists (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL,
    created_at  TEXT    NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS completed_drawings (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    exercise_result_id  INTEGER REFERENCES exercise_results(id),
    file_path           TEXT    NOT NULL,
    original_file_name  TEXT    NOT NULL DEFAULT '',
    uploaded_at         TEXT    NOT NULL DEFAULT (datetime('now')),
    tag_id              INTEGER REFERENCES tags(id),
    duration_seconds    INTEGER NOT NULL DEFAULT 0,
    drawn_at            TEXT,
    reference_photo_id  INTEGER REFERENCES reference_photos(id) ON DELETE SET NULL,
    artist_id           INTEGER REFERENCES artists(id) ON DELETE SET NULL
);

-- Indexes for common queries -------------------------------------------------
CREATE INDEX IF NOT EXISTS idx_photo_tags_tag       ON reference_photo_tags(tag_id);
CREATE INDEX IF NOT EXISTS idx_exercises_plan       ON session_exercises(plan_id);
CREATE INDEX IF NOT EXISTS idx_results_session      ON exercise_results(session_id);
CREATE INDEX IF NOT EXISTS idx_drawings_result      ON completed_drawings(exercise_result_id);
CREATE INDEX IF NOT EXISTS idx_drawings_artist      ON completed_drawings(artist_id);
"""


def init_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and seed the default tags. Safe to run repeatedly."""
    conn.executescript(SCHEMA_SQL)
    conn.executemany(
        "INSERT OR IGNORE INTO tags (name) VALUES (?)",
        [(name,) for name in DEFAULT_TAGS],
    )
    conn.commit()


def connect_memory() -> sqlite3.Connection:
    """In-memory connection with the schema applied (tests, dry runs)."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    init_schema(conn)
    return conn


class Database:
    """Thin wrapper around a SQLite connection."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.conn: Optional[sqlite3.Connection] = None

    # -- lifecycle -----------------------------------------------------------

    def connect(self) -> sqlite3.Connection:
        """Open (or return existing) connection and ensure schema exists."""
        if self.conn is not None:
            return self.conn
        logger.info("Connecting to SQLite at %s", self.db_path)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row          # dict-like rows
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")
        init_schema(self.conn)
        logger.info("Database schema ensured.")
        return self.conn

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("Database connection closed.")


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Manages the SQLite connection and makes sure all tables exist on startup.
#
# Key pieces:
#   - SCHEMA_SQL: the full DDL. CREATE IF NOT EXISTS keeps it idempotent.
#   - init_schema(): runs the DDL and seeds the six default tags with
#     INSERT OR IGNORE, so a fresh install already has categories to plan with.
#   - UNIQUE(plan_id, sort_order) and UNIQUE(session_id, sort_order): the
#     ordering rules for exercises and results are enforced by the database.
#   - exercise_results.reference_photo_id is nullable: an exercise whose tag
#     has no photos still runs and still records a result.
#
# Data flow:
#   App start -> Database.connect() -> tables created -> Repository uses conn
