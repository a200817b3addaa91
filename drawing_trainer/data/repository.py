"""
Repository — the single place where SQL lives.

Every other module talks to Repository, never to raw SQL. This makes it easy
to swap the store (or fake it in tests) without touching business logic.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .models import (
    Artist,
    CompletedDrawing,
    DrawingSession,
    ExerciseResult,
    ReferencePhoto,
    SessionExercise,
    SessionPlan,
    Tag,
)

logger = logging.getLogger(__name__)

# helper: parse ISO datetime strings from SQLite
_parse_dt = lambda s: datetime.fromisoformat(s) if s else None

_DRAWING_SELECT = (
    "SELECT d.*, "
    "COALESCE(t.name, rt.name, '') AS tag_name, "
    "COALESCE(a.name, '') AS artist_name, "
    "COALESCE(p.file_path, rp.file_path, '') AS reference_path "
    "FROM completed_drawings d "
    "LEFT JOIN exercise_results r ON d.exercise_result_id = r.id "
    "LEFT JOIN session_exercises e ON r.exercise_id = e.id "
    "LEFT JOIN tags rt ON e.tag_id = rt.id "
    "LEFT JOIN tags t ON d.tag_id = t.id "
    "LEFT JOIN artists a ON d.artist_id = a.id "
    "LEFT JOIN reference_photos p ON d.reference_photo_id = p.id "
    "LEFT JOIN reference_photos rp ON r.reference_photo_id = rp.id"
)


class Repository:
    """Data-access layer wrapping a sqlite3 connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ── Tags ────────────────────────────────────────────────────────────────

    def create_tag(self, name: str) -> Tag:
        self.conn.execute("INSERT OR IGNORE INTO tags (name) VALUES (?)", (name,))
        self.conn.commit()
        # fetch back (handles IGNORE case)
        row = self.conn.execute("SELECT * FROM tags WHERE name = ?", (name,)).fetchone()
        return self._row_to_tag(row)

    def get_tag(self, tag_id: int) -> Optional[Tag]:
        row = self.conn.execute("SELECT * FROM tags WHERE id = ?", (tag_id,)).fetchone()
        return self._row_to_tag(row) if row else None

    def get_tag_by_name(self, name: str) -> Optional[Tag]:
        row = self.conn.execute("SELECT * FROM tags WHERE name = ?", (name,)).fetchone()
        return self._row_to_tag(row) if row else None

    def list_tags(self) -> List[Tag]:
        rows = self.conn.execute("SELECT * FROM tags ORDER BY name").fetchall()
        return [self._row_to_tag(r) for r in rows]

    # ── Reference photos ────────────────────────────────────────────────────

    def add_photo(self, file_path: str, original_file_name: str,
                  width: int = 0, height: int = 0,
                  tag_ids: Iterable[int] = (),
                  imported_at: Optional[datetime] = None) -> ReferencePhoto:
        ts = imported_at or datetime.now()
        tag_ids = list(tag_ids)
        cur = self.conn.execute(
            "INSERT INTO reference_photos "
            "(file_path, original_file_name, width, height, imported_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (file_path, original_file_name, width, height, ts.isoformat()),
        )
        photo_id = cur.lastrowid
        self.conn.executemany(
            "INSERT OR IGNORE INTO reference_photo_tags (reference_photo_id, tag_id) VALUES (?, ?)",
            [(photo_id, t) for t in tag_ids],
        )
        self.conn.commit()
        return ReferencePhoto(
            id=photo_id, file_path=file_path, original_file_name=original_file_name,
            width=width, height=height, imported_at=ts, tag_ids=tag_ids,
        )

    def get_photo(self, photo_id: int) -> Optional[ReferencePhoto]:
        row = self.conn.execute(
            "SELECT * FROM reference_photos WHERE id = ?", (photo_id,)
        ).fetchone()
        return self._row_to_photo(row) if row else None

    def list_photos(self, tag_id: Optional[int] = None) -> List[ReferencePhoto]:
        if tag_id is not None:
            rows = self.conn.execute(
                "SELECT p.* FROM reference_photos p "
                "JOIN reference_photo_tags pt ON pt.reference_photo_id = p.id "
                "WHERE pt.tag_id = ? ORDER BY p.id",
                (tag_id,),
            ).fetchall()
        else:
            rows = self.conn.execute(
                "SELECT * FROM reference_photos ORDER BY original_file_name, id"
            ).fetchall()
        return [self._row_to_photo(r) for r in rows]

    def add_photo_tag(self, photo_id: int, tag_id: int) -> None:
        self.conn.execute(
            "INSERT OR IGNORE INTO reference_photo_tags (reference_photo_id, tag_id) VALUES (?, ?)",
            (photo_id, tag_id),
        )
        self.conn.commit()

    def remove_photo_tag(self, photo_id: int, tag_id: int) -> None:
        self.conn.execute(
            "DELETE FROM reference_photo_tags WHERE reference_photo_id = ? AND tag_id = ?",
            (photo_id, tag_id),
        )
        self.conn.commit()

    def delete_photo(self, photo_id: int) -> None:
        self.conn.execute("DELETE FROM reference_photos WHERE id = ?", (photo_id,))
        self.conn.commit()
        logger.info("Deleted reference photo %d", photo_id)

    def _photo_tag_ids(self, photo_id: int) -> List[int]:
        rows = self.conn.execute(
            "SELECT tag_id FROM reference_photo_tags WHERE reference_photo_id = ? ORDER BY tag_id",
            (photo_id,),
        ).fetchall()
        return [r["tag_id"] for r in rows]

    # ── Session plans ───────────────────────────────────────────────────────

    def create_plan(self, name: str, exercises: List[Tuple[int, int]],
                    created_at: Optional[datetime] = None) -> SessionPlan:
        ts = created_at or datetime.now()
        with self.conn:
            cur = self.conn.execute(
                "INSERT INTO session_plans (name, created_at) VALUES (?, ?)",
                (name, ts.isoformat()),
            )
            plan_id = cur.lastrowid
            self._insert_exercises(plan_id, exercises)
        return self.get_plan(plan_id)

    def replace_plan(self, plan_id: int, name: str, exercises: List[Tuple[int, int]]) -> None:
        """Rename a plan and swap its exercise list in one transaction."""
        with self.conn:
            self.conn.execute("UPDATE session_plans SET name = ? WHERE id = ?", (name, plan_id))
            self.conn.execute("DELETE FROM session_exercises WHERE plan_id = ?", (plan_id,))
            self._insert_exercises(plan_id, exercises)

    def delete_plan(self, plan_id: int) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM session_plans WHERE id = ?", (plan_id,))
        logger.info("Deleted plan %d", plan_id)

    def get_plan(self, plan_id: int) -> Optional[SessionPlan]:
        row = self.conn.execute(
            "SELECT * FROM session_plans WHERE id = ?", (plan_id,)
        ).fetchone()
        if not row:
            return None
        plan = self._row_to_plan(row)
        plan.exercises = self.list_plan_exercises(plan_id)
        return plan

    def list_plans(self) -> List[SessionPlan]:
        rows = self.conn.execute(
            "SELECT * FROM session_plans ORDER BY created_at DESC, id DESC"
        ).fetchall()
        plans = [self._row_to_plan(r) for r in rows]
        for p in plans:
            p.exercises = self.list_plan_exercises(p.id)
        return plans

    def list_plan_exercises(self, plan_id: int) -> List[SessionExercise]:
        rows = self.conn.execute(
            "SELECT e.*, COALESCE(t.name, '') AS tag_name FROM session_exercises e "
            "LEFT JOIN tags t ON e.tag_id = t.id "
            "WHERE e.plan_id = ? ORDER BY e.sort_order",
            (plan_id,),
        ).fetchall()
        return [self._row_to_exercise(r) for r in rows]

    def _insert_exercises(self, plan_id: int, exercises: List[Tuple[int, int]]) -> None:
        self.conn.executemany(
            "INSERT INTO session_exercises (plan_id, tag_id, duration_seconds, sort_order) "
            "VALUES (?, ?, ?, ?)",
            [(plan_id, tag_id, duration, i) for i, (tag_id, duration) in enumerate(exercises)],
        )

    # ── Drawing sessions ────────────────────────────────────────────────────

    def create_session(self, plan_id: int, started_at: datetime) -> DrawingSession:
        cur = self.conn.execute(
            "INSERT INTO drawing_sessions (plan_id, started_at) VALUES (?, ?)",
            (plan_id, started_at.isoformat()),
        )
        self.conn.commit()
        return DrawingSession(id=cur.lastrowid, plan_id=plan_id, started_at=started_at)

    def complete_session(self, session_id: int, completed_at: datetime) -> bool:
        """Stamp completion once. Returns False if already complete (or missing)."""
        cur = self.conn.execute(
            "UPDATE drawing_sessions SET is_completed = 1, completed_at = ? "
            "WHERE id = ? AND is_completed = 0",
            (completed_at.isoformat(), session_id),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def get_session(self, session_id: int) -> Optional[DrawingSession]:
        row = self.conn.execute(
            "SELECT s.*, COALESCE(p.name, '') AS plan_name FROM drawing_sessions s "
            "LEFT JOIN session_plans p ON s.plan_id = p.id WHERE s.id = ?",
            (session_id,),
        ).fetchone()
        return self._row_to_session(row) if row else None

    def list_completed_sessions(self) -> List[DrawingSession]:
        rows = self.conn.execute(
            "SELECT s.*, COALESCE(p.name, '') AS plan_name FROM drawing_sessions s "
            "LEFT JOIN session_plans p ON s.plan_id = p.id "
            "WHERE s.is_completed = 1 ORDER BY s.completed_at DESC"
        ).fetchall()
        return [self._row_to_session(r) for r in rows]

    # ── Exercise results ────────────────────────────────────────────────────

    def add_result(self, session_id: int, exercise_id: int, photo_id: Optional[int],
                   sort_order: int, was_skipped: bool) -> ExerciseResult:
        cur = self.conn.execute(
            "INSERT INTO exercise_results "
            "(session_id, exercise_id, reference_photo_id, sort_order, was_skipped) "
            "VALUES (?, ?, ?, ?, ?)",
            (session_id, exercise_id, photo_id, sort_order, int(was_skipped)),
        )
        self.conn.commit()
        return ExerciseResult(
            id=cur.lastrowid, session_id=session_id, exercise_id=exercise_id,
            reference_photo_id=photo_id, sort_order=sort_order, was_skipped=was_skipped,
        )

    def list_results(self, session_id: int) -> List[ExerciseResult]:
        rows = self.conn.execute(
            "SELECT r.*, COALESCE(p.file_path, '') AS photo_path, "
            "COALESCE(t.name, '') AS tag_name "
            "FROM exercise_results r "
            "LEFT JOIN reference_photos p ON r.reference_photo_id = p.id "
            "LEFT JOIN session_exercises e ON r.exercise_id = e.id "
            "LEFT JOIN tags t ON e.tag_id = t.id "
            "WHERE r.session_id = ? ORDER BY r.sort_order",
            (session_id,),
        ).fetchall()
        results = [self._row_to_result(r) for r in rows]
        for res in results:
            res.drawing = self.get_drawing_for_result(res.id)
        return results

    # ── Completed drawings ──────────────────────────────────────────────────

    def add_drawing(self, drawing: CompletedDrawing) -> CompletedDrawing:
        uploaded = drawing.uploaded_at or datetime.now()
        cur = self.conn.execute(
            "INSERT INTO completed_drawings "
            "(exercise_result_id, file_path, original_file_name, uploaded_at, tag_id, "
            "duration_seconds, drawn_at, reference_photo_id, artist_id) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                drawing.exercise_result_id, drawing.file_path, drawing.original_file_name,
                uploaded.isoformat(), drawing.tag_id, drawing.duration_seconds,
                drawing.drawn_at.isoformat() if drawing.drawn_at else None,
                drawing.reference_photo_id, drawing.artist_id,
            ),
        )
        self.conn.commit()
        return self.get_drawing(cur.lastrowid)

    def get_drawing(self, drawing_id: int) -> Optional[CompletedDrawing]:
        row = self.conn.execute(
            _DRAWING_SELECT + " WHERE d.id = ?", (drawing_id,)
        ).fetchone()
        return self._row_to_drawing(row) if row else None

    def get_drawing_for_result(self, result_id: int) -> Optional[CompletedDrawing]:
        row = self.conn.execute(
            _DRAWING_SELECT + " WHERE d.exercise_result_id = ? ORDER BY d.id DESC LIMIT 1",
            (result_id,),
        ).fetchone()
        return self._row_to_drawing(row) if row else None

    def list_drawings(self, tag_id: Optional[int] = None,
                      artist_id: Optional[int] = None) -> List[CompletedDrawing]:
        query = _DRAWING_SELECT
        conditions: List[str] = []
        params: list = []
        if tag_id is not None:
            conditions.append("(d.tag_id = ? OR e.tag_id = ?)")
            params.extend([tag_id, tag_id])
        if artist_id is not None:
            conditions.append("d.artist_id = ?")
            params.append(artist_id)
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY d.uploaded_at DESC, d.id DESC"
        rows = self.conn.execute(query, params).fetchall()
        return [self._row_to_drawing(r) for r in rows]

    def set_drawing_artist(self, drawing_id: int, artist_id: Optional[int]) -> None:
        self.conn.execute(
            "UPDATE completed_drawings SET artist_id = ? WHERE id = ?",
            (artist_id, drawing_id),
        )
        self.conn.commit()

    # ── Artists ─────────────────────────────────────────────────────────────

    def create_artist(self, name: str) -> Artist:
        ts = datetime.now()
        cur = self.conn.execute(
            "INSERT INTO artists (name, created_at) VALUES (?, ?)", (name, ts.isoformat())
        )
        self.conn.commit()
        return Artist(id=cur.lastrowid, name=name, created_at=ts)

    def get_artist(self, artist_id: int) -> Optional[Artist]:
        row = self.conn.execute("SELECT * FROM artists WHERE id = ?", (artist_id,)).fetchone()
        return self._row_to_artist(row) if row else None

    def list_artists(self) -> List[Artist]:
        rows = self.conn.execute("SELECT * FROM artists ORDER BY name").fetchall()
        return [self._row_to_artist(r) for r in rows]

    def rename_artist(self, artist_id: int, name: str) -> None:
        self.conn.execute("UPDATE artists SET name = ? WHERE id = ?", (name, artist_id))
        self.conn.commit()

    def delete_artist(self, artist_id: int) -> None:
        """Delete an artist; their drawings stay, unattributed."""
        with self.conn:
            self.conn.execute(
                "UPDATE completed_drawings SET artist_id = NULL WHERE artist_id = ?",
                (artist_id,),
            )
            self.conn.execute("DELETE FROM artists WHERE id = ?", (artist_id,))
        logger.info("Deleted artist %d", artist_id)

    # ── Row mappers ─────────────────────────────────────────────────────────

    @staticmethod
    def _row_to_tag(row: sqlite3.Row) -> Tag:
        return Tag(id=row["id"], name=row["name"])

    def _row_to_photo(self, row: sqlite3.Row) -> ReferencePhoto:
        return ReferencePhoto(
            id=row["id"], file_path=row["file_path"],
            original_file_name=row["original_file_name"],
            width=row["width"], height=row["height"],
            imported_at=_parse_dt(row["imported_at"]),
            tag_ids=self._photo_tag_ids(row["id"]),
        )

    @staticmethod
    def _row_to_plan(row: sqlite3.Row) -> SessionPlan:
        return SessionPlan(id=row["id"], name=row["name"],
                           created_at=_parse_dt(row["created_at"]))

    @staticmethod
    def _row_to_exercise(row: sqlite3.Row) -> SessionExercise:
        return SessionExercise(
            id=row["id"], plan_id=row["plan_id"], tag_id=row["tag_id"],
            duration_seconds=row["duration_seconds"], sort_order=row["sort_order"],
            tag_name=row["tag_name"],
        )

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> DrawingSession:
        return DrawingSession(
            id=row["id"], plan_id=row["plan_id"],
            started_at=_parse_dt(row["started_at"]),
            completed_at=_parse_dt(row["completed_at"]),
            is_completed=bool(row["is_completed"]),
            plan_name=row["plan_name"],
        )

    @staticmethod
    def _row_to_result(row: sqlite3.Row) -> ExerciseResult:
        return ExerciseResult(
            id=row["id"], session_id=row["session_id"],
            exercise_id=row["exercise_id"],
            reference_photo_id=row["reference_photo_id"],
            sort_order=row["sort_order"],
            was_skipped=bool(row["was_skipped"]),
            photo_path=row["photo_path"],
            tag_name=row["tag_name"],
        )

    @staticmethod
    def _row_to_drawing(row: sqlite3.Row) -> CompletedDrawing:
        return CompletedDrawing(
            id=row["id"], exercise_result_id=row["exercise_result_id"],
            file_path=row["file_path"], original_file_name=row["original_file_name"],
            uploaded_at=_parse_dt(row["uploaded_at"]),
            tag_id=row["tag_id"], duration_seconds=row["duration_seconds"] or 0,
            drawn_at=_parse_dt(row["drawn_at"]),
            reference_photo_id=row["reference_photo_id"],
            artist_id=row["artist_id"],
            tag_name=row["tag_name"], artist_name=row["artist_name"],
            reference_path=row["reference_path"],
        )

    @staticmethod
    def _row_to_artist(row: sqlite3.Row) -> Artist:
        return Artist(id=row["id"], name=row["name"],
                      created_at=_parse_dt(row["created_at"]))


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The Repository is the ONLY place raw SQL queries live. Every other layer
#   calls methods like repo.add_result() instead of writing SQL strings.
#   This is the "Repository Pattern."
#
# Key methods:
#   - Tags / photos: the library, including the many-to-many photo<->tag link.
#   - Plans: create_plan() and replace_plan() write the plan row and its
#     exercises in one transaction, numbering sort_order 0..n-1.
#   - Sessions / results: create_session(), add_result(), and
#     complete_session(), which only stamps a row that is not already
#     complete (the WHERE is_completed = 0 clause makes it idempotent).
#   - Drawings / artists: the gallery. Drawings resolve their tag either from
#     their own tag_id (manual uploads) or through the exercise they came from.
#
# Data flow:
#   Service layer -> Repository.method() -> SQL -> sqlite3.Row -> dataclass model
