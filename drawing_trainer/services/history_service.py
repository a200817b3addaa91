"""
History Service — durable record of drawing sessions and their results.

The practice session hands every result here the moment it happens; nothing
is buffered in memory. Store failures surface as PersistenceError.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import List, Optional

from drawing_trainer.data.models import DrawingSession, ExerciseResult
from drawing_trainer.data.repository import Repository
from drawing_trainer.services.errors import PersistenceError

logger = logging.getLogger(__name__)


class HistoryService:
    """Persists sessions, exercise results, and completion."""

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    # ── Recording (used by PracticeSession) ─────────────────────────────────

    def start_session(self, plan_id: int) -> DrawingSession:
        try:
            session = self.repo.create_session(plan_id, datetime.now())
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not start a session for plan {plan_id}: {e}") from e
        logger.info("Drawing session %d started for plan %d", session.id, plan_id)
        return session

    def record_result(self, session_id: int, exercise_id: int, photo_id: Optional[int],
                      sort_order: int, was_skipped: bool) -> ExerciseResult:
        try:
            result = self.repo.add_result(session_id, exercise_id, photo_id,
                                          sort_order, was_skipped)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not record result for session {session_id}: {e}") from e
        logger.debug("Session %d: result #%d (exercise %s, photo %s, skipped=%s)",
                     session_id, sort_order, exercise_id, photo_id, was_skipped)
        return result

    def complete_session(self, session_id: int) -> bool:
        """Mark a session complete. Returns False when it already was."""
        try:
            stamped = self.repo.complete_session(session_id, datetime.now())
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not complete session {session_id}: {e}") from e
        if stamped:
            logger.info("Drawing session %d completed.", session_id)
        else:
            logger.info("Drawing session %d was already complete.", session_id)
        return stamped

    # ── Reading (post-session summary, history list) ────────────────────────

    def get_session_with_results(self, session_id: int) -> Optional[DrawingSession]:
        try:
            session = self.repo.get_session(session_id)
            if session is None:
                return None
            session.results = self.repo.list_results(session_id)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not load session {session_id}: {e}") from e
        return session

    def list_completed_sessions(self) -> List[DrawingSession]:
        try:
            sessions = self.repo.list_completed_sessions()
            for s in sessions:
                s.results = self.repo.list_results(s.id)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not list sessions: {e}") from e
        return sessions

    @staticmethod
    def session_summary(session: DrawingSession) -> str:
        plan_name = session.plan_name or "Unknown"
        return f"Session: {plan_name} - {len(session.results)} exercises completed"
