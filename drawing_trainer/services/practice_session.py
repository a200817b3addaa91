"""
Practice Session — the state machine that runs a timed drawing session.

Walks a plan's exercises in order: picks a reference photo for each one,
counts down its duration, inserts a fixed break between exercises, records a
result for every photo shown (skips included), and finally marks the session
complete.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterator, List, Optional

from drawing_trainer.data.models import (
    DrawingSession,
    ExerciseResult,
    ReferencePhoto,
    SessionExercise,
    SessionPlan,
)
from drawing_trainer.services.countdown_timer import CountdownTimer
from drawing_trainer.services.errors import PersistenceError, SessionStateError
from drawing_trainer.services.history_service import HistoryService
from drawing_trainer.services.photo_selector import PhotoSelector

logger = logging.getLogger(__name__)

BREAK_DURATION_SECONDS = 30


class SessionState(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    DRAWING = "drawing"
    BREAK = "break"
    COMPLETE = "complete"


class PracticeSession:
    """
    Runs one plan from start to finish. One instance per run.

    State transitions:
        idle → initializing → drawing ⇄ break → complete

    The session owns its CountdownTimer. Observers are plain callbacks
    passed to the constructor:
        on_state_changed(SessionState), on_tick(remaining_seconds),
        on_photo_changed(Optional[ReferencePhoto]), on_paused_changed(bool),
        on_finished(session_id), on_error(message)
    """

    def __init__(
        self,
        history: HistoryService,
        selector: PhotoSelector,
        timer: Optional[CountdownTimer] = None,
        on_state_changed: Optional[Callable[[SessionState], None]] = None,
        on_tick: Optional[Callable[[float], None]] = None,
        on_photo_changed: Optional[Callable[[Optional[ReferencePhoto]], None]] = None,
        on_paused_changed: Optional[Callable[[bool], None]] = None,
        on_finished: Optional[Callable[[int], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.history = history
        self.selector = selector

        self.timer = timer or CountdownTimer()
        self.timer.on_tick = self._on_timer_tick
        self.timer.on_elapsed = self._on_timer_elapsed

        # Callbacks the UI will set
        self.on_state_changed = on_state_changed
        self.on_tick = on_tick
        self.on_photo_changed = on_photo_changed
        self.on_paused_changed = on_paused_changed
        self.on_finished = on_finished
        self.on_error = on_error

        self.state = SessionState.IDLE
        self.plan: Optional[SessionPlan] = None
        self.session: Optional[DrawingSession] = None
        self.exercises: List[SessionExercise] = []
        self.exercise_index = 0
        self.current_photo: Optional[ReferencePhoto] = None
        self.progress = 0.0
        self.break_seconds_remaining = 0
        self.is_paused = False
        self.results: List[ExerciseResult] = []
        self.last_error: Optional[str] = None

        self._result_sort_order = 0
        self._busy = False

    # ── Read-only views ─────────────────────────────────────────────────────

    @property
    def session_id(self) -> Optional[int]:
        return self.session.id if self.session else None

    @property
    def current_exercise(self) -> Optional[SessionExercise]:
        if 0 <= self.exercise_index < len(self.exercises):
            return self.exercises[self.exercise_index]
        return None

    @property
    def exercise_info(self) -> str:
        return f"Exercise {self.exercise_index + 1} of {len(self.exercises)}"

    # ── User actions ────────────────────────────────────────────────────────

    def start(self, plan: SessionPlan) -> None:
        """Snapshot the plan, persist a session record, and run exercise 1."""
        if self.state != SessionState.IDLE:
            raise SessionStateError(
                f"Cannot start: session is already '{self.state.value}'."
            )
        self.plan = plan
        self.exercises = sorted(plan.exercises, key=lambda e: e.sort_order)
        self.exercise_index = 0
        self._result_sort_order = 0
        self.results = []
        self.last_error = None
        self._set_state(SessionState.INITIALIZING)
        try:
            with self._transition():
                self.session = self.history.start_session(plan.id)
                logger.info("Practice session %d: %d exercises from plan '%s'",
                            self.session.id, len(self.exercises), plan.name)
                self._start_exercise()
        except PersistenceError as e:
            self._fail(e)
            if self.session is None:
                # Nothing was written; allow another start() attempt
                self._set_state(SessionState.IDLE)
            raise

    def skip(self) -> Optional[ExerciseResult]:
        """Record the current photo as skipped and draw a different one.

        The exercise timer keeps running; only the photo changes.
        """
        if not self._accepts("skip", SessionState.DRAWING):
            return None
        exercise = self.exercises[self.exercise_index]
        try:
            with self._transition():
                result = self._record_current(was_skipped=True)
                exclude = self.current_photo.id if self.current_photo else None
                photo = self.selector.pick(exercise.tag_id, exclude)
                if photo is not None:
                    self._set_photo(photo)
        except PersistenceError as e:
            self._fail(e)
            raise
        logger.info("Session %d: skipped result #%d", self.session.id, result.sort_order)
        return result

    def toggle_pause(self) -> None:
        if not self._accepts("pause/resume", SessionState.DRAWING, SessionState.BREAK):
            return
        if self.timer.is_paused:
            self.timer.resume()
        else:
            self.timer.pause()
        self._set_paused(self.timer.is_paused)

    def end_session(self) -> None:
        """Stop the clock and mark the session complete. Safe to call twice."""
        if self.state == SessionState.COMPLETE:
            logger.info("Session %s already complete; ignoring end.", self.session_id)
            return
        if self.state == SessionState.IDLE or self.session is None:
            raise SessionStateError("No active session to end.")
        if self._busy:
            logger.warning("Ignoring end session: a transition is in flight.")
            return
        try:
            with self._transition():
                self._end_session()
        except PersistenceError as e:
            self._fail(e)
            raise

    def dispose(self) -> None:
        """Stop the timer and detach every observer (navigating away)."""
        self.timer.stop()
        self.timer.on_tick = None
        self.timer.on_elapsed = None
        self.on_state_changed = None
        self.on_tick = None
        self.on_photo_changed = None
        self.on_paused_changed = None
        self.on_finished = None
        self.on_error = None

    # ── Timer callbacks ─────────────────────────────────────────────────────

    def _on_timer_tick(self, remaining: float) -> None:
        if self.state == SessionState.DRAWING:
            exercise = self.current_exercise
            # zero-length exercises keep the previous progress value
            if exercise is not None and exercise.duration_seconds > 0:
                self.progress = 1.0 - remaining / exercise.duration_seconds
        elif self.state == SessionState.BREAK:
            self.break_seconds_remaining = math.ceil(remaining)
        if self.on_tick:
            self.on_tick(remaining)

    def _on_timer_elapsed(self) -> None:
        try:
            with self._transition():
                if self.state == SessionState.DRAWING:
                    self._record_current(was_skipped=False)
                    self.exercise_index += 1
                    if self.exercise_index < len(self.exercises):
                        self.break_seconds_remaining = BREAK_DURATION_SECONDS
                        self._set_state(SessionState.BREAK)
                        self.timer.start(BREAK_DURATION_SECONDS)
                    else:
                        self._end_session()
                elif self.state == SessionState.BREAK:
                    self._start_exercise()
        except PersistenceError as e:
            # No caller to raise to from a timer; report through on_error
            self._fail(e)

    # ── Transitions ─────────────────────────────────────────────────────────

    def _start_exercise(self) -> None:
        if self.exercise_index >= len(self.exercises):
            self._end_session()
            return
        exercise = self.exercises[self.exercise_index]
        photo = self.selector.pick(exercise.tag_id)
        if photo is None:
            logger.warning("Exercise %d: tag '%s' has no photos; running without one.",
                           self.exercise_index + 1, exercise.tag_name or exercise.tag_id)
        self.progress = 0.0
        self._set_photo(photo)
        self._set_paused(False)
        self._set_state(SessionState.DRAWING)
        self.timer.start(exercise.duration_seconds)

    def _end_session(self) -> None:
        self.timer.stop()
        self._set_paused(False)
        self.history.complete_session(self.session.id)
        self.last_error = None
        self._set_state(SessionState.COMPLETE)
        if self.on_finished:
            self.on_finished(self.session.id)

    def _record_current(self, was_skipped: bool) -> ExerciseResult:
        exercise = self.exercises[self.exercise_index]
        photo_id = self.current_photo.id if self.current_photo else None
        result = self.history.record_result(
            self.session.id, exercise.id, photo_id, self._result_sort_order, was_skipped,
        )
        self._result_sort_order += 1
        self.results.append(result)
        return result

    def _fail(self, error: Exception) -> None:
        logger.error("Practice session %s failed: %s", self.session_id, error)
        self.timer.stop()
        self._set_paused(False)
        self.last_error = str(error)
        if self.on_error:
            self.on_error(self.last_error)

    # ── Helpers ─────────────────────────────────────────────────────────────

    @contextmanager
    def _transition(self) -> Iterator[None]:
        was_busy = self._busy
        self._busy = True
        try:
            yield
        finally:
            self._busy = was_busy

    def _accepts(self, action: str, *states: SessionState) -> bool:
        if self._busy:
            logger.warning("Ignoring %s: a transition is in flight.", action)
            return False
        if self.last_error is not None:
            logger.warning("Ignoring %s: session failed (%s).", action, self.last_error)
            return False
        if self.state not in states:
            logger.warning("Ignoring %s in state '%s'.", action, self.state.value)
            return False
        return True

    def _set_state(self, state: SessionState) -> None:
        if state == self.state:
            return
        logger.info("Session %s: %s -> %s", self.session_id, self.state.value, state.value)
        self.state = state
        if self.on_state_changed:
            self.on_state_changed(state)

    def _set_photo(self, photo: Optional[ReferencePhoto]) -> None:
        self.current_photo = photo
        if self.on_photo_changed:
            self.on_photo_changed(photo)

    def _set_paused(self, paused: bool) -> None:
        if paused == self.is_paused:
            return
        self.is_paused = paused
        if self.on_paused_changed:
            self.on_paused_changed(paused)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Drives one drawing session. The CountdownTimer tells it when time is
#   up; it decides what comes next and writes every result through
#   HistoryService straight away.
#
# Key rules:
#   - Skip records a result and swaps the photo, but the exercise's timer
#     keeps running. N skips in one exercise give N+1 results for it.
#   - Breaks are always 30 seconds and never follow the last exercise.
#   - Ending early only completes the session; exercises never reached get
#     no result at all, which is how "never shown" differs from "skipped".
#   - An empty tag is not an error: the exercise runs with no photo and its
#     result stores a NULL photo.
#
# Serialization:
#   _transition() marks lifecycle work (start, skip, elapsed, end) as in
#   flight. User actions arriving meanwhile are ignored and logged, so two
#   skips can never interleave and produce out-of-order sort values.
#
# Failure:
#   A PersistenceError stops the timer, stores last_error and calls
#   on_error. The state is left where it was (not COMPLETE); only
#   end_session() (a retry) or dispose() is accepted afterwards.
