"""
Data models for DrawingTrainer.

These are plain dataclasses that represent database rows. They decouple the rest
of the app from raw SQL dictionaries so every layer speaks the same "language."
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Tag:
    """A photo category (e.g. 'Portrait', 'Figure')."""
    id: Optional[int] = None
    name: str = ""


@dataclass
class ReferencePhoto:
    """An imported reference photo living in app storage."""
    id: Optional[int] = None
    file_path: str = ""
    original_file_name: str = ""
    width: int = 0
    height: int = 0
    imported_at: Optional[datetime] = None
    tag_ids: List[int] = field(default_factory=list)


@dataclass
class SessionExercise:
    """One (tag, duration) slot of a plan, executed in sort_order."""
    id: Optional[int] = None
    plan_id: Optional[int] = None
    tag_id: Optional[int] = None
    duration_seconds: int = 0
    sort_order: int = 0
    tag_name: str = ""  # joined for display


@dataclass
class SessionPlan:
    """An ordered template of exercises."""
    id: Optional[int] = None
    name: str = ""
    created_at: Optional[datetime] = None
    exercises: List[SessionExercise] = field(default_factory=list)

    @property
    def total_seconds(self) -> int:
        return sum(e.duration_seconds for e in self.exercises)


@dataclass
class Artist:
    """Someone a completed drawing can be attributed to."""
    id: Optional[int] = None
    name: str = ""
    created_at: Optional[datetime] = None


@dataclass
class CompletedDrawing:
    """
    An uploaded drawing.

    Post-session uploads point at an ExerciseResult; manual uploads leave
    exercise_result_id empty and fill tag/duration/reference directly.
    """
    id: Optional[int] = None
    exercise_result_id: Optional[int] = None
    file_path: str = ""
    original_file_name: str = ""
    uploaded_at: Optional[datetime] = None
    tag_id: Optional[int] = None
    duration_seconds: int = 0
    drawn_at: Optional[datetime] = None
    reference_photo_id: Optional[int] = None
    artist_id: Optional[int] = None
    # joined for display
    tag_name: str = ""
    artist_name: str = ""
    reference_path: str = ""


@dataclass
class ExerciseResult:
    """
    One presentation of a reference photo during a session.

    A skip and a completed exercise both produce a result; exercises never
    reached produce none. reference_photo_id is None when the exercise's tag
    had no photos.
    """
    id: Optional[int] = None
    session_id: Optional[int] = None
    exercise_id: Optional[int] = None
    reference_photo_id: Optional[int] = None
    sort_order: int = 0
    was_skipped: bool = False
    # joined for display
    photo_path: str = ""
    tag_name: str = ""
    drawing: Optional[CompletedDrawing] = None


@dataclass
class DrawingSession:
    """One timed run through a plan."""
    id: Optional[int] = None
    plan_id: Optional[int] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    is_completed: bool = False
    plan_name: str = ""  # joined for display
    results: List[ExerciseResult] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Defines the "shape" of every object in the system as Python dataclasses.
#   They carry data but have no database logic themselves.
#
# Key classes:
#   - Tag / ReferencePhoto: the photo library. A photo can carry many tags;
#     the session engine only ever asks "give me a photo with tag X".
#   - SessionPlan / SessionExercise: the template the user builds in the
#     planner. sort_order fixes execution order.
#   - DrawingSession / ExerciseResult: what actually happened during a run.
#     Skips are results too, so a single exercise slot can own several
#     results with increasing sort_order.
#   - CompletedDrawing / Artist: the gallery side, filled in after a session
#     (or manually) and never touched by the timer loop.
#
# Data flow:
#   Planner -> SessionPlan rows -> PracticeSession snapshots exercises ->
#   HistoryService writes DrawingSession + ExerciseResult rows ->
#   post-session dialog attaches CompletedDrawing rows.
