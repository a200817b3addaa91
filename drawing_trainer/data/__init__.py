from .database import Database
from .models import (
    Artist, CompletedDrawing, DrawingSession, ExerciseResult,
    ReferencePhoto, SessionExercise, SessionPlan, Tag,
)
from .repository import Repository

__all__ = [
    "Database", "Artist", "CompletedDrawing", "DrawingSession", "ExerciseResult",
    "ReferencePhoto", "SessionExercise", "SessionPlan", "Tag", "Repository",
]
