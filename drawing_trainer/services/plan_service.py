"""
Plan Service — create, edit and load session plans.

A plan is a name plus an ordered list of (tag, duration) exercises. Sort
order is always rewritten as 0..n-1 from list order when a plan is saved.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from drawing_trainer.data.models import SessionExercise, SessionPlan
from drawing_trainer.data.repository import Repository

logger = logging.getLogger(__name__)

ExerciseSpec = Tuple[int, int]  # (tag_id, duration_seconds)


class PlanService:
    """CRUD for session plans."""

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def list_plans(self) -> List[SessionPlan]:
        return self.repo.list_plans()

    def get_plan(self, plan_id: int) -> Optional[SessionPlan]:
        return self.repo.get_plan(plan_id)

    def get_plan_exercises(self, plan_id: int) -> List[SessionExercise]:
        """Exercises of a plan in execution order."""
        return self.repo.list_plan_exercises(plan_id)

    def create_plan(self, name: str, exercises: Sequence[ExerciseSpec]) -> SessionPlan:
        name = self._validate(name, exercises)
        plan = self.repo.create_plan(name, list(exercises))
        logger.info("Created plan %d '%s' with %d exercises", plan.id, name, len(exercises))
        return plan

    def update_plan(self, plan_id: int, name: str, exercises: Sequence[ExerciseSpec]) -> Optional[SessionPlan]:
        """Rename a plan and replace its exercises. Returns None if it doesn't exist."""
        name = self._validate(name, exercises)
        if self.repo.get_plan(plan_id) is None:
            return None
        self.repo.replace_plan(plan_id, name, list(exercises))
        logger.info("Updated plan %d '%s'", plan_id, name)
        return self.repo.get_plan(plan_id)

    def delete_plan(self, plan_id: int) -> None:
        self.repo.delete_plan(plan_id)

    @staticmethod
    def group_exercises(exercises: Sequence[SessionExercise]) -> List[Tuple[SessionExercise, int]]:
        """
        Collapse runs of identical (tag, duration) exercises into (exercise, count).

        [Figure 30s, Figure 30s, Portrait 60s] -> [(Figure 30s, 2), (Portrait 60s, 1)]
        """
        ordered = sorted(exercises, key=lambda e: e.sort_order)
        groups: List[Tuple[SessionExercise, int]] = []
        for ex in ordered:
            if groups:
                head, count = groups[-1]
                if head.tag_id == ex.tag_id and head.duration_seconds == ex.duration_seconds:
                    groups[-1] = (head, count + 1)
                    continue
            groups.append((ex, 1))
        return groups

    @staticmethod
    def expand_groups(groups: Sequence[Tuple[int, int, int]]) -> List[ExerciseSpec]:
        """Turn (tag_id, duration_seconds, count) rows back into a flat exercise list."""
        exercises: List[ExerciseSpec] = []
        for tag_id, duration, count in groups:
            exercises.extend([(tag_id, duration)] * count)
        return exercises

    @staticmethod
    def _validate(name: str, exercises: Sequence[ExerciseSpec]) -> str:
        name = (name or "").strip()
        if not name:
            raise ValueError("Plan name cannot be empty.")
        if not exercises:
            raise ValueError("A plan needs at least one exercise.")
        for tag_id, duration in exercises:
            if duration < 0:
                raise ValueError(f"Exercise duration cannot be negative ({duration}s).")
        return name
