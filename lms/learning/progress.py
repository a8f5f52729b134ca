"""
Progress fraction for modules and courses.

Behavior:
    - Learner view: distinct activities in scope with a completion-status
      feedback by the user, divided by the activity count in scope.
    - Zero activities in scope -> `Decimal(0)`.
    - Aggregate view (no user): per-student fractions of the students enrolled
      in the owning course, combined by an `AggregateStrategy`. No students ->
      `Decimal(0)`.
    - Every result lies in [0, 1]; anything else raises `ValueError`.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Dict, Optional, Sequence
from uuid import UUID

from .errors import NotFoundError
from .models import COMPLETION_STATUSES
from .ports import LearningRepoProtocol

logger = logging.getLogger("lms.learning.progress")

ZERO = Decimal(0)
ONE = Decimal(1)

AggregateStrategy = Callable[[Sequence[Decimal]], Decimal]


def mean(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return sum(values, ZERO) / Decimal(len(values))


def maximum(values: Sequence[Decimal]) -> Decimal:
    return max(values, default=ZERO)


def minimum(values: Sequence[Decimal]) -> Decimal:
    return min(values, default=ZERO)


STRATEGIES: Dict[str, AggregateStrategy] = {
    "mean": mean,
    "max": maximum,
    "min": minimum,
}


def get_strategy(name: str) -> AggregateStrategy:
    try:
        return STRATEGIES[(name or "").strip().lower()]
    except KeyError as exc:
        raise ValueError(f"invalid_progress_aggregate: {name!r}") from exc


def _fraction(completed: int, total: int) -> Decimal:
    if total <= 0:
        return ZERO
    value = Decimal(completed) / Decimal(total)
    if value < ZERO or value > ONE:
        raise ValueError(f"progress_out_of_range: {completed}/{total}")
    return value


class ProgressCalculator:
    def __init__(self, repo: LearningRepoProtocol, aggregate: AggregateStrategy = mean) -> None:
        self.repo = repo
        self.aggregate = aggregate

    def calculate(self, module_id: UUID, user_id: Optional[str] = None) -> Decimal:
        """Completion fraction of one module for a learner, or the aggregate."""
        total = self.repo.count_activities(module_id=module_id)
        if user_id is not None:
            return self._learner(user_id, total, module_id=module_id)
        module = self.repo.get_module(module_id)
        if module is None:
            raise NotFoundError("module_not_found")
        return self._aggregate(module.course_id, total, module_id=module_id)

    def calculate_course(self, course_id: UUID, user_id: Optional[str] = None) -> Decimal:
        """Completion fraction over every activity of every module in a course."""
        total = self.repo.count_activities(course_id=course_id)
        if user_id is not None:
            return self._learner(user_id, total, course_id=course_id)
        return self._aggregate(course_id, total, course_id=course_id)

    def _learner(
        self,
        user_id: str,
        total: int,
        *,
        module_id: Optional[UUID] = None,
        course_id: Optional[UUID] = None,
    ) -> Decimal:
        if total == 0:
            return ZERO
        done = self.repo.count_completed_activities(
            user_id, COMPLETION_STATUSES, module_id=module_id, course_id=course_id
        )
        return _fraction(done, total)

    def _aggregate(
        self,
        owner_course_id: UUID,
        total: int,
        *,
        module_id: Optional[UUID] = None,
        course_id: Optional[UUID] = None,
    ) -> Decimal:
        """Combine per-student fractions; completed counts come from one grouped read."""
        if total == 0:
            return ZERO
        student_ids = self.repo.list_enrolled_student_ids(owner_course_id)
        if not student_ids:
            return ZERO
        done = self.repo.count_completed_by_user(
            student_ids, COMPLETION_STATUSES, module_id=module_id, course_id=course_id
        )
        fractions = [_fraction(done.get(sid, 0), total) for sid in student_ids]
        value = self.aggregate(fractions)
        if value < ZERO or value > ONE:
            raise ValueError("progress_out_of_range")
        logger.debug("lms.progress.aggregate course_id=%s students=%s", owner_course_id, len(student_ids))
        return value


__all__ = ["AggregateStrategy", "ProgressCalculator", "STRATEGIES", "get_strategy", "mean", "maximum", "minimum"]
