"""
Learning domain records (read-only from the query core's perspective).

Graph:
    Course 1-* Module 1-* Activity *-1 ActivityType
    Activity 1-* Feedback *-1 User
    Course *-* User via Enrollment
    Document optionally attached to a User, Course, Module or Activity

List-able records are registered with the field registry at import time so
`sortBy` / `filterBy` resolve without per-request type inspection.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from lms.querying.fields import register


class FeedbackStatus(str, enum.Enum):
    COMPLETED = "completed"
    APPROVED = "approved"
    DELAYED = "delayed"
    PENDING = "pending"

    @property
    def is_completion(self) -> bool:
        return self in COMPLETION_STATUSES

    @classmethod
    def from_label(cls, label: str) -> "FeedbackStatus":
        """Parse a stored status; accepts the English values and legacy Swedish labels."""
        raw = (label or "").strip()
        legacy = _LEGACY_LABELS.get(raw)
        if legacy is not None:
            return legacy
        try:
            return cls(raw.lower())
        except ValueError as exc:
            raise ValueError(f"invalid_feedback_status: {label!r}") from exc


_LEGACY_LABELS = {
    "Genomförd": FeedbackStatus.COMPLETED,
    "Godkänd": FeedbackStatus.APPROVED,
    "Försenad": FeedbackStatus.DELAYED,
}

COMPLETION_STATUSES = frozenset({FeedbackStatus.COMPLETED, FeedbackStatus.APPROVED})


def stored_labels(statuses: Iterable[FeedbackStatus]) -> list[str]:
    """All stored spellings of `statuses`: English values plus legacy labels."""
    wanted = set(statuses)
    labels = sorted(s.value for s in wanted)
    labels.extend(label for label, status in _LEGACY_LABELS.items() if status in wanted)
    return labels


@register
@dataclass
class Course:
    id: UUID
    name: str
    description: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@register
@dataclass
class Module:
    id: UUID
    course_id: UUID
    name: str
    description: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass
class ActivityType:
    id: UUID
    name: str


@register
@dataclass
class Activity:
    id: UUID
    module_id: UUID
    activity_type_id: UUID
    name: str
    description: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass
class Feedback:
    user_id: str
    activity_id: UUID
    status: FeedbackStatus
    feedback: Optional[str] = None


@register
@dataclass
class User:
    id: str
    first_name: str = ""
    last_name: str = ""
    user_name: str = ""
    email: str = ""
    role: str = "student"


@dataclass(frozen=True)
class Enrollment:
    user_id: str
    course_id: UUID


@register
@dataclass
class Document:
    id: UUID
    name: str
    path: str
    description: Optional[str] = None
    timestamp: Optional[datetime] = None
    user_id: Optional[str] = None
    course_id: Optional[UUID] = None
    module_id: Optional[UUID] = None
    activity_id: Optional[UUID] = None


__all__ = [
    "COMPLETION_STATUSES",
    "Activity",
    "ActivityType",
    "Course",
    "Document",
    "Enrollment",
    "Feedback",
    "FeedbackStatus",
    "Module",
    "User",
    "stored_labels",
]
