"""
Repository protocol for the Learning context.

Every list method returns a `Queryable` so the query pipeline (filter, sort,
paginate) runs against storage without knowing which backend it is. The
optional `enrolled_user_id` narrows rows to courses the user is enrolled in;
`None` means no narrowing. Narrowing is applied by the repository before any
caller-supplied filter.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol
from uuid import UUID

from lms.querying.source import Queryable

from .models import Activity, ActivityType, Course, Document, Feedback, FeedbackStatus, Module, User


class LearningRepoProtocol(Protocol):
    # --- Scoped list sources ------------------------------------------------
    def courses(self, *, enrolled_user_id: Optional[str] = None) -> Queryable[Course]:
        ...

    def modules(self, *, course_id: Optional[UUID] = None, enrolled_user_id: Optional[str] = None) -> Queryable[Module]:
        ...

    def activities(self, *, module_id: Optional[UUID] = None, enrolled_user_id: Optional[str] = None) -> Queryable[Activity]:
        ...

    def participants(self, course_id: UUID) -> Queryable[User]:
        ...

    def documents(self, *, enrolled_user_id: Optional[str] = None) -> Queryable[Document]:
        """Documents owned by the user or attached to a course, module or activity they are enrolled in."""
        ...

    def users(self) -> Queryable[User]:
        ...

    # --- Detail lookups -----------------------------------------------------
    def get_course(self, course_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Course]:
        ...

    def get_module(self, module_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Module]:
        ...

    def get_activity(self, activity_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Activity]:
        ...

    def get_document(self, document_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Document]:
        ...

    def get_user(self, user_id: str) -> Optional[User]:
        ...

    # --- Related data for includes -----------------------------------------
    def list_activity_types(self) -> List[ActivityType]:
        ...

    def get_activity_types(self, ids: Iterable[UUID]) -> dict[UUID, ActivityType]:
        ...

    def list_documents(
        self,
        *,
        course_id: Optional[UUID] = None,
        module_id: Optional[UUID] = None,
        activity_id: Optional[UUID] = None,
    ) -> List[Document]:
        ...

    def list_feedback(self, activity_id: UUID, *, user_id: Optional[str] = None) -> List[Feedback]:
        ...

    # --- Progress aggregates ------------------------------------------------
    def count_activities(self, *, module_id: Optional[UUID] = None, course_id: Optional[UUID] = None) -> int:
        ...

    def count_completed_activities(
        self,
        user_id: str,
        statuses: Iterable[FeedbackStatus],
        *,
        module_id: Optional[UUID] = None,
        course_id: Optional[UUID] = None,
    ) -> int:
        ...

    def count_completed_by_user(
        self,
        user_ids: Iterable[str],
        statuses: Iterable[FeedbackStatus],
        *,
        module_id: Optional[UUID] = None,
        course_id: Optional[UUID] = None,
    ) -> Dict[str, int]:
        """Completed-activity counts per user in one round trip; users without any are omitted."""
        ...

    def list_enrolled_student_ids(self, course_id: UUID) -> List[str]:
        ...


__all__ = ["LearningRepoProtocol"]
