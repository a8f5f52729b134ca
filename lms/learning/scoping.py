"""
Role-scoped view over the Learning repository.

Why:
    Visibility is decided once per request from the caller perspective. The
    view hands back sources that are already narrowed, so text filters, sorting
    and pagination (including `totalItems`) only ever see rows the caller may
    see.

Security:
    - `Restricted` callers see rows reachable from their own enrollments.
    - Detail and parent lookups outside that set raise `NotFoundError`, exactly
      like a missing id. Existence of foreign resources is not disclosed.
"""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from lms.identity_access.domain import Perspective, Privileged, Restricted, RoleNotSupportedError
from lms.querying.source import Queryable

from .errors import NotFoundError
from .models import Activity, ActivityType, Course, Document, Feedback, Module, User
from .ports import LearningRepoProtocol


class RoleScopedView:
    def __init__(self, repo: LearningRepoProtocol, perspective: Perspective) -> None:
        self.repo = repo
        self.perspective = perspective
        self._scope_user_id = self._scope_for(perspective)

    @staticmethod
    def _scope_for(perspective: Perspective) -> Optional[str]:
        if isinstance(perspective, Privileged):
            return None
        if isinstance(perspective, Restricted):
            return perspective.user_id
        raise RoleNotSupportedError()

    @property
    def is_restricted(self) -> bool:
        return self._scope_user_id is not None

    @property
    def progress_user_id(self) -> Optional[str]:
        """User whose progress is reported; `None` asks for the aggregate view."""
        return self._scope_user_id

    # --- Courses -----------------------------------------------------------
    def courses(self) -> Queryable[Course]:
        return self.repo.courses(enrolled_user_id=self._scope_user_id)

    def course(self, course_id: UUID) -> Course:
        course = self.repo.get_course(course_id, enrolled_user_id=self._scope_user_id)
        if course is None:
            raise NotFoundError("course_not_found")
        return course

    def participants(self, course_id: UUID) -> Queryable[User]:
        self.course(course_id)
        return self.repo.participants(course_id)

    # --- Modules -----------------------------------------------------------
    def modules(self, course_id: Optional[UUID] = None) -> Queryable[Module]:
        if course_id is not None:
            self.course(course_id)
        return self.repo.modules(course_id=course_id, enrolled_user_id=self._scope_user_id)

    def module(self, module_id: UUID) -> Module:
        module = self.repo.get_module(module_id, enrolled_user_id=self._scope_user_id)
        if module is None:
            raise NotFoundError("module_not_found")
        return module

    # --- Activities --------------------------------------------------------
    def activities(self, module_id: Optional[UUID] = None) -> Queryable[Activity]:
        if module_id is not None:
            self.module(module_id)
        return self.repo.activities(module_id=module_id, enrolled_user_id=self._scope_user_id)

    def activity(self, activity_id: UUID) -> Activity:
        activity = self.repo.get_activity(activity_id, enrolled_user_id=self._scope_user_id)
        if activity is None:
            raise NotFoundError("activity_not_found")
        return activity

    def feedback_for(self, activity_id: UUID) -> List[Feedback]:
        self.activity(activity_id)
        return self.repo.list_feedback(activity_id, user_id=self._scope_user_id)

    def participant_feedback(self, activity_id: UUID, user_id: str) -> Feedback:
        """One participant's feedback on an activity; students may only read their own."""
        self.activity(activity_id)
        if self.is_restricted and user_id != self._scope_user_id:
            raise NotFoundError("feedback_not_found")
        records = self.repo.list_feedback(activity_id, user_id=user_id)
        if not records:
            raise NotFoundError("feedback_not_found")
        return records[0]

    def activity_types(self) -> List[ActivityType]:
        return self.repo.list_activity_types()

    # --- Documents ---------------------------------------------------------
    def documents(self) -> Queryable[Document]:
        return self.repo.documents(enrolled_user_id=self._scope_user_id)

    def document(self, document_id: UUID) -> Document:
        document = self.repo.get_document(document_id, enrolled_user_id=self._scope_user_id)
        if document is None:
            raise NotFoundError("document_not_found")
        return document

    # --- Users -------------------------------------------------------------
    def users(self) -> Queryable[User]:
        """Directory listing; teachers only."""
        if self.is_restricted:
            raise RoleNotSupportedError("teacher_role_required")
        return self.repo.users()

    def user(self, user_id: str) -> User:
        if self.is_restricted and user_id != self._scope_user_id:
            raise NotFoundError("user_not_found")
        user = self.repo.get_user(user_id)
        if user is None:
            raise NotFoundError("user_not_found")
        return user


__all__ = ["RoleScopedView"]
