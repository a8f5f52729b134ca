from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from lms.identity_access.domain import CallerIdentity
from lms.querying import PaginatedQuery, PaginatedResult, apply_query, parse_include

from ..dto import serialize_course, serialize_module, serialize_user
from .common import LearningQueryUseCase, fetch_all


@dataclass
class ListCoursesInput:
    caller: CallerIdentity
    query: PaginatedQuery = field(default_factory=PaginatedQuery)


class ListCoursesUseCase(LearningQueryUseCase):
    def execute(self, req: ListCoursesInput) -> PaginatedResult[dict]:
        """Return one page of courses visible to the caller.

        Behavior:
            - Teachers see every course; students only courses they are
              enrolled in. Narrowing happens before filter, sort and paging.
            - `include=progress` annotates each course on the page.
        """
        view = self._view(req.caller)
        page = apply_query(view.courses(), req.query, case_sensitive=self.case_sensitive)
        with_progress = req.query.wants("progress")
        user_id = view.progress_user_id
        return page.map(
            lambda c: serialize_course(
                c, progress=self._progress.calculate_course(c.id, user_id) if with_progress else None
            )
        )


@dataclass
class GetCourseInput:
    caller: CallerIdentity
    course_id: UUID
    include: Optional[str] = None


class GetCourseUseCase(LearningQueryUseCase):
    def execute(self, req: GetCourseInput) -> dict:
        """Return one course with optional related data.

        Includes: `modules`, `participants`, `documents`, `progress`. With
        `progress`, included modules carry their own progress too.

        Permissions:
            Students outside the course get `NotFoundError`, same as a missing id.
        """
        view = self._view(req.caller)
        course = view.course(req.course_id)
        includes = parse_include(req.include)
        user_id = view.progress_user_id
        with_progress = "progress" in includes

        modules = None
        if "modules" in includes:
            modules = [
                serialize_module(m, progress=self._progress.calculate(m.id, user_id) if with_progress else None)
                for m in fetch_all(view.modules(course.id))
            ]
        participants = None
        if "participants" in includes:
            participants = fetch_all(view.participants(course.id))
        documents = self._repo.list_documents(course_id=course.id) if "documents" in includes else None
        return serialize_course(
            course,
            progress=self._progress.calculate_course(course.id, user_id) if with_progress else None,
            modules=modules,
            documents=documents,
            participants=participants,
        )


@dataclass
class ListParticipantsInput:
    caller: CallerIdentity
    course_id: UUID
    query: PaginatedQuery = field(default_factory=lambda: PaginatedQuery(page_size=20))


class ListParticipantsUseCase(LearningQueryUseCase):
    def execute(self, req: ListParticipantsInput) -> PaginatedResult[dict]:
        """Return one page of users enrolled in a course visible to the caller."""
        view = self._view(req.caller)
        page = apply_query(view.participants(req.course_id), req.query, case_sensitive=self.case_sensitive)
        return page.map(serialize_user)
