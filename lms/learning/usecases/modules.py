from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from lms.identity_access.domain import CallerIdentity
from lms.querying import PaginatedQuery, PaginatedResult, apply_query, parse_include

from ..dto import serialize_activity, serialize_module
from .common import LearningQueryUseCase, fetch_all


@dataclass
class ListModulesInput:
    caller: CallerIdentity
    query: PaginatedQuery = field(default_factory=PaginatedQuery)
    course_id: Optional[UUID] = None


class ListModulesUseCase(LearningQueryUseCase):
    def execute(self, req: ListModulesInput) -> PaginatedResult[dict]:
        """Return one page of modules, optionally limited to one course.

        Behavior:
            - A course id outside the caller's scope raises `NotFoundError`.
            - `include=progress` annotates each module on the page: the
              caller's own fraction for students, the aggregate for teachers.
        """
        view = self._view(req.caller)
        page = apply_query(view.modules(req.course_id), req.query, case_sensitive=self.case_sensitive)
        with_progress = req.query.wants("progress")
        user_id = view.progress_user_id
        return page.map(
            lambda m: serialize_module(m, progress=self._progress.calculate(m.id, user_id) if with_progress else None)
        )


@dataclass
class GetModuleInput:
    caller: CallerIdentity
    module_id: UUID
    include: Optional[str] = None


class GetModuleUseCase(LearningQueryUseCase):
    def execute(self, req: GetModuleInput) -> dict:
        """Return one module; includes: activities, documents, participants, progress."""
        view = self._view(req.caller)
        module = view.module(req.module_id)
        includes = parse_include(req.include)

        activities = None
        if "activities" in includes:
            rows = fetch_all(view.activities(module.id))
            types = self._repo.get_activity_types(a.activity_type_id for a in rows)
            activities = [serialize_activity(a, activity_type=types.get(a.activity_type_id)) for a in rows]
        participants = fetch_all(view.participants(module.course_id)) if "participants" in includes else None
        documents = self._repo.list_documents(module_id=module.id) if "documents" in includes else None
        progress = None
        if "progress" in includes:
            progress = self._progress.calculate(module.id, view.progress_user_id)
        return serialize_module(
            module,
            progress=progress,
            activities=activities,
            documents=documents,
            participants=participants,
        )
