from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from lms.identity_access.domain import CallerIdentity
from lms.querying import PaginatedQuery, PaginatedResult, apply_query, parse_include

from ..dto import serialize_activity, serialize_activity_type, serialize_feedback
from .common import LearningQueryUseCase


@dataclass
class ListActivitiesInput:
    caller: CallerIdentity
    query: PaginatedQuery = field(default_factory=PaginatedQuery)
    module_id: Optional[UUID] = None


class ListActivitiesUseCase(LearningQueryUseCase):
    def execute(self, req: ListActivitiesInput) -> PaginatedResult[dict]:
        """Return one page of activities, each with its activity type name."""
        view = self._view(req.caller)
        page = apply_query(view.activities(req.module_id), req.query, case_sensitive=self.case_sensitive)
        types = self._repo.get_activity_types(a.activity_type_id for a in page.items)
        return page.map(lambda a: serialize_activity(a, activity_type=types.get(a.activity_type_id)))


@dataclass
class GetActivityInput:
    caller: CallerIdentity
    activity_id: UUID
    include: Optional[str] = None


class GetActivityUseCase(LearningQueryUseCase):
    def execute(self, req: GetActivityInput) -> dict:
        """Return one activity; includes: feedbacks, documents.

        Permissions:
            Students only ever see their own feedback record.
        """
        view = self._view(req.caller)
        activity = view.activity(req.activity_id)
        includes = parse_include(req.include)
        types = self._repo.get_activity_types([activity.activity_type_id])
        return serialize_activity(
            activity,
            activity_type=types.get(activity.activity_type_id),
            feedbacks=view.feedback_for(activity.id) if "feedbacks" in includes else None,
            documents=self._repo.list_documents(activity_id=activity.id) if "documents" in includes else None,
        )


@dataclass
class GetParticipantFeedbackInput:
    caller: CallerIdentity
    activity_id: UUID
    user_id: str


class GetParticipantFeedbackUseCase(LearningQueryUseCase):
    def execute(self, req: GetParticipantFeedbackInput) -> dict:
        view = self._view(req.caller)
        return serialize_feedback(view.participant_feedback(req.activity_id, req.user_id))


@dataclass
class ListActivityTypesInput:
    caller: CallerIdentity


class ListActivityTypesUseCase(LearningQueryUseCase):
    def execute(self, req: ListActivityTypesInput) -> list[dict]:
        view = self._view(req.caller)
        return [serialize_activity_type(t) for t in view.activity_types()]
