from __future__ import annotations

from dataclasses import dataclass, field

from lms.identity_access.domain import CallerIdentity
from lms.querying import PaginatedQuery, PaginatedResult, apply_query

from ..dto import serialize_user
from .common import LearningQueryUseCase


@dataclass
class ListUsersInput:
    caller: CallerIdentity
    query: PaginatedQuery = field(default_factory=PaginatedQuery)


class ListUsersUseCase(LearningQueryUseCase):
    def execute(self, req: ListUsersInput) -> PaginatedResult[dict]:
        """Return one page of the user directory.

        Permissions:
            Teachers only; students receive `RoleNotSupportedError` (403).
        """
        view = self._view(req.caller)
        page = apply_query(view.users(), req.query, case_sensitive=self.case_sensitive)
        return page.map(serialize_user)


@dataclass
class GetUserInput:
    caller: CallerIdentity
    user_id: str


class GetUserUseCase(LearningQueryUseCase):
    def execute(self, req: GetUserInput) -> dict:
        """Students may only read their own record; other ids are not found."""
        view = self._view(req.caller)
        return serialize_user(view.user(req.user_id))
