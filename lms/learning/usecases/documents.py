from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from lms.identity_access.domain import CallerIdentity
from lms.querying import PaginatedQuery, PaginatedResult, apply_query

from ..dto import serialize_document
from .common import LearningQueryUseCase


@dataclass
class ListDocumentsInput:
    caller: CallerIdentity
    query: PaginatedQuery = field(default_factory=PaginatedQuery)


class ListDocumentsUseCase(LearningQueryUseCase):
    def execute(self, req: ListDocumentsInput) -> PaginatedResult[dict]:
        """Return one page of documents visible to the caller.

        Permissions:
            Teachers see every document. Students see documents they own and
            documents attached to a course, module or activity of a course
            they are enrolled in.
        """
        view = self._view(req.caller)
        page = apply_query(view.documents(), req.query, case_sensitive=self.case_sensitive)
        return page.map(serialize_document)


@dataclass
class GetDocumentInput:
    caller: CallerIdentity
    document_id: UUID


class GetDocumentUseCase(LearningQueryUseCase):
    def execute(self, req: GetDocumentInput) -> dict:
        view = self._view(req.caller)
        return serialize_document(view.document(req.document_id))
