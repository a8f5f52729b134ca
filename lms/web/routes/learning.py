"""
Learning read API: paginated, filterable, sortable lists and detail views.

Why:
    Keep the adapter thin. Routes parse and validate the query string, build
    the caller identity from the session and delegate to the use cases. Scope
    narrowing, filtering, sorting, paging and progress live below this layer.

Behavior:
    - Query string: page, pageSize, sortBy, sortDirection, filterBy, filter,
      include. Unknown sort/filter fields are ignored, not rejected.
    - 400 for malformed paging input or non-UUID ids, 403 for unsupported
      roles, 404 for missing or out-of-scope resources.
    - Every response carries `Cache-Control: private, no-store`.

Notes:
    Persistence prefers the Postgres repo when a DSN is configured and falls
    back to the in-memory repo for tests and offline work. Tests can call
    `set_repo` to override the implementation.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic.functional_validators import field_validator

from lms.identity_access.domain import CallerIdentity, RoleNotSupportedError
from lms.learning.config import QueryConfig, load_query_config
from lms.learning.errors import NotFoundError
from lms.learning.ports import LearningRepoProtocol
from lms.learning.repo_memory import InMemoryLearningRepo
from lms.learning.usecases import (
    GetActivityInput,
    GetActivityUseCase,
    GetCourseInput,
    GetCourseUseCase,
    GetDocumentInput,
    GetDocumentUseCase,
    GetModuleInput,
    GetModuleUseCase,
    GetParticipantFeedbackInput,
    GetParticipantFeedbackUseCase,
    GetUserInput,
    GetUserUseCase,
    ListActivitiesInput,
    ListActivitiesUseCase,
    ListActivityTypesInput,
    ListActivityTypesUseCase,
    ListCoursesInput,
    ListCoursesUseCase,
    ListDocumentsInput,
    ListDocumentsUseCase,
    ListModulesInput,
    ListModulesUseCase,
    ListParticipantsInput,
    ListParticipantsUseCase,
    ListUsersInput,
    ListUsersUseCase,
)
from lms.querying import PaginatedQuery, PaginatedResult

learning_router = APIRouter(tags=["Learning"])
logger = logging.getLogger("lms.web.learning")

_SORT_BY_MAX = 100
_FILTER_MAX = 200
_USER_ID_MAX = 255


# --- Repository wiring -----------------------------------------------------------

def _build_default_repo() -> LearningRepoProtocol:
    """Prefer the DB-backed repo when a DSN is configured; else in-memory."""
    if not (os.getenv("LMS_DATABASE_URL") or os.getenv("DATABASE_URL")):
        return InMemoryLearningRepo()
    from lms.learning.repo_db import DBLearningRepo

    return DBLearningRepo()


_REPO: Optional[LearningRepoProtocol] = None


def _get_repo() -> LearningRepoProtocol:
    global _REPO
    if _REPO is None:
        _REPO = _build_default_repo()
    return _REPO


def set_repo(repo: Optional[LearningRepoProtocol]) -> None:
    """Allow tests to swap the learning repository implementation (None resets)."""
    global _REPO
    _REPO = repo


# --- Response helpers --------------------------------------------------------------

def _json_private(payload, *, status_code: int = 200) -> JSONResponse:
    """Return a JSONResponse with cache disabled for shared caches and browsers.

    Rationale: every payload here is role-scoped; it must never be served to
    another caller from a proxy or browser cache.
    """
    return JSONResponse(content=payload, status_code=status_code, headers={"Cache-Control": "private, no-store"})


def _bad_request(detail: str) -> JSONResponse:
    return _json_private({"error": "bad_request", "detail": detail}, status_code=400)


def _caller(request: Request) -> CallerIdentity:
    user = getattr(request.state, "user", None)
    return CallerIdentity.from_user(user if isinstance(user, dict) else None)


def _parse_uuid(value: str, kind: str) -> Union[UUID, JSONResponse]:
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        return _bad_request(f"invalid_{kind}_id")


def _parse_positive(raw: Optional[str], default: int, *, upper: Optional[int] = None) -> Optional[int]:
    """Parse a positive integer query value; None signals invalid input."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    if value < 1 or (upper is not None and value > upper):
        return None
    return value


class ListQueryParams(BaseModel):
    # Raw strings; numeric and length checks happen in `_build_query` to return 400
    page: str | None = None
    page_size: str | None = None
    sort_by: str | None = None
    sort_direction: str | None = None
    filter_by: str | None = None
    filter: str | None = None
    include: str | None = None

    @field_validator("page", "page_size", "sort_by", "sort_direction", "filter_by", "include")
    @classmethod
    def _strip_empty(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v if v else None
        return v

    @field_validator("filter")
    @classmethod
    def _empty_filter(cls, v):
        # Kept verbatim for matching; blank or whitespace-only text disables the filter downstream
        return v if v else None


def _list_params(
    page: Optional[str] = None,
    page_size: Optional[str] = Query(default=None, alias="pageSize"),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_direction: Optional[str] = Query(default=None, alias="sortDirection"),
    filter_by: Optional[str] = Query(default=None, alias="filterBy"),
    filter: Optional[str] = None,
    include: Optional[str] = None,
) -> ListQueryParams:
    return ListQueryParams(
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_direction=sort_direction,
        filter_by=filter_by,
        filter=filter,
        include=include,
    )


def _build_query(
    cfg: QueryConfig,
    params: ListQueryParams,
    *,
    default_page_size: int,
    allow_include: bool = True,
) -> Union[PaginatedQuery, JSONResponse]:
    page_n = _parse_positive(params.page, 1)
    if page_n is None:
        return _bad_request("invalid_page")
    size_n = _parse_positive(params.page_size, default_page_size, upper=cfg.max_page_size)
    if size_n is None:
        return _bad_request("invalid_page_size")
    if params.sort_by is not None and len(params.sort_by) > _SORT_BY_MAX:
        return _bad_request("invalid_sort_by")
    if params.filter is not None and len(params.filter) > _FILTER_MAX:
        return _bad_request("invalid_filter")
    return PaginatedQuery(
        page=page_n,
        page_size=size_n,
        sort_by=params.sort_by,
        sort_direction=params.sort_direction or "asc",
        filter=params.filter,
        filter_by=params.filter_by,
        include=params.include if allow_include else None,
    )


def _run(action: Callable[[], Union[dict, list, PaginatedResult]]) -> JSONResponse:
    """Execute a use case and map domain errors to JSON responses."""
    try:
        result = action()
    except RoleNotSupportedError as exc:
        logger.info("lms.access.role_rejected code=%s", exc.code)
        return _json_private({"error": "forbidden"}, status_code=403)
    except NotFoundError:
        return _json_private({"error": "not_found"}, status_code=404)
    if isinstance(result, PaginatedResult):
        return _json_private(result.to_dict())
    return _json_private(result)


# --- Courses -----------------------------------------------------------------------

@learning_router.get("/api/courses")
async def list_courses(request: Request, params: ListQueryParams = Depends(_list_params)):
    """List courses visible to the caller.

    Permissions:
        Teachers see every course; students only their enrolled courses.
        Any other role receives 403.
    """
    cfg = load_query_config()
    query = _build_query(cfg, params, default_page_size=cfg.default_page_size)
    if isinstance(query, JSONResponse):
        return query
    uc = ListCoursesUseCase(_get_repo(), config=cfg)
    return _run(lambda: uc.execute(ListCoursesInput(caller=_caller(request), query=query)))


@learning_router.get("/api/courses/{course_id}")
async def get_course(request: Request, course_id: str, include: Optional[str] = None):
    """Course detail; include: modules, participants, documents, progress.

    Responds 404 when the course does not exist or the student is not enrolled
    (intentionally indistinguishable).
    """
    cid = _parse_uuid(course_id, "course")
    if isinstance(cid, JSONResponse):
        return cid
    uc = GetCourseUseCase(_get_repo(), config=load_query_config())
    return _run(lambda: uc.execute(GetCourseInput(caller=_caller(request), course_id=cid, include=include)))


@learning_router.get("/api/courses/{course_id}/modules")
async def list_course_modules(request: Request, course_id: str, params: ListQueryParams = Depends(_list_params)):
    cid = _parse_uuid(course_id, "course")
    if isinstance(cid, JSONResponse):
        return cid
    cfg = load_query_config()
    query = _build_query(cfg, params, default_page_size=cfg.default_page_size)
    if isinstance(query, JSONResponse):
        return query
    uc = ListModulesUseCase(_get_repo(), config=cfg)
    return _run(lambda: uc.execute(ListModulesInput(caller=_caller(request), query=query, course_id=cid)))


@learning_router.get("/api/courses/{course_id}/participants")
async def list_course_participants(request: Request, course_id: str, params: ListQueryParams = Depends(_list_params)):
    """List users enrolled in a course (default page size 20)."""
    cid = _parse_uuid(course_id, "course")
    if isinstance(cid, JSONResponse):
        return cid
    cfg = load_query_config()
    query = _build_query(cfg, params, default_page_size=cfg.participants_page_size, allow_include=False)
    if isinstance(query, JSONResponse):
        return query
    uc = ListParticipantsUseCase(_get_repo(), config=cfg)
    return _run(lambda: uc.execute(ListParticipantsInput(caller=_caller(request), course_id=cid, query=query)))


# --- Modules -----------------------------------------------------------------------

@learning_router.get("/api/modules")
async def list_modules(request: Request, params: ListQueryParams = Depends(_list_params)):
    cfg = load_query_config()
    query = _build_query(cfg, params, default_page_size=cfg.default_page_size)
    if isinstance(query, JSONResponse):
        return query
    uc = ListModulesUseCase(_get_repo(), config=cfg)
    return _run(lambda: uc.execute(ListModulesInput(caller=_caller(request), query=query)))


@learning_router.get("/api/modules/{module_id}")
async def get_module(request: Request, module_id: str, include: Optional[str] = None):
    """Module detail; include: activities, documents, participants, progress."""
    mid = _parse_uuid(module_id, "module")
    if isinstance(mid, JSONResponse):
        return mid
    uc = GetModuleUseCase(_get_repo(), config=load_query_config())
    return _run(lambda: uc.execute(GetModuleInput(caller=_caller(request), module_id=mid, include=include)))


@learning_router.get("/api/modules/{module_id}/activities")
async def list_module_activities(request: Request, module_id: str, params: ListQueryParams = Depends(_list_params)):
    mid = _parse_uuid(module_id, "module")
    if isinstance(mid, JSONResponse):
        return mid
    cfg = load_query_config()
    query = _build_query(cfg, params, default_page_size=cfg.default_page_size, allow_include=False)
    if isinstance(query, JSONResponse):
        return query
    uc = ListActivitiesUseCase(_get_repo(), config=cfg)
    return _run(lambda: uc.execute(ListActivitiesInput(caller=_caller(request), query=query, module_id=mid)))


# --- Activities --------------------------------------------------------------------

@learning_router.get("/api/activities")
async def list_activities(request: Request, params: ListQueryParams = Depends(_list_params)):
    cfg = load_query_config()
    query = _build_query(cfg, params, default_page_size=cfg.default_page_size, allow_include=False)
    if isinstance(query, JSONResponse):
        return query
    uc = ListActivitiesUseCase(_get_repo(), config=cfg)
    return _run(lambda: uc.execute(ListActivitiesInput(caller=_caller(request), query=query)))


@learning_router.get("/api/activities/{activity_id}")
async def get_activity(request: Request, activity_id: str, include: Optional[str] = None):
    """Activity detail; include: feedbacks (students see only their own), documents."""
    aid = _parse_uuid(activity_id, "activity")
    if isinstance(aid, JSONResponse):
        return aid
    uc = GetActivityUseCase(_get_repo(), config=load_query_config())
    return _run(lambda: uc.execute(GetActivityInput(caller=_caller(request), activity_id=aid, include=include)))


@learning_router.get("/api/activities/{activity_id}/participants/{user_id}/feedback")
async def get_participant_feedback(request: Request, activity_id: str, user_id: str):
    """Feedback of one participant on one activity.

    Permissions:
        Teachers may read any participant's feedback. Students only their own;
        other ids respond 404 like a missing record.
    """
    aid = _parse_uuid(activity_id, "activity")
    if isinstance(aid, JSONResponse):
        return aid
    if not user_id.strip() or len(user_id) > _USER_ID_MAX:
        return _bad_request("invalid_user_id")
    uc = GetParticipantFeedbackUseCase(_get_repo(), config=load_query_config())
    return _run(
        lambda: uc.execute(GetParticipantFeedbackInput(caller=_caller(request), activity_id=aid, user_id=user_id))
    )


@learning_router.get("/api/activity-types")
async def list_activity_types(request: Request):
    uc = ListActivityTypesUseCase(_get_repo(), config=load_query_config())
    return _run(lambda: uc.execute(ListActivityTypesInput(caller=_caller(request))))


# --- Documents ---------------------------------------------------------------------

@learning_router.get("/api/documents")
async def list_documents(request: Request, params: ListQueryParams = Depends(_list_params)):
    """List documents reachable through the caller's enrollments (all for teachers)."""
    cfg = load_query_config()
    query = _build_query(cfg, params, default_page_size=cfg.default_page_size, allow_include=False)
    if isinstance(query, JSONResponse):
        return query
    uc = ListDocumentsUseCase(_get_repo(), config=cfg)
    return _run(lambda: uc.execute(ListDocumentsInput(caller=_caller(request), query=query)))


@learning_router.get("/api/documents/{document_id}")
async def get_document(request: Request, document_id: str):
    did = _parse_uuid(document_id, "document")
    if isinstance(did, JSONResponse):
        return did
    uc = GetDocumentUseCase(_get_repo(), config=load_query_config())
    return _run(lambda: uc.execute(GetDocumentInput(caller=_caller(request), document_id=did)))


# --- Users -------------------------------------------------------------------------

@learning_router.get("/api/users")
async def list_users(request: Request, params: ListQueryParams = Depends(_list_params)):
    """User directory.

    Permissions:
        Teachers only; students receive 403.
    """
    cfg = load_query_config()
    query = _build_query(cfg, params, default_page_size=cfg.default_page_size, allow_include=False)
    if isinstance(query, JSONResponse):
        return query
    uc = ListUsersUseCase(_get_repo(), config=cfg)
    return _run(lambda: uc.execute(ListUsersInput(caller=_caller(request), query=query)))


@learning_router.get("/api/users/{user_id}")
async def get_user(request: Request, user_id: str):
    """User detail; students may only read their own record."""
    if not user_id.strip() or len(user_id) > _USER_ID_MAX:
        return _bad_request("invalid_user_id")
    uc = GetUserUseCase(_get_repo(), config=load_query_config())
    return _run(lambda: uc.execute(GetUserInput(caller=_caller(request), user_id=user_id)))
