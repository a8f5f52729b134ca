"""Postgres-backed repository for the Learning read side.

Why:
    List endpoints must filter, sort and count in the database. `SqlQueryable`
    carries the scope clause, the caller's text filters and the ordering, and
    renders them into one `select` per call. `count()` never applies
    offset/limit, so pagination metadata reflects the whole narrowed set.

Security:
    - Column names only come from registered field descriptors and are quoted
      with `psycopg.sql.Identifier`; values are always bound parameters.
    - LIKE wildcards in user input are escaped (`%`, `_`, `\\`).
    - Restricted reads set `app.current_sub` for row-level security in addition
      to the explicit enrollment `exists (...)` clause.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

import psycopg
from psycopg import sql

from lms.querying.ordering import SortOrder
from lms.querying.predicates import ContainsPredicate

from .models import Activity, ActivityType, Course, Document, Feedback, FeedbackStatus, Module, User, stored_labels

logger = logging.getLogger("lms.learning.repo_db")

_ALIAS = "t"


def _dsn() -> str:
    """Resolve the Postgres DSN (first non-empty wins).

    Order: LMS_DATABASE_URL, then DATABASE_URL.
    """
    for candidate in (os.getenv("LMS_DATABASE_URL"), os.getenv("DATABASE_URL")):
        if candidate:
            return candidate
    raise RuntimeError("Database DSN unavailable for Learning repo")


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class _Table:
    name: str
    record_type: type

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in fields(self.record_type) if not f.name.startswith("_")]

    def identifier(self) -> sql.Composable:
        return sql.Identifier("public", self.name)

    def select_list(self) -> sql.Composable:
        return sql.SQL(", ").join(sql.Identifier(_ALIAS, name) for name in self.field_names)

    def to_record(self, row: Sequence[Any]) -> Any:
        return self.record_type(**dict(zip(self.field_names, row)))


COURSES = _Table("courses", Course)
MODULES = _Table("modules", Module)
ACTIVITIES = _Table("activities", Activity)
USERS = _Table("users", User)
DOCUMENTS = _Table("documents", Document)

# (clause, params) pairs joined with "and"
_Clause = Tuple[sql.Composable, Tuple[Any, ...]]


class SqlQueryable:
    """Immutable select over one table; renders where/order/offset/limit."""

    def __init__(
        self,
        connect: Callable[[], Any],
        table: _Table,
        *,
        clauses: Sequence[_Clause] = (),
        order: Optional[SortOrder] = None,
        current_sub: Optional[str] = None,
    ) -> None:
        self._connect = connect
        self._table = table
        self._clauses = tuple(clauses)
        self._order = order
        self._current_sub = current_sub
        self.record_type = table.record_type

    def _copy(self, **changes: Any) -> "SqlQueryable":
        kwargs = {
            "clauses": self._clauses,
            "order": self._order,
            "current_sub": self._current_sub,
        }
        kwargs.update(changes)
        return SqlQueryable(self._connect, self._table, **kwargs)

    def filtered(self, clause: sql.Composable, *params: Any) -> "SqlQueryable":
        return self._copy(clauses=self._clauses + ((clause, tuple(params)),))

    def where(self, predicate: ContainsPredicate) -> "SqlQueryable":
        column = sql.Identifier(_ALIAS, predicate.descriptor.column)
        op = sql.SQL("like") if predicate.case_sensitive else sql.SQL("ilike")
        clause = sql.SQL("{} {} %s escape '\\'").format(column, op)
        return self.filtered(clause, f"%{escape_like(predicate.needle)}%")

    def order_by(self, order: SortOrder) -> "SqlQueryable":
        return self._copy(order=order)

    def _where_sql(self) -> Tuple[sql.Composable, List[Any]]:
        if not self._clauses:
            return sql.SQL(""), []
        params: List[Any] = []
        for _, p in self._clauses:
            params.extend(p)
        body = sql.SQL(" and ").join(sql.SQL("({})").format(c) for c, _ in self._clauses)
        return sql.SQL(" where {}").format(body), params

    def _order_sql(self) -> sql.Composable:
        natural = sql.SQL("{}, {}").format(sql.Identifier(_ALIAS, "created_at"), sql.Identifier(_ALIAS, "id"))
        if self._order is None:
            return sql.SQL(" order by {}").format(natural)
        descriptor = self._order.descriptor
        column: sql.Composable = sql.Identifier(_ALIAS, descriptor.column)
        if issubclass(descriptor.value_type, str):
            # ordinal comparison, same as the in-memory ordering
            column = sql.SQL('{} collate "C"').format(column)
        if self._order.descending:
            direction = sql.SQL("desc nulls last")
        else:
            direction = sql.SQL("asc nulls first")
        return sql.SQL(" order by {} {}, {}").format(column, direction, natural)

    def _run(self, query: sql.Composable, params: Sequence[Any]) -> List[tuple]:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    if self._current_sub:
                        cur.execute("select set_config('app.current_sub', %s, true)", (self._current_sub,))
                    cur.execute(query, tuple(params))
                    return list(cur.fetchall())
        except Exception as exc:
            logger.warning("lms.repo.query_failed table=%s error=%s", self._table.name, type(exc).__name__)
            raise

    def count(self) -> int:
        where, params = self._where_sql()
        query = sql.SQL("select count(*) from {} {}{}").format(self._table.identifier(), sql.Identifier(_ALIAS), where)
        rows = self._run(query, params)
        return int(rows[0][0]) if rows else 0

    def fetch(self, offset: int, limit: int) -> List[Any]:
        where, params = self._where_sql()
        query = sql.SQL("select {} from {} {}{}{} offset %s limit %s").format(
            self._table.select_list(),
            self._table.identifier(),
            sql.Identifier(_ALIAS),
            where,
            self._order_sql(),
        )
        rows = self._run(query, [*params, int(max(0, offset)), int(max(0, limit))])
        return [self._table.to_record(r) for r in rows]

    def first(self) -> Optional[Any]:
        rows = self.fetch(0, 1)
        return rows[0] if rows else None


# Scope clauses keep rows reachable from the user's enrollments.
_COURSE_SCOPE = sql.SQL(
    "exists (select 1 from public.enrollments e where e.course_id = t.id and e.user_id = %s)"
)
_MODULE_SCOPE = sql.SQL(
    "exists (select 1 from public.enrollments e where e.course_id = t.course_id and e.user_id = %s)"
)
_ACTIVITY_SCOPE = sql.SQL(
    "exists (select 1 from public.modules m join public.enrollments e on e.course_id = m.course_id"
    " where m.id = t.module_id and e.user_id = %s)"
)
# Owned by the user, or attached to anything in one of their courses.
_DOCUMENT_SCOPE = sql.SQL(
    "t.user_id = %s or exists (select 1 from public.enrollments e where e.user_id = %s and e.course_id in ("
    " t.course_id,"
    " (select m.course_id from public.modules m where m.id = t.module_id),"
    " (select am.course_id from public.activities a join public.modules am on am.id = a.module_id"
    " where a.id = t.activity_id)))"
)


class DBLearningRepo:
    """Persistence adapter used by the Learning read use cases."""

    def __init__(self, dsn: Optional[str] = None) -> None:
        self._dsn = dsn or _dsn()

    def _connect(self):
        return psycopg.connect(self._dsn)

    def _source(self, table: _Table, current_sub: Optional[str] = None) -> SqlQueryable:
        return SqlQueryable(self._connect, table, current_sub=current_sub)

    # --- Scoped list sources -----------------------------------------------
    def courses(self, *, enrolled_user_id: Optional[str] = None) -> SqlQueryable:
        source = self._source(COURSES, enrolled_user_id)
        if enrolled_user_id is not None:
            source = source.filtered(_COURSE_SCOPE, enrolled_user_id)
        return source

    def modules(self, *, course_id: Optional[UUID] = None, enrolled_user_id: Optional[str] = None) -> SqlQueryable:
        source = self._source(MODULES, enrolled_user_id)
        if enrolled_user_id is not None:
            source = source.filtered(_MODULE_SCOPE, enrolled_user_id)
        if course_id is not None:
            source = source.filtered(sql.SQL("t.course_id = %s"), course_id)
        return source

    def activities(self, *, module_id: Optional[UUID] = None, enrolled_user_id: Optional[str] = None) -> SqlQueryable:
        source = self._source(ACTIVITIES, enrolled_user_id)
        if enrolled_user_id is not None:
            source = source.filtered(_ACTIVITY_SCOPE, enrolled_user_id)
        if module_id is not None:
            source = source.filtered(sql.SQL("t.module_id = %s"), module_id)
        return source

    def participants(self, course_id: UUID) -> SqlQueryable:
        clause = sql.SQL("exists (select 1 from public.enrollments e where e.user_id = t.id and e.course_id = %s)")
        return self._source(USERS).filtered(clause, course_id)

    def documents(self, *, enrolled_user_id: Optional[str] = None) -> SqlQueryable:
        source = self._source(DOCUMENTS, enrolled_user_id)
        if enrolled_user_id is not None:
            source = source.filtered(_DOCUMENT_SCOPE, enrolled_user_id, enrolled_user_id)
        return source

    def users(self) -> SqlQueryable:
        return self._source(USERS)

    # --- Detail lookups ----------------------------------------------------
    def get_course(self, course_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Course]:
        return self.courses(enrolled_user_id=enrolled_user_id).filtered(sql.SQL("t.id = %s"), course_id).first()

    def get_module(self, module_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Module]:
        return self.modules(enrolled_user_id=enrolled_user_id).filtered(sql.SQL("t.id = %s"), module_id).first()

    def get_activity(self, activity_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Activity]:
        return self.activities(enrolled_user_id=enrolled_user_id).filtered(sql.SQL("t.id = %s"), activity_id).first()

    def get_document(self, document_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Document]:
        return self.documents(enrolled_user_id=enrolled_user_id).filtered(sql.SQL("t.id = %s"), document_id).first()

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users().filtered(sql.SQL("t.id = %s"), user_id).first()

    # --- Related data ------------------------------------------------------
    def _query(self, query: str | sql.Composable, params: Sequence[Any]) -> List[tuple]:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, tuple(params))
                    return list(cur.fetchall())
        except Exception as exc:
            logger.warning("lms.repo.query_failed error=%s", type(exc).__name__)
            raise

    def list_activity_types(self) -> List[ActivityType]:
        rows = self._query("select id, name from public.activity_types order by created_at, id", ())
        return [ActivityType(id=row[0], name=row[1]) for row in rows]

    def get_activity_types(self, ids: Iterable[UUID]) -> Dict[UUID, ActivityType]:
        wanted = list({i for i in ids if i is not None})
        if not wanted:
            return {}
        rows = self._query("select id, name from public.activity_types where id = any(%s)", (wanted,))
        return {row[0]: ActivityType(id=row[0], name=row[1]) for row in rows}

    def list_documents(
        self,
        *,
        course_id: Optional[UUID] = None,
        module_id: Optional[UUID] = None,
        activity_id: Optional[UUID] = None,
    ) -> List[Document]:
        conditions: List[sql.Composable] = []
        params: List[Any] = []
        for column, value in (("course_id", course_id), ("module_id", module_id), ("activity_id", activity_id)):
            if value is not None:
                conditions.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
                params.append(value)
        where = sql.SQL(" where ") + sql.SQL(" and ").join(conditions) if conditions else sql.SQL("")
        query = sql.SQL(
            'select id, name, path, description, "timestamp", user_id, course_id, module_id, activity_id'
            ' from public.documents{} order by "timestamp" nulls first, id'
        ).format(where)
        rows = self._query(query, params)
        return [
            Document(
                id=r[0], name=r[1], path=r[2], description=r[3], timestamp=r[4],
                user_id=r[5], course_id=r[6], module_id=r[7], activity_id=r[8],
            )
            for r in rows
        ]

    def list_feedback(self, activity_id: UUID, *, user_id: Optional[str] = None) -> List[Feedback]:
        query = "select user_id, activity_id, status, feedback from public.activity_feedback where activity_id = %s"
        params: List[Any] = [activity_id]
        if user_id is not None:
            query += " and user_id = %s"
            params.append(user_id)
        rows = self._query(query + " order by created_at, user_id", params)
        return [
            Feedback(user_id=r[0], activity_id=r[1], status=FeedbackStatus.from_label(r[2]), feedback=r[3])
            for r in rows
        ]

    # --- Progress aggregates -----------------------------------------------
    def count_activities(self, *, module_id: Optional[UUID] = None, course_id: Optional[UUID] = None) -> int:
        rows = self._query(
            """
            select count(*)
              from public.activities a
              join public.modules m on m.id = a.module_id
             where (%s::uuid is null or a.module_id = %s::uuid)
               and (%s::uuid is null or m.course_id = %s::uuid)
            """,
            (module_id, module_id, course_id, course_id),
        )
        return int(rows[0][0]) if rows else 0

    def count_completed_activities(
        self,
        user_id: str,
        statuses: Iterable[FeedbackStatus],
        *,
        module_id: Optional[UUID] = None,
        course_id: Optional[UUID] = None,
    ) -> int:
        rows = self._query(
            """
            select count(distinct f.activity_id)
              from public.activity_feedback f
              join public.activities a on a.id = f.activity_id
              join public.modules m on m.id = a.module_id
             where f.user_id = %s
               and f.status = any(%s)
               and (%s::uuid is null or a.module_id = %s::uuid)
               and (%s::uuid is null or m.course_id = %s::uuid)
            """,
            (user_id, stored_labels(statuses), module_id, module_id, course_id, course_id),
        )
        return int(rows[0][0]) if rows else 0

    def count_completed_by_user(
        self,
        user_ids: Iterable[str],
        statuses: Iterable[FeedbackStatus],
        *,
        module_id: Optional[UUID] = None,
        course_id: Optional[UUID] = None,
    ) -> Dict[str, int]:
        wanted = list(dict.fromkeys(user_ids))
        if not wanted:
            return {}
        rows = self._query(
            """
            select f.user_id, count(distinct f.activity_id)
              from public.activity_feedback f
              join public.activities a on a.id = f.activity_id
              join public.modules m on m.id = a.module_id
             where f.user_id = any(%s)
               and f.status = any(%s)
               and (%s::uuid is null or a.module_id = %s::uuid)
               and (%s::uuid is null or m.course_id = %s::uuid)
             group by f.user_id
            """,
            (wanted, stored_labels(statuses), module_id, module_id, course_id, course_id),
        )
        return {r[0]: int(r[1]) for r in rows}

    def list_enrolled_student_ids(self, course_id: UUID) -> List[str]:
        rows = self._query(
            """
            select e.user_id
              from public.enrollments e
              join public.users u on u.id = e.user_id
             where e.course_id = %s and u.role = 'student'
             order by e.created_at, e.user_id
            """,
            (course_id,),
        )
        return [r[0] for r in rows]


__all__ = ["DBLearningRepo", "SqlQueryable", "escape_like"]
