"""
In-memory Learning repository for tests and offline development.

Insertion order is the natural order of every list. The `add_*` helpers exist
so tests and local demos can build a graph; the query core itself never
writes.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID, uuid4

from lms.querying.source import ListQueryable

from .models import (
    Activity,
    ActivityType,
    Course,
    Document,
    Enrollment,
    Feedback,
    FeedbackStatus,
    Module,
    User,
)


class InMemoryLearningRepo:
    def __init__(self) -> None:
        self.courses_by_id: Dict[UUID, Course] = {}
        self.modules_by_id: Dict[UUID, Module] = {}
        self.activities_by_id: Dict[UUID, Activity] = {}
        self.activity_types: Dict[UUID, ActivityType] = {}
        self.users_by_id: Dict[str, User] = {}
        self.enrollments: List[Enrollment] = []
        # feedback[(user_id, activity_id)] = Feedback; one record per pair
        self.feedback: Dict[tuple[str, UUID], Feedback] = {}
        self.documents_by_id: Dict[UUID, Document] = {}

    # --- Seeding helpers --------------------------------------------------------
    def add_course(self, name: str, *, description: str = "", start_date: Optional[datetime] = None,
                   end_date: Optional[datetime] = None, id: Optional[UUID] = None) -> Course:
        course = Course(id=id or uuid4(), name=name, description=description, start_date=start_date, end_date=end_date)
        self.courses_by_id[course.id] = course
        return course

    def add_module(self, course_id: UUID, name: str, *, description: str = "", start_date: Optional[datetime] = None,
                   end_date: Optional[datetime] = None, id: Optional[UUID] = None) -> Module:
        if course_id not in self.courses_by_id:
            raise LookupError("course_not_found")
        module = Module(id=id or uuid4(), course_id=course_id, name=name, description=description,
                        start_date=start_date, end_date=end_date)
        self.modules_by_id[module.id] = module
        return module

    def add_activity_type(self, name: str, *, id: Optional[UUID] = None) -> ActivityType:
        activity_type = ActivityType(id=id or uuid4(), name=name)
        self.activity_types[activity_type.id] = activity_type
        return activity_type

    def add_activity(self, module_id: UUID, name: str, *, activity_type_id: Optional[UUID] = None,
                     description: str = "", start_date: Optional[datetime] = None,
                     end_date: Optional[datetime] = None, id: Optional[UUID] = None) -> Activity:
        if module_id not in self.modules_by_id:
            raise LookupError("module_not_found")
        if activity_type_id is None:
            activity_type_id = next(iter(self.activity_types), None) or self.add_activity_type("Assignment").id
        activity = Activity(id=id or uuid4(), module_id=module_id, activity_type_id=activity_type_id, name=name,
                            description=description, start_date=start_date, end_date=end_date)
        self.activities_by_id[activity.id] = activity
        return activity

    def add_user(self, id: str, *, first_name: str = "", last_name: str = "", user_name: str = "",
                 email: str = "", role: str = "student") -> User:
        user = User(id=id, first_name=first_name, last_name=last_name, user_name=user_name or id,
                    email=email, role=role)
        self.users_by_id[user.id] = user
        return user

    def enroll(self, user_id: str, course_id: UUID) -> None:
        if user_id not in self.users_by_id:
            self.add_user(user_id)
        enrollment = Enrollment(user_id=user_id, course_id=course_id)
        if enrollment not in self.enrollments:
            self.enrollments.append(enrollment)

    def set_feedback(self, user_id: str, activity_id: UUID, status: FeedbackStatus | str,
                     feedback: Optional[str] = None) -> Feedback:
        if not isinstance(status, FeedbackStatus):
            status = FeedbackStatus.from_label(status)
        record = Feedback(user_id=user_id, activity_id=activity_id, status=status, feedback=feedback)
        self.feedback[(user_id, activity_id)] = record
        return record

    def add_document(self, name: str, path: str, **links) -> Document:
        doc = Document(id=links.pop("id", None) or uuid4(), name=name, path=path, **links)
        self.documents_by_id[doc.id] = doc
        return doc

    # --- Scope helpers -----------------------------------------------------------
    def _course_ids_for(self, user_id: str) -> set[UUID]:
        return {e.course_id for e in self.enrollments if e.user_id == user_id}

    def _module_visible(self, module: Module, user_id: Optional[str]) -> bool:
        return user_id is None or module.course_id in self._course_ids_for(user_id)

    def _activity_visible(self, activity: Activity, user_id: Optional[str]) -> bool:
        module = self.modules_by_id.get(activity.module_id)
        return module is not None and self._module_visible(module, user_id)

    # --- Scoped list sources --------------------------------------------------------
    def courses(self, *, enrolled_user_id: Optional[str] = None) -> ListQueryable[Course]:
        rows = list(self.courses_by_id.values())
        if enrolled_user_id is not None:
            allowed = self._course_ids_for(enrolled_user_id)
            rows = [c for c in rows if c.id in allowed]
        return ListQueryable(rows, Course)

    def modules(self, *, course_id: Optional[UUID] = None, enrolled_user_id: Optional[str] = None) -> ListQueryable[Module]:
        rows = [m for m in self.modules_by_id.values() if self._module_visible(m, enrolled_user_id)]
        if course_id is not None:
            rows = [m for m in rows if m.course_id == course_id]
        return ListQueryable(rows, Module)

    def activities(self, *, module_id: Optional[UUID] = None, enrolled_user_id: Optional[str] = None) -> ListQueryable[Activity]:
        rows = [a for a in self.activities_by_id.values() if self._activity_visible(a, enrolled_user_id)]
        if module_id is not None:
            rows = [a for a in rows if a.module_id == module_id]
        return ListQueryable(rows, Activity)

    def participants(self, course_id: UUID) -> ListQueryable[User]:
        rows = [self.users_by_id[e.user_id] for e in self.enrollments if e.course_id == course_id and e.user_id in self.users_by_id]
        return ListQueryable(rows, User)

    def _document_visible(self, doc: Document, user_id: Optional[str]) -> bool:
        if user_id is None or doc.user_id == user_id:
            return True
        allowed = self._course_ids_for(user_id)
        if doc.course_id is not None and doc.course_id in allowed:
            return True
        module = self.modules_by_id.get(doc.module_id) if doc.module_id is not None else None
        if module is not None and module.course_id in allowed:
            return True
        activity = self.activities_by_id.get(doc.activity_id) if doc.activity_id is not None else None
        return activity is not None and self._activity_visible(activity, user_id)

    def documents(self, *, enrolled_user_id: Optional[str] = None) -> ListQueryable[Document]:
        rows = [d for d in self.documents_by_id.values() if self._document_visible(d, enrolled_user_id)]
        return ListQueryable(rows, Document)

    def users(self) -> ListQueryable[User]:
        return ListQueryable(list(self.users_by_id.values()), User)

    # --- Detail lookups ---------------------------------------------------------------
    def get_course(self, course_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Course]:
        course = self.courses_by_id.get(course_id)
        if course is None:
            return None
        if enrolled_user_id is not None and course.id not in self._course_ids_for(enrolled_user_id):
            return None
        return course

    def get_module(self, module_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Module]:
        module = self.modules_by_id.get(module_id)
        if module is None or not self._module_visible(module, enrolled_user_id):
            return None
        return module

    def get_activity(self, activity_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Activity]:
        activity = self.activities_by_id.get(activity_id)
        if activity is None or not self._activity_visible(activity, enrolled_user_id):
            return None
        return activity

    def get_document(self, document_id: UUID, *, enrolled_user_id: Optional[str] = None) -> Optional[Document]:
        doc = self.documents_by_id.get(document_id)
        if doc is None or not self._document_visible(doc, enrolled_user_id):
            return None
        return doc

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users_by_id.get(user_id)

    # --- Related data ----------------------------------------------------------------
    def list_activity_types(self) -> List[ActivityType]:
        return list(self.activity_types.values())

    def get_activity_types(self, ids: Iterable[UUID]) -> dict[UUID, ActivityType]:
        return {i: self.activity_types[i] for i in set(ids) if i in self.activity_types}

    def list_documents(self, *, course_id: Optional[UUID] = None, module_id: Optional[UUID] = None,
                       activity_id: Optional[UUID] = None) -> List[Document]:
        out: List[Document] = []
        for doc in self.documents_by_id.values():
            if course_id is not None and doc.course_id != course_id:
                continue
            if module_id is not None and doc.module_id != module_id:
                continue
            if activity_id is not None and doc.activity_id != activity_id:
                continue
            out.append(doc)
        return out

    def list_feedback(self, activity_id: UUID, *, user_id: Optional[str] = None) -> List[Feedback]:
        return [
            f for (uid, aid), f in self.feedback.items()
            if aid == activity_id and (user_id is None or uid == user_id)
        ]

    # --- Progress aggregates ------------------------------------------------------------
    def _activity_ids(self, *, module_id: Optional[UUID], course_id: Optional[UUID]) -> set[UUID]:
        ids: set[UUID] = set()
        for activity in self.activities_by_id.values():
            module = self.modules_by_id.get(activity.module_id)
            if module is None:
                continue
            if module_id is not None and module.id != module_id:
                continue
            if course_id is not None and module.course_id != course_id:
                continue
            ids.add(activity.id)
        return ids

    def count_activities(self, *, module_id: Optional[UUID] = None, course_id: Optional[UUID] = None) -> int:
        return len(self._activity_ids(module_id=module_id, course_id=course_id))

    def count_completed_activities(self, user_id: str, statuses: Iterable[FeedbackStatus], *,
                                   module_id: Optional[UUID] = None, course_id: Optional[UUID] = None) -> int:
        wanted = set(statuses)
        in_scope = self._activity_ids(module_id=module_id, course_id=course_id)
        done = {aid for (uid, aid), f in self.feedback.items() if uid == user_id and aid in in_scope and f.status in wanted}
        return len(done)

    def count_completed_by_user(self, user_ids: Iterable[str], statuses: Iterable[FeedbackStatus], *,
                                module_id: Optional[UUID] = None, course_id: Optional[UUID] = None) -> Dict[str, int]:
        wanted_users = set(user_ids)
        wanted = set(statuses)
        in_scope = self._activity_ids(module_id=module_id, course_id=course_id)
        done: Dict[str, set[UUID]] = {}
        for (uid, aid), f in self.feedback.items():
            if uid in wanted_users and aid in in_scope and f.status in wanted:
                done.setdefault(uid, set()).add(aid)
        return {uid: len(aids) for uid, aids in done.items()}

    def list_enrolled_student_ids(self, course_id: UUID) -> List[str]:
        out: List[str] = []
        for e in self.enrollments:
            user = self.users_by_id.get(e.user_id)
            if e.course_id == course_id and user is not None and user.role == "student" and e.user_id not in out:
                out.append(e.user_id)
        return out


__all__ = ["InMemoryLearningRepo"]
