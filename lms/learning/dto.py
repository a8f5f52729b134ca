"""
Projection of Learning records into JSON-ready dicts (camelCase keys).

Progress is attached transiently by the use cases; it is serialized as a float
or `None` when not requested.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from .models import Activity, ActivityType, Course, Document, Feedback, Module, User


def _id(value: Optional[UUID]) -> Optional[str]:
    return str(value) if value is not None else None


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _progress(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def serialize_document(d: Document) -> dict:
    return {
        "id": str(d.id),
        "name": d.name,
        "path": d.path,
        "description": d.description,
        "timestamp": _ts(d.timestamp),
        "userId": d.user_id,
        "courseId": _id(d.course_id),
        "moduleId": _id(d.module_id),
        "activityId": _id(d.activity_id),
    }


def serialize_user(u: User) -> dict:
    return {
        "id": u.id,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "userName": u.user_name,
        "email": u.email,
        "role": u.role,
    }


def serialize_activity_type(t: ActivityType) -> dict:
    return {"id": str(t.id), "name": t.name}


def serialize_feedback(f: Feedback) -> dict:
    return {
        "userId": f.user_id,
        "activityId": str(f.activity_id),
        "status": f.status.value,
        "feedback": f.feedback,
    }


def serialize_activity(
    a: Activity,
    *,
    activity_type: Optional[ActivityType] = None,
    feedbacks: Optional[Iterable[Feedback]] = None,
    documents: Optional[Iterable[Document]] = None,
) -> dict:
    data: Dict[str, Any] = {
        "id": str(a.id),
        "moduleId": str(a.module_id),
        "activityTypeId": str(a.activity_type_id),
        "name": a.name,
        "description": a.description,
        "startDate": _ts(a.start_date),
        "endDate": _ts(a.end_date),
    }
    if activity_type is not None:
        data["activityTypeName"] = activity_type.name
    if feedbacks is not None:
        data["feedbacks"] = [serialize_feedback(f) for f in feedbacks]
    if documents is not None:
        data["documents"] = [serialize_document(d) for d in documents]
    return data


def serialize_module(
    m: Module,
    *,
    progress: Optional[Decimal] = None,
    activities: Optional[List[dict]] = None,
    documents: Optional[Iterable[Document]] = None,
    participants: Optional[Iterable[User]] = None,
) -> dict:
    data: Dict[str, Any] = {
        "id": str(m.id),
        "courseId": str(m.course_id),
        "name": m.name,
        "description": m.description,
        "startDate": _ts(m.start_date),
        "endDate": _ts(m.end_date),
        "progress": _progress(progress),
    }
    if activities is not None:
        data["activities"] = activities
    if documents is not None:
        data["documents"] = [serialize_document(d) for d in documents]
    if participants is not None:
        data["participants"] = [serialize_user(u) for u in participants]
    return data


def serialize_course(
    c: Course,
    *,
    progress: Optional[Decimal] = None,
    modules: Optional[List[dict]] = None,
    documents: Optional[Iterable[Document]] = None,
    participants: Optional[Iterable[User]] = None,
) -> dict:
    data: Dict[str, Any] = {
        "id": str(c.id),
        "name": c.name,
        "description": c.description,
        "startDate": _ts(c.start_date),
        "endDate": _ts(c.end_date),
        "progress": _progress(progress),
    }
    if modules is not None:
        data["modules"] = modules
    if documents is not None:
        data["documents"] = [serialize_document(d) for d in documents]
    if participants is not None:
        data["participants"] = [serialize_user(u) for u in participants]
    return data


__all__ = [
    "serialize_activity",
    "serialize_activity_type",
    "serialize_course",
    "serialize_document",
    "serialize_feedback",
    "serialize_module",
    "serialize_user",
]
