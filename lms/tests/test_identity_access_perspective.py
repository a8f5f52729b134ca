"""
Caller perspectives: teacher -> Privileged, student -> Restricted, else rejected.
"""
from __future__ import annotations

import pytest

from lms.identity_access.domain import (
    CallerIdentity,
    Privileged,
    Restricted,
    RoleNotSupportedError,
    perspective_for,
)
from lms.identity_access.stores import SessionStore


def test_teacher_is_privileged():
    assert perspective_for(CallerIdentity("t-1", ("teacher",))) == Privileged("t-1")


def test_student_is_restricted():
    assert perspective_for(CallerIdentity("s-1", ("Student",))) == Restricted("s-1")


def test_teacher_wins_over_student():
    assert isinstance(perspective_for(CallerIdentity("x", ("student", "teacher"))), Privileged)


@pytest.mark.parametrize("roles", [(), ("admin",), ("guest", "other")])
def test_unsupported_roles_raise(roles):
    with pytest.raises(RoleNotSupportedError) as exc:
        perspective_for(CallerIdentity("u", roles))
    assert exc.value.code == "role_not_supported"
    assert isinstance(exc.value, PermissionError)


def test_missing_identity_is_rejected():
    with pytest.raises(RoleNotSupportedError) as exc:
        perspective_for(CallerIdentity("", ("teacher",)))
    assert exc.value.code == "missing_identity"


def test_identity_from_request_user():
    ident = CallerIdentity.from_user({"sub": "s-9", "roles": ["student", 3]})
    assert ident.id == "s-9"
    assert ident.roles == ("student", "3")
    assert CallerIdentity.from_user(None) == CallerIdentity(id="", roles=())
    assert CallerIdentity.from_user({"sub": "a", "roles": "teacher"}).roles == ()


def test_session_store_expires_records(monkeypatch):
    import lms.identity_access.stores as stores

    store = SessionStore()
    monkeypatch.setattr(stores, "_now", lambda: 1000)
    rec = store.create(sub="s-1", roles=["student"], ttl_seconds=10)
    assert store.get(rec.session_id).sub == "s-1"
    monkeypatch.setattr(stores, "_now", lambda: 2000)
    assert store.get(rec.session_id) is None
    store.delete(rec.session_id)
