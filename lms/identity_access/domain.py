"""
Identity domain: roles and caller perspectives.

Why:
- Keep role names in one place for the web layer and use cases.
- Every list/detail query runs under exactly one perspective. `Privileged`
  sees all rows; `Restricted` sees only rows reachable through the caller's
  course enrollments. Anything else is rejected up front.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

ROLE_TEACHER = "teacher"
ROLE_STUDENT = "student"


class RoleNotSupportedError(PermissionError):
    """Caller holds no role this service can scope queries for."""

    def __init__(self, code: str = "role_not_supported") -> None:
        super().__init__(code)
        self.code = code


@dataclass(frozen=True)
class CallerIdentity:
    id: str
    roles: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_user(cls, user: dict | None) -> "CallerIdentity":
        """Build an identity from the request-state user dict (`sub`, `roles`)."""
        if not user:
            return cls(id="", roles=())
        roles = user.get("roles") or []
        if not isinstance(roles, (list, tuple)):
            roles = []
        return cls(id=str(user.get("sub") or ""), roles=tuple(str(r) for r in roles))


@dataclass(frozen=True)
class Privileged:
    """Teacher perspective: all rows of the base query."""

    user_id: str


@dataclass(frozen=True)
class Restricted:
    """Student perspective: rows reachable from the caller's enrollments."""

    user_id: str


Perspective = Union[Privileged, Restricted]


def perspective_for(identity: CallerIdentity) -> Perspective:
    """Map a caller to its query perspective.

    Behavior:
        - `teacher` wins over `student` when a caller holds both.
        - Empty ids or any other role set raise `RoleNotSupportedError`.
    """
    roles = {r.lower() for r in _iter_roles(identity.roles)}
    if not identity.id:
        raise RoleNotSupportedError("missing_identity")
    if ROLE_TEACHER in roles:
        return Privileged(user_id=identity.id)
    if ROLE_STUDENT in roles:
        return Restricted(user_id=identity.id)
    raise RoleNotSupportedError()


def _iter_roles(roles: Iterable[object]) -> Iterable[str]:
    for r in roles:
        if isinstance(r, str):
            yield r


__all__ = [
    "CallerIdentity",
    "Perspective",
    "Privileged",
    "ROLE_STUDENT",
    "ROLE_TEACHER",
    "Restricted",
    "RoleNotSupportedError",
    "perspective_for",
]
