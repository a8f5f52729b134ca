"""
In-memory session store for development and tests.

Why: Token issuance lives outside this service. Sessions created by the
identity provider hand-off carry only `sub`, `roles` and a display name; the
cookie holds an opaque id and nothing else.

Security: Session data stays server-side. Expired records are dropped on read.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence
import secrets
import time


def _now() -> int:
    return int(time.time())


@dataclass
class SessionRecord:
    session_id: str
    sub: str
    roles: list[str] = field(default_factory=list)
    name: str = ""
    expires_at: Optional[int] = None


class SessionStore:
    def __init__(self) -> None:
        self._data: Dict[str, SessionRecord] = {}

    def create(self, *, sub: str, roles: Sequence[str], name: str = "", ttl_seconds: int = 3600) -> SessionRecord:
        sid = secrets.token_urlsafe(24)
        rec = SessionRecord(session_id=sid, sub=sub, roles=list(roles), name=name, expires_at=_now() + ttl_seconds)
        self._data[sid] = rec
        return rec

    def get(self, session_id: str) -> Optional[SessionRecord]:
        rec = self._data.get(session_id)
        if not rec:
            return None
        if rec.expires_at and rec.expires_at < _now():
            self._data.pop(session_id, None)
            return None
        return rec

    def delete(self, session_id: str) -> None:
        self._data.pop(session_id, None)
