"""
Lightweight psycopg stand-in for unit tests.

Provides ``install_fake_psycopg`` which monkeypatches a target module so that
``psycopg.connect`` returns a recording connection. Every executed statement is
rendered to text and stored with its parameters; result rows come from a
responder callable supplied by the test.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import types
from typing import Any, Callable, List, Optional, Sequence, Tuple


def _render(query: Any) -> str:
    if isinstance(query, str):
        return query
    # psycopg.sql.Composable renders without a connection since psycopg 3.2
    return query.as_string(None)


@dataclass
class FakeDB:
    responder: Callable[[str, tuple], List[tuple]] = lambda sql, params: []
    calls: List[Tuple[str, tuple]] = field(default_factory=list)
    dsns: List[str] = field(default_factory=list)

    def statements(self, *, skip_set_config: bool = True) -> List[Tuple[str, tuple]]:
        if not skip_set_config:
            return list(self.calls)
        return [(s, p) for s, p in self.calls if "set_config" not in s]


class _FakeCursor:
    def __init__(self, db: FakeDB) -> None:
        self._db = db
        self._rows: List[tuple] = []

    def execute(self, query: Any, params: Optional[Sequence[Any]] = None) -> None:
        text = " ".join(_render(query).split())
        args = tuple(params or ())
        self._db.calls.append((text, args))
        if "set_config" in text:
            self._rows = [("",)]
        else:
            self._rows = list(self._db.responder(text, args))

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class _FakeConn:
    def __init__(self, db: FakeDB) -> None:
        self._db = db

    def cursor(self):
        return _FakeCursor(self._db)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def install_fake_psycopg(monkeypatch, target_module, responder: Optional[Callable[[str, tuple], List[tuple]]] = None) -> FakeDB:
    """
    Patch ``target_module.psycopg`` so connections record statements in memory.

    Returns the ``FakeDB`` holding the recorded calls.
    """
    db = FakeDB()
    if responder is not None:
        db.responder = responder

    def fake_connect(dsn: str, **_kwargs):
        db.dsns.append(dsn)
        return _FakeConn(db)

    monkeypatch.setattr(target_module, "psycopg", types.SimpleNamespace(connect=fake_connect), raising=False)
    return db


__all__ = ["FakeDB", "install_fake_psycopg"]
