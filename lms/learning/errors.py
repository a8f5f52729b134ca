"""Learning context errors.

Both subclass the builtins the web adapter already maps (`LookupError` -> 404),
so callers that only know the builtin keep working.
"""
from __future__ import annotations


class NotFoundError(LookupError):
    """Resource is missing or outside the caller's scope; callers cannot tell which."""

    def __init__(self, code: str = "not_found") -> None:
        super().__init__(code)
        self.code = code


__all__ = ["NotFoundError"]
