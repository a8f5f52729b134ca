"""Shared wiring for the Learning read use cases."""
from __future__ import annotations

from typing import List, Optional, TypeVar

from lms.identity_access.domain import CallerIdentity, perspective_for
from lms.querying.source import Queryable

from ..config import QueryConfig, load_query_config
from ..ports import LearningRepoProtocol
from ..progress import ProgressCalculator
from ..scoping import RoleScopedView


T = TypeVar("T")


def fetch_all(source: Queryable[T]) -> List[T]:
    """Materialize a source in its natural order (used for includes)."""
    total = source.count()
    return source.fetch(0, total) if total else []


class LearningQueryUseCase:
    """Base for list/detail use cases: holds repo, config and progress wiring."""

    def __init__(self, repo: LearningRepoProtocol, *, config: Optional[QueryConfig] = None) -> None:
        self._repo = repo
        self._config = config or load_query_config()
        self._progress = ProgressCalculator(repo, aggregate=self._config.aggregate_strategy)

    @property
    def case_sensitive(self) -> bool:
        return self._config.filter_case_sensitive

    def _view(self, caller: CallerIdentity) -> RoleScopedView:
        # Raises RoleNotSupportedError before any storage access.
        return RoleScopedView(self._repo, perspective_for(caller))


__all__ = ["LearningQueryUseCase", "fetch_all"]
