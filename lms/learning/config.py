"""
Query configuration for the Learning read side.

Intent:
    One place that reads the environment variables controlling filter case
    policy, aggregate progress strategy and paging limits.

Why:
    Defaults and validation stay explicit, and tests can exercise config
    behaviour with `monkeypatch.setenv` without booting the web app.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

from .progress import STRATEGIES, AggregateStrategy, get_strategy

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class QueryConfig:
    filter_case_sensitive: bool
    progress_aggregate: str  # "mean" | "max" | "min"
    default_page_size: int
    participants_page_size: int
    max_page_size: int

    @property
    def aggregate_strategy(self) -> AggregateStrategy:
        return get_strategy(self.progress_aggregate)


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got: {raw!r}")


def _int_env(name: str, default: int, *, upper: int = 1000) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")
    if value <= 0 or value > upper:
        raise ValueError(f"{name} out of range (1..{upper}), got: {value}")
    return value


def load_query_config() -> QueryConfig:
    """
    Parse and validate query configuration from environment variables.

    Behavior:
        - `LMS_FILTER_CASE_SENSITIVE` (default false): text filters fold case.
        - `LMS_PROGRESS_AGGREGATE` selects the aggregate (privileged view) strategy
          (mean | max | min, default mean).
        - Page sizes are 1..1000; defaults must not exceed `LMS_MAX_PAGE_SIZE`.
    """
    aggregate = (os.getenv("LMS_PROGRESS_AGGREGATE") or "mean").strip().lower()
    if aggregate not in STRATEGIES:
        raise ValueError(f"LMS_PROGRESS_AGGREGATE must be one of {sorted(STRATEGIES)}")

    max_size = _int_env("LMS_MAX_PAGE_SIZE", 100)
    default_size = _int_env("LMS_DEFAULT_PAGE_SIZE", 10)
    participants_size = _int_env("LMS_PARTICIPANTS_PAGE_SIZE", 20)
    if default_size > max_size or participants_size > max_size:
        raise ValueError("default page sizes must not exceed LMS_MAX_PAGE_SIZE")

    return QueryConfig(
        filter_case_sensitive=_bool_env("LMS_FILTER_CASE_SENSITIVE", False),
        progress_aggregate=aggregate,
        default_page_size=default_size,
        participants_page_size=participants_size,
        max_page_size=max_size,
    )


__all__ = ["QueryConfig", "load_query_config"]
