"""
Query configuration parsing and production startup guard.
"""
from __future__ import annotations

import pytest

from lms.learning.config import load_query_config
from lms.learning.progress import maximum, mean
from lms.web.config import ensure_secure_config_on_startup


def test_defaults():
    cfg = load_query_config()
    assert cfg.filter_case_sensitive is False
    assert cfg.progress_aggregate == "mean"
    assert cfg.aggregate_strategy is mean
    assert (cfg.default_page_size, cfg.participants_page_size, cfg.max_page_size) == (10, 20, 100)


def test_overrides(monkeypatch):
    monkeypatch.setenv("LMS_FILTER_CASE_SENSITIVE", "yes")
    monkeypatch.setenv("LMS_PROGRESS_AGGREGATE", "Max")
    monkeypatch.setenv("LMS_DEFAULT_PAGE_SIZE", "5")
    monkeypatch.setenv("LMS_MAX_PAGE_SIZE", "50")
    cfg = load_query_config()
    assert cfg.filter_case_sensitive is True
    assert cfg.aggregate_strategy is maximum
    assert cfg.default_page_size == 5
    assert cfg.max_page_size == 50


@pytest.mark.parametrize(
    "name,value",
    [
        ("LMS_FILTER_CASE_SENSITIVE", "maybe"),
        ("LMS_PROGRESS_AGGREGATE", "median"),
        ("LMS_DEFAULT_PAGE_SIZE", "0"),
        ("LMS_MAX_PAGE_SIZE", "1001"),
        ("LMS_PARTICIPANTS_PAGE_SIZE", "abc"),
    ],
)
def test_invalid_values_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        load_query_config()


def test_default_page_size_cannot_exceed_max(monkeypatch):
    monkeypatch.setenv("LMS_MAX_PAGE_SIZE", "15")
    with pytest.raises(ValueError):
        load_query_config()  # participants default 20 > 15


def test_startup_guard_is_permissive_in_dev(monkeypatch):
    monkeypatch.setenv("LMS_ENV", "dev")
    ensure_secure_config_on_startup()


def test_startup_guard_requires_dsn_in_prod(monkeypatch):
    monkeypatch.setenv("LMS_ENV", "prod")
    monkeypatch.delenv("LMS_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(SystemExit):
        ensure_secure_config_on_startup()


def test_startup_guard_refuses_disabled_tls(monkeypatch):
    monkeypatch.setenv("LMS_ENV", "staging")
    monkeypatch.setenv("LMS_DATABASE_URL", "postgresql://app:pw@db/lms?sslmode=disable")
    with pytest.raises(SystemExit):
        ensure_secure_config_on_startup()


def test_startup_guard_rejects_invalid_query_config(monkeypatch):
    monkeypatch.setenv("LMS_ENV", "prod")
    monkeypatch.setenv("LMS_DATABASE_URL", "postgresql://app:pw@db/lms?sslmode=require")
    monkeypatch.setenv("LMS_PROGRESS_AGGREGATE", "median")
    with pytest.raises(SystemExit):
        ensure_secure_config_on_startup()


def test_startup_guard_accepts_valid_prod_config(monkeypatch):
    monkeypatch.setenv("LMS_ENV", "prod")
    monkeypatch.setenv("LMS_DATABASE_URL", "postgresql://app:pw@db/lms?sslmode=require")
    ensure_secure_config_on_startup()
