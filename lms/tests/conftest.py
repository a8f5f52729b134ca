"""
Pytest configuration for the LMS query core tests.

Why: Force AnyIO to use the asyncio backend to avoid sandbox restrictions
that can affect the Trio backend (e.g., socketpair permission errors).
"""
import os
import sys
from pathlib import Path

import pytest

# Tests never talk to a real database; API tests run on the in-memory repo.
os.environ.pop("LMS_DATABASE_URL", None)
os.environ.pop("DATABASE_URL", None)

# Make the repo root and the tests directory importable (`lms.*`, `utils.*`).
REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = Path(__file__).resolve().parent
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_learning_repo_between_tests():
    """Give every test a fresh in-memory repo behind the API routes."""
    from lms.web.routes import learning

    learning.set_repo(None)
    yield
    learning.set_repo(None)


@pytest.fixture(autouse=True)
def _clean_query_env(monkeypatch):
    for name in (
        "LMS_FILTER_CASE_SENSITIVE",
        "LMS_PROGRESS_AGGREGATE",
        "LMS_DEFAULT_PAGE_SIZE",
        "LMS_PARTICIPANTS_PAGE_SIZE",
        "LMS_MAX_PAGE_SIZE",
        "LMS_ENV",
    ):
        monkeypatch.delenv(name, raising=False)
