"""
Configuration and startup security checks for the LMS query service.

Why: Prevent accidental insecure deployments. Development stays permissive;
production-like environments must point at a real database over TLS and carry
a valid query configuration.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os

from lms.learning.config import load_query_config


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def current_environment() -> str:
    return (os.getenv("LMS_ENV", "dev") or "dev").lower()


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks:
    - A database DSN (`LMS_DATABASE_URL` or `DATABASE_URL`) must be set; the
      in-memory repository is for development and tests only.
    - The DSN must not explicitly disable TLS.
    - Query configuration must parse (invalid values abort startup).
    """
    if not _is_prod_like(current_environment()):
        return  # dev/test remain permissive

    dsn = (os.getenv("LMS_DATABASE_URL") or os.getenv("DATABASE_URL") or "").strip()
    if not dsn:
        raise SystemExit("Refusing to start: LMS_DATABASE_URL or DATABASE_URL must be set in production.")
    if "sslmode=disable" in dsn:
        raise SystemExit(
            "Refusing to start: database DSN contains sslmode=disable in production. Use sslmode=require or verify TLS."
        )

    try:
        load_query_config()
    except ValueError as exc:
        raise SystemExit(f"Refusing to start: invalid query configuration ({exc}).") from exc
