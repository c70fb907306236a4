"""Shared helpers for integration tests."""

from __future__ import annotations

import os


def real_provider_tests_enabled() -> bool:
    """Return True when real-provider integration tests are explicitly enabled."""
    raw = os.getenv("VERIFY_PORTAL_RUN_INTEGRATION_REAL", "").strip().lower()
    return raw in {"1", "true", "yes", "on"}


def external_postgres_url() -> str | None:
    """Return an operator-provided Postgres URL that replaces the container."""
    raw = os.getenv("VERIFY_PORTAL_TEST_POSTGRES_URL", "").strip()
    return raw or None
