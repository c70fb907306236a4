"""Smoke tests for the integration harness helper layer."""

from __future__ import annotations

from tests.integration.helpers import (
    external_postgres_url,
    real_provider_tests_enabled,
)


def test_real_provider_flag_is_opt_in(monkeypatch) -> None:
    monkeypatch.delenv("VERIFY_PORTAL_RUN_INTEGRATION_REAL", raising=False)
    assert real_provider_tests_enabled() is False

    monkeypatch.setenv("VERIFY_PORTAL_RUN_INTEGRATION_REAL", "yes")
    assert real_provider_tests_enabled() is True


def test_blank_external_postgres_url_means_unset(monkeypatch) -> None:
    monkeypatch.setenv("VERIFY_PORTAL_TEST_POSTGRES_URL", "  ")
    assert external_postgres_url() is None
