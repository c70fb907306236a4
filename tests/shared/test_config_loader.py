"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.portal_shared.config import (
    PortalSettings,
    load_settings,
    resolve_component_settings,
)
from resources.substrates.postgres.config import PostgresSettings
from services.state.attempt_ledger.component import SERVICE_COMPONENT_ID
from services.state.attempt_ledger.config import AttemptLedgerSettings


def test_load_settings_uses_portal_precedence_cascade(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Init params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "portal.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "http:",
                "  port: 9000",
                "components:",
                "  substrate:",
                "    postgres:",
                "      pool_size: 7",
                "  service:",
                "    attempt_ledger:",
                "      max_attempts: 5",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("VERIFY_PORTAL_LOGGING__LEVEL", "ERROR")
    monkeypatch.setenv("VERIFY_PORTAL_HTTP__PORT", "9100")

    settings = load_settings(config_path=config_file, logging={"level": "DEBUG"})

    postgres = resolve_component_settings(
        settings=settings,
        component_id="substrate_postgres",
        model=PostgresSettings,
    )
    ledger = resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=AttemptLedgerSettings,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.http.port == 9100
    assert postgres.pool_size == 7
    assert ledger.max_attempts == 5
    assert ledger.list_limit == 500


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to model defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "portal.yaml")
    ledger = resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=AttemptLedgerSettings,
    )

    assert settings.logging.service == "verify-portal"
    assert settings.http.port == 8080
    assert settings.components.core_boot.run_migrations_on_startup is True
    assert ledger.max_attempts == 3


def test_flat_component_keys_are_rejected() -> None:
    """Component settings must be grouped under their kind namespace."""
    with pytest.raises(ValidationError):
        PortalSettings(components={"service_attempt_ledger": {"max_attempts": 2}})


def test_component_settings_forbid_unknown_keys() -> None:
    settings = PortalSettings(
        components={"service": {"attempt_ledger": {"max_attemps": 2}}}
    )

    with pytest.raises(ValidationError):
        resolve_component_settings(
            settings=settings,
            component_id=str(SERVICE_COMPONENT_ID),
            model=AttemptLedgerSettings,
        )
