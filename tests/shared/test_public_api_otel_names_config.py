"""Unit tests for configured OTel naming in public API instrumentation."""

from __future__ import annotations

from packages.portal_shared.config import PortalSettings
from packages.portal_shared.logging import public_api as public_api_module


class _FakeMeter:
    def __init__(self) -> None:
        self.names: list[str] = []

    def create_counter(self, *, name: str, description: str, unit: str) -> object:
        del description, unit
        self.names.append(name)
        return object()

    def create_histogram(self, *, name: str, description: str, unit: str) -> object:
        del description, unit
        self.names.append(name)
        return object()


def _capture_meter(monkeypatch) -> tuple[list[str], _FakeMeter]:
    meter_names: list[str] = []
    meter = _FakeMeter()

    def fake_get_meter(name: str) -> _FakeMeter:
        meter_names.append(name)
        return meter

    monkeypatch.setattr(public_api_module.otel_metrics, "get_meter", fake_get_meter)
    return meter_names, meter


def test_public_api_otel_names_use_defaults_when_not_configured(monkeypatch) -> None:
    """Default OTel names resolve when observability config is absent."""
    public_api_module._instruments.cache_clear()
    monkeypatch.setattr(public_api_module, "load_settings", lambda: PortalSettings())
    meter_names, meter = _capture_meter(monkeypatch)

    public_api_module._instruments()
    public_api_module._instruments.cache_clear()

    assert meter_names == ["verify_portal.public_api"]
    assert "portal_public_api_calls_total" in meter.names
    assert "portal_validation_decisions_total" in meter.names


def test_public_api_otel_names_accept_config_overrides(monkeypatch) -> None:
    """Configured OTel names override built-in defaults."""
    public_api_module._instruments.cache_clear()

    def fake_load_settings() -> PortalSettings:
        return PortalSettings.model_validate(
            {
                "observability": {
                    "public_api": {
                        "otel": {
                            "meter_name": "custom.meter",
                            "metric_public_api_calls_total": "custom_calls_total",
                        }
                    }
                }
            }
        )

    monkeypatch.setattr(public_api_module, "load_settings", fake_load_settings)
    meter_names, meter = _capture_meter(monkeypatch)

    public_api_module._instruments()
    public_api_module._instruments.cache_clear()

    assert meter_names == ["custom.meter"]
    assert "custom_calls_total" in meter.names
    assert "portal_public_api_calls_total" not in meter.names
