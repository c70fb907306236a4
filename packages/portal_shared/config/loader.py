"""Settings loading with a process-wide cache.

Precedence is always: explicit overrides, then ``VERIFY_PORTAL_*`` environment
variables (``__`` separates nested keys, e.g.
``VERIFY_PORTAL_LOGGING__LEVEL=DEBUG``), then the YAML file, then defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from .models import PortalSettings


def load_settings(
    *, config_path: str | Path | None = None, **overrides: Any
) -> PortalSettings:
    """Return settings; the no-argument form is cached for the process."""
    if config_path is None and not overrides:
        return _cached_settings()
    if config_path is None:
        return PortalSettings(**overrides)

    class _PathBoundSettings(PortalSettings):
        _config_path = Path(config_path)

    return _PathBoundSettings(**overrides)


@lru_cache(maxsize=1)
def _cached_settings() -> PortalSettings:
    return PortalSettings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next load re-reads env and file."""
    _cached_settings.cache_clear()
