"""Public API for shared portal configuration utilities."""

from .loader import clear_settings_cache, load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    ComponentsSettings,
    CoreBootSettings,
    HttpSettings,
    LoggingSettings,
    ObservabilitySettings,
    PortalSettings,
    resolve_component_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ComponentsSettings",
    "CoreBootSettings",
    "HttpSettings",
    "LoggingSettings",
    "ObservabilitySettings",
    "PortalSettings",
    "clear_settings_cache",
    "load_settings",
    "resolve_component_settings",
]
