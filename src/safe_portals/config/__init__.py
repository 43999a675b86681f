"""
safe-portals config package public API.

Purpose
- Export settings loading, the typed settings object and its error type.
- Support ``safe_portals.toml`` plus ``SAFE_PORTALS_`` env overrides.
"""

from safe_portals.config.loader import (
    DEFAULT_SETTINGS_FILE,
    ENV_PREFIX,
    SETTINGS_PORTAL,
    load_settings,
    validate_payload,
)
from safe_portals.config.schema import (
    DEFAULT_SETTINGS,
    LOG_FORMATS,
    LOG_LEVELS,
    SETTING_NAMES,
    PortalSettings,
    SettingsError,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "DEFAULT_SETTINGS_FILE",
    "ENV_PREFIX",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "SETTINGS_PORTAL",
    "SETTING_NAMES",
    "PortalSettings",
    "SettingsError",
    "load_settings",
    "validate_payload",
]
