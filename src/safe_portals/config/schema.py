"""
safe-portals — settings schema.

Purpose
- Define the typed settings object, its defaults and the accepted value sets.

Non-functional requirements
- No portal imports here; the loader validates payloads with the portals so
  this module stays importable from anywhere in the package.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Final

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")


class SettingsError(ValueError):
    """Raised when settings cannot be loaded or fail validation."""

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.path = path


@dataclass(frozen=True, slots=True)
class PortalSettings:
    """Effective runtime settings for logging and failure rendering."""

    log_level: str = "WARNING"
    log_format: str = "json"
    redact_sensitive: bool = True
    max_rendered_input_chars: int = 2048

    def __post_init__(self) -> None:
        if self.log_level not in LOG_LEVELS:
            raise SettingsError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}",
                path=".log_level",
            )
        if self.log_format not in LOG_FORMATS:
            raise SettingsError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}",
                path=".log_format",
            )
        if self.max_rendered_input_chars <= 0:
            raise SettingsError(
                "max_rendered_input_chars must be > 0",
                path=".max_rendered_input_chars",
            )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def merged(self, payload: Mapping[str, Any]) -> PortalSettings:
        """Return a copy with keys from ``payload`` replacing current values."""

        values = self.as_dict()
        values.update(payload)
        return PortalSettings(**values)


DEFAULT_SETTINGS: Final[PortalSettings] = PortalSettings()
SETTING_NAMES: Final[tuple[str, ...]] = tuple(DEFAULT_SETTINGS.as_dict())


__all__ = [
    "DEFAULT_SETTINGS",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "SETTING_NAMES",
    "PortalSettings",
    "SettingsError",
]
