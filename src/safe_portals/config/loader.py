"""
safe-portals — settings loader.

Purpose
- Load effective settings from defaults, a TOML file, environment variables
  and explicit overrides.

Precedence
- overrides > env (``SAFE_PORTALS_``) > file > defaults.
- The file is ``safe_portals.toml`` in the working directory unless a path is
  given; settings live under ``[safe_portals]`` or at the top level.

Functional requirements
- Every source is validated with the package's own portals; unknown keys and
  ill-typed values raise ``SettingsError`` naming the offending key.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal

from safe_portals.config.schema import (
    DEFAULT_SETTINGS,
    LOG_FORMATS,
    LOG_LEVELS,
    SETTING_NAMES,
    PortalSettings,
    SettingsError,
)
from safe_portals.containers import one_of, partial_obj
from safe_portals.diagnostics import ValidationError
from safe_portals.primitives import bool_, int_

DEFAULT_SETTINGS_FILE: Final[str] = "safe_portals.toml"
ENV_PREFIX: Final[str] = "SAFE_PORTALS_"
TOML_TABLE: Final[str] = "safe_portals"

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_INTEGER_SETTINGS: Final[tuple[str, ...]] = ("max_rendered_input_chars",)

_LOGGER = logging.getLogger(__name__)

SETTINGS_PORTAL: Final = partial_obj(
    log_level=one_of(*LOG_LEVELS),
    log_format=one_of(*LOG_FORMATS),
    redact_sensitive=bool_,
    max_rendered_input_chars=int_,
)


def load_settings(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> PortalSettings:
    """Load effective settings with precedence: overrides > env > file > defaults."""

    resolved_path = _resolve_settings_path(path)
    env_map = os.environ if environ is None else environ

    layers: tuple[tuple[str, Mapping[str, object]], ...] = (
        (str(resolved_path), _load_toml_file(resolved_path, required=path is not None)),
        ("environment", _collect_env_overrides(env_map)),
        ("overrides", dict(overrides or {})),
    )

    settings = DEFAULT_SETTINGS
    for source, payload in layers:
        if not payload:
            continue
        settings = settings.merged(validate_payload(payload, source=source))
        _LOGGER.debug("applied settings from %s", source, extra={"keys": sorted(payload)})
    return settings


def validate_payload(payload: Mapping[str, object], *, source: str = "settings") -> dict[str, Any]:
    """Validate a raw settings mapping and return the typed subset it sets."""

    unknown = sorted(key for key in payload if key not in SETTING_NAMES)
    if unknown:
        raise SettingsError(
            f"{source}: unknown setting(s): {', '.join(unknown)}", path=f".{unknown[0]}"
        )

    normalized = dict(payload)
    level = normalized.get("log_level")
    if isinstance(level, str):
        normalized["log_level"] = level.strip().upper()

    for name in _INTEGER_SETTINGS:
        if _is_fractional(normalized.get(name)):
            raise SettingsError(
                f"{source}: setting {name} must be a whole number", path=f".{name}"
            )

    try:
        typed = SETTINGS_PORTAL.read(normalized)
    except ValidationError as exc:
        raise SettingsError(f"{source}: invalid setting at settings{exc.path}", path=exc.path) from exc

    for name, value in typed.items():
        if value is None:
            raise SettingsError(f"{source}: setting {name} must not be null", path=f".{name}")
    return typed


def _is_fractional(value: object) -> bool:
    # int_ would truncate these; settings reject them instead.
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return False
    return isinstance(value, float) and not value.is_integer()


def _resolve_settings_path(path: str | Path | None) -> Path:
    if path is None:
        return (Path.cwd() / DEFAULT_SETTINGS_FILE).resolve()
    return Path(path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise SettingsError(f"settings file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise SettingsError(f"unable to read settings file {path}: {exc}") from exc

    table = parsed.get(TOML_TABLE, parsed)
    if not isinstance(table, dict):
        raise SettingsError(f"[{TOML_TABLE}] must be a table: {path}")
    return table


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, object]:
    payload: dict[str, object] = {}
    for name in SETTING_NAMES:
        env_name = ENV_PREFIX + name.upper()
        raw = environ.get(env_name)
        if raw is None:
            continue
        payload[name] = _coerce_env(raw, _infer_type(getattr(DEFAULT_SETTINGS, name)), env_name)
    return payload


def _infer_type(value: object) -> Literal["str", "int", "bool"]:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    return "str"


def _coerce_env(raw: str, value_type: Literal["str", "int", "bool"], env_name: str) -> object:
    value = raw.strip()
    if value_type == "str":
        return value
    if value_type == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise SettingsError(f"{env_name} must be an integer") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise SettingsError(f"{env_name} must be a boolean (true/false/1/0/yes/no/on/off)")


__all__ = [
    "DEFAULT_SETTINGS_FILE",
    "ENV_PREFIX",
    "SETTINGS_PORTAL",
    "load_settings",
    "validate_payload",
]
