"""Structured logging setup with JSON-lines output and redaction support."""

from __future__ import annotations

import json
import logging
import math
import re
import sys
import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Final, TextIO

from safe_portals.config.schema import DEFAULT_SETTINGS, PortalSettings
from safe_portals.constants import LOGGER_NAME, REDACTED_VALUE
from safe_portals.diagnostics import ValidationError, render_input
from safe_portals.portal import JSONValue

LogRedactor = Callable[[JSONValue], JSONValue]

_TRUNCATION_MARKER: Final[str] = "...<truncated>"

_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "passphrase",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "cookie",
    "private_key",
    "client_secret",
)

_SENSITIVE_ASSIGNMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(api[_-]?key|token|password|secret|client_secret|authorization)\b\s*([:=])\s*([^\s,;]+)"
)
_BEARER_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*")

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)

_TEXT_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_INSTALLED_LOCK = threading.Lock()
_INSTALLED_HANDLER: logging.Handler | None = None


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def __init__(self, *, redactor: LogRedactor, max_field_chars: int) -> None:
        super().__init__()
        self._redactor = redactor
        self._max_field_chars = max_field_chars

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": _coerce_log_message(
                self._redactor(_normalize_json_value(record.getMessage()))
            ),
        }

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = _bound_fields(
                self._redactor(_normalize_json_value(extras)), self._max_field_chars
            )

        if record.exc_info is not None:
            event["exception"] = _coerce_log_message(
                self._redactor(_normalize_json_value(self.formatException(record.exc_info)))
            )
        if record.stack_info:
            event["stack"] = _coerce_log_message(
                self._redactor(_normalize_json_value(str(record.stack_info)))
            )

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class _TextFormatter(logging.Formatter):
    """Human-readable single-line formatter; extras are appended as compact JSON."""

    def __init__(self, *, redactor: LogRedactor, max_field_chars: int) -> None:
        super().__init__(_TEXT_FORMAT)
        self._redactor = redactor
        self._max_field_chars = max_field_chars

    def format(self, record: logging.LogRecord) -> str:
        line = _coerce_log_message(self._redactor(_normalize_json_value(super().format(record))))
        extras = _extract_extra_fields(record)
        if extras:
            rendered = _bound_fields(
                self._redactor(_normalize_json_value(extras)), self._max_field_chars
            )
            line += " " + json.dumps(
                rendered, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            )
        return line


def setup_logging(
    settings: PortalSettings | None = None,
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach a single stream handler to the package logger and return it.

    Parameters
    ----------
    settings:
        Effective settings; defaults apply when omitted.
    stream:
        Destination for formatted records. Defaults to ``sys.stderr``.

    Calling this again replaces the handler installed by the previous call.
    Handlers attached by the application itself are left alone.
    """

    resolved = settings or DEFAULT_SETTINGS
    level = _parse_log_level(resolved.log_level)
    redactor = default_log_redactor if resolved.redact_sensitive else _identity_redactor

    formatter: logging.Formatter
    if resolved.log_format == "text":
        formatter = _TextFormatter(
            redactor=redactor, max_field_chars=resolved.max_rendered_input_chars
        )
    else:
        formatter = _JsonLineFormatter(
            redactor=redactor, max_field_chars=resolved.max_rendered_input_chars
        )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    global _INSTALLED_HANDLER
    with _INSTALLED_LOCK:
        if _INSTALLED_HANDLER is not None:
            logger.removeHandler(_INSTALLED_HANDLER)
            _INSTALLED_HANDLER.close()
        logger.addHandler(handler)
        _INSTALLED_HANDLER = handler
    return logger


def teardown_logging() -> None:
    """Remove the handler installed by ``setup_logging`` and reset the package level."""

    global _INSTALLED_HANDLER
    with _INSTALLED_LOCK:
        if _INSTALLED_HANDLER is None:
            return
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.NOTSET)
        logger.removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()
        _INSTALLED_HANDLER = None


def describe_failure(exc: ValidationError, settings: PortalSettings | None = None) -> str:
    """Render a validation failure for logs: redacted and length-bounded."""

    resolved = settings or DEFAULT_SETTINGS
    got: JSONValue = _normalize_json_value(exc.got)
    if resolved.redact_sensitive:
        got = default_log_redactor(got)
    rendered = render_input(got)
    limit = resolved.max_rendered_input_chars
    if len(rendered) > limit:
        rendered = _truncate(rendered, limit)
    return f"data{exc.path} does not match serializer in data {rendered}"


def default_log_redactor(value: JSONValue) -> JSONValue:
    """Default deep redaction for secret-bearing keys and inline credentials."""
    return _redact_value(value, key_context=None)


def _identity_redactor(value: JSONValue) -> JSONValue:
    return value


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _coerce_log_message(value: JSONValue) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _bound_fields(fields: JSONValue, limit: int) -> JSONValue:
    # Oversized values (typically the rejected input) collapse to truncated JSON text.
    if not isinstance(fields, dict):
        return fields
    bounded: dict[str, JSONValue] = {}
    for key, value in fields.items():
        rendered = render_input(value)
        bounded[key] = _truncate(rendered, limit) if len(rendered) > limit else value
    return bounded


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + _TRUNCATION_MARKER


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS:
            continue
        if key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return repr(value)
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            normalized = value.replace(tzinfo=UTC)
        else:
            normalized = value.astimezone(UTC)
        return normalized.isoformat(timespec="microseconds").replace("+00:00", "Z")
    if isinstance(value, Enum):
        return _normalize_json_value(value.value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        normalized_items = [_normalize_json_value(item) for item in value]
        return sorted(
            normalized_items,
            key=lambda item: json.dumps(
                item, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            ),
        )
    return repr(value)


def _redact_value(value: JSONValue, *, key_context: str | None) -> JSONValue:
    if key_context is not None and _requires_redaction_for_key(key_context):
        return REDACTED_VALUE

    if isinstance(value, str):
        return _redact_string(value)

    if isinstance(value, list):
        return [_redact_value(item, key_context=None) for item in value]

    if isinstance(value, dict):
        return {key: _redact_value(item, key_context=key) for key, item in value.items()}

    return value


def _requires_redaction_for_key(key: str) -> bool:
    key_lower = key.lower()
    return any(term in key_lower for term in _SENSITIVE_KEY_TERMS)


def _redact_string(text: str) -> str:
    redacted = _SENSITIVE_ASSIGNMENT_PATTERN.sub(
        lambda match: f"{match.group(1)}{match.group(2)}{REDACTED_VALUE}", text
    )
    return _BEARER_TOKEN_PATTERN.sub(f"Bearer {REDACTED_VALUE}", redacted)


__all__ = [
    "LogRedactor",
    "default_log_redactor",
    "describe_failure",
    "setup_logging",
    "teardown_logging",
]
