"""Public observability primitives: structured logging and failure rendering."""

from safe_portals.observability.logging import (
    LogRedactor,
    default_log_redactor,
    describe_failure,
    setup_logging,
    teardown_logging,
)

__all__ = [
    "LogRedactor",
    "default_log_redactor",
    "describe_failure",
    "setup_logging",
    "teardown_logging",
]
