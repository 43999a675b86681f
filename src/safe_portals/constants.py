"""Stable constants shared across portal modules."""

from __future__ import annotations

import re
from typing import Final

# Package logger; module loggers are children of this name.
LOGGER_NAME: Final[str] = "safe_portals"

# Discriminator key used by tagged unions on the wire and in typed values.
VARIANT_TAG_FIELD: Final[str] = "type"

# Result portal slots. Presence of the error slot selects the error branch.
RESULT_OK_FIELD: Final[str] = "ok"
RESULT_ERROR_FIELD: Final[str] = "error"

# Canonical 8-4-4-4-12 UUID, version nibble 1-5, variant nibble 8/9/a/b.
UUID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Placeholder emitted by the ``nothing`` portal.
NOTHING_PLACEHOLDER: Final[str] = ""

REDACTED_VALUE: Final[str] = "***REDACTED***"

__all__ = [
    "LOGGER_NAME",
    "NOTHING_PLACEHOLDER",
    "REDACTED_VALUE",
    "RESULT_ERROR_FIELD",
    "RESULT_OK_FIELD",
    "UUID_PATTERN",
    "VARIANT_TAG_FIELD",
]
