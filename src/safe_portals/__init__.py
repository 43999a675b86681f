"""
safe-portals — typed, bidirectional serializers for primitive data trees.

Purpose
- Package root. Re-exports the portal combinators and the validation error.

Import boundary
- No side effects beyond a ``NullHandler`` on the package logger; call
  ``safe_portals.observability.setup_logging`` to see log output.
"""

import logging

from safe_portals import result
from safe_portals.constants import LOGGER_NAME
from safe_portals.containers import (
    ArrayPortal,
    CombinedPortal,
    ObjPortal,
    OneOfPortal,
    PartialObjPortal,
    RecordPortal,
    TuplePortal,
    VariantPortal,
    array,
    combine,
    obj,
    one_of,
    partial_obj,
    tuple_,
    variant,
)
from safe_portals.diagnostics import ValidationError
from safe_portals.modifiers import NullablePortal, OptionalPortal, nullable, optional
from safe_portals.portal import Attempt, JSONScalar, JSONValue, Portal
from safe_portals.primitives import (
    bool_,
    date_iso,
    date_unix_millis,
    date_unix_secs,
    float_,
    int_,
    nothing,
    raw,
    str_,
    uuid,
)
from safe_portals.versioning import Migration, VersionedPortal, migration_guidance, versioned

__version__ = "0.1.0"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())

__all__ = [
    "ArrayPortal",
    "Attempt",
    "CombinedPortal",
    "JSONScalar",
    "JSONValue",
    "Migration",
    "NullablePortal",
    "ObjPortal",
    "OneOfPortal",
    "OptionalPortal",
    "PartialObjPortal",
    "Portal",
    "RecordPortal",
    "TuplePortal",
    "ValidationError",
    "VariantPortal",
    "VersionedPortal",
    "__version__",
    "array",
    "bool_",
    "combine",
    "date_iso",
    "date_unix_millis",
    "date_unix_secs",
    "float_",
    "int_",
    "migration_guidance",
    "nothing",
    "nullable",
    "obj",
    "one_of",
    "optional",
    "partial_obj",
    "raw",
    "result",
    "str_",
    "tuple_",
    "uuid",
    "variant",
    "versioned",
]
