"""Deterministic SHA-256 helpers for schema fingerprints."""

from __future__ import annotations

import hashlib

__all__ = ["sha256_bytes", "sha256_text", "short_digest"]

_SHORT_DIGEST_LENGTH = 12


def sha256_bytes(data: bytes) -> str:
    """Return SHA-256 hex digest for raw bytes."""

    return hashlib.sha256(data).hexdigest()


def sha256_text(text: str, *, encoding: str = "utf-8") -> str:
    """Return SHA-256 hex digest for text encoded with ``encoding``."""

    return sha256_bytes(text.encode(encoding))


def short_digest(digest: str, *, length: int = _SHORT_DIGEST_LENGTH) -> str:
    """Return the leading ``length`` characters of a hex digest for compact display."""

    if length <= 0:
        raise ValueError("length must be > 0")
    if len(digest) < length:
        raise ValueError(f"digest must be at least {length} characters")
    return digest[:length]
