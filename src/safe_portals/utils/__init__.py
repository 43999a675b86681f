"""Small standard-library helpers shared by portal modules."""

from safe_portals.utils.hashing import sha256_bytes, sha256_text, short_digest

__all__ = ["sha256_bytes", "sha256_text", "short_digest"]
