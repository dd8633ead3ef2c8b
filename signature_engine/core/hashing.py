"""Content digests for the audit trail."""

import hashlib


def content_hash(data: bytes) -> str:
    """Return the SHA-256 hex digest of ``data`` (64 lowercase hex chars)."""
    return hashlib.sha256(data).hexdigest()
