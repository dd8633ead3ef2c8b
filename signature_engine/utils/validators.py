"""Validation utilities for signing request input."""

import base64
import binascii
import re

from signature_engine.utils.logger import logger

_DATA_URL_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")
_DOCUMENT_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,127}$")


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


def validate_document_id(document_id: str) -> bool:
    """Document ids double as file and object-key stems, so keep them path-safe."""
    if not document_id or not isinstance(document_id, str):
        return False
    return bool(_DOCUMENT_ID.match(document_id)) and ".." not in document_id


def decode_image_payload(payload: str, max_bytes: int | None = None) -> bytes:
    """Decode a ``data:image/...;base64,`` URL (or bare base64) to raw bytes."""
    if not payload or not isinstance(payload, str):
        raise ValidationError("Signature image is empty")

    encoded = _DATA_URL_PREFIX.sub("", payload.strip(), count=1)
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Rejected signature payload: {e}")
        raise ValidationError("Signature image is not valid base64") from e

    if not data:
        raise ValidationError("Signature image is empty")
    if max_bytes is not None and len(data) > max_bytes:
        raise ValidationError(f"Signature image exceeds {max_bytes} bytes")
    return data
