"""Signing pipeline data models."""

from signature_engine.models.signing import (
    AuditRecord,
    DocumentRect,
    FieldRect,
    PageDimensions,
    ScreenRect,
    SignatureImage,
    SigningResult,
    SignRequest,
    Viewport,
)

__all__ = [
    "AuditRecord",
    "DocumentRect",
    "FieldRect",
    "PageDimensions",
    "ScreenRect",
    "SignatureImage",
    "SigningResult",
    "SignRequest",
    "Viewport",
]
