"""Data models for the signing pipeline."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    """Immutable model serialised with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FieldRect(_Model):
    """Axis-aligned rectangle; the subclass names its coordinate space."""

    x: float = Field(..., allow_inf_nan=False)
    y: float = Field(..., allow_inf_nan=False)
    width: float = Field(..., allow_inf_nan=False)
    height: float = Field(..., allow_inf_nan=False)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class ScreenRect(FieldRect):
    """Rectangle in viewport pixels, origin top-left, y growing downward."""


class DocumentRect(FieldRect):
    """Rectangle in PDF points, origin bottom-left of the page, y growing upward."""


class Viewport(_Model):
    """On-screen size of the rendered page, in pixels."""

    width: float = Field(..., allow_inf_nan=False)
    height: float = Field(..., allow_inf_nan=False)


class PageDimensions(_Model):
    """Size of one PDF page in points."""

    width: float = Field(..., allow_inf_nan=False)
    height: float = Field(..., allow_inf_nan=False)


class SignatureImage(_Model):
    """Decoded PNG signature with its intrinsic pixel size."""

    data: bytes = Field(..., repr=False)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class SignRequest(_Model):
    """A single signing call; target_rect is already in document space."""

    document_id: str = Field(..., min_length=1)
    signature_image: bytes = Field(..., repr=False)
    target_rect: DocumentRect
    page_index: int = Field(default=0, ge=0)


class SigningResult(_Model):
    """Outcome of a successful signing call."""

    artifact_location: str
    artifact_filename: str
    original_hash: str
    signed_hash: str
    audit_recorded: bool = True


class AuditRecord(_Model):
    """Append-only record of one signing operation."""

    document_id: str
    original_hash: str
    signed_hash: str
    signed_at: datetime
    target_rect: DocumentRect
    artifact_filename: str
    page_index: int = 0
