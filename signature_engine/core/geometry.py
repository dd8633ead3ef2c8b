"""Conversion of field rectangles between screen space and PDF space.

Screen space is the rendered page as the user sees it: pixels, origin at the
top-left corner of the viewport, y growing downward. Document space is the
PDF page itself: points, origin at the bottom-left corner, y growing upward.
Both directions scale linearly by page size / viewport size; the vertical
axis is additionally flipped, and the flip subtracts the rectangle height so
that the *bottom* edge of the field lands on the computed y.
"""

import math

from signature_engine.models.signing import DocumentRect, PageDimensions, ScreenRect, Viewport


class InvalidGeometry(ValueError):
    """Raised when a rectangle or reference frame cannot be converted."""

    pass


def _require_positive(label: str, width: float, height: float) -> None:
    for axis, value in (("width", width), ("height", height)):
        if not math.isfinite(value) or value <= 0:
            raise InvalidGeometry(f"{label} {axis} must be positive, got {value}")


def to_document_space(
    rect: ScreenRect, viewport: Viewport, page: PageDimensions
) -> DocumentRect:
    """Map a field drawn over the rendered page onto the PDF page."""
    _require_positive("Viewport", viewport.width, viewport.height)
    _require_positive("Page", page.width, page.height)
    _require_positive("Field", rect.width, rect.height)

    scale_x = page.width / viewport.width
    scale_y = page.height / viewport.height

    scaled_y = rect.y * scale_y
    scaled_height = rect.height * scale_y

    return DocumentRect(
        x=rect.x * scale_x,
        y=page.height - scaled_y - scaled_height,
        width=rect.width * scale_x,
        height=scaled_height,
    )


def to_screen_space(
    rect: DocumentRect, viewport: Viewport, page: PageDimensions
) -> ScreenRect:
    """Inverse of :func:`to_document_space`, for redisplaying a stored placement."""
    _require_positive("Viewport", viewport.width, viewport.height)
    _require_positive("Page", page.width, page.height)
    _require_positive("Field", rect.width, rect.height)

    scale_x = viewport.width / page.width
    scale_y = viewport.height / page.height

    top_from_page_top = page.height - rect.y - rect.height

    return ScreenRect(
        x=rect.x * scale_x,
        y=top_from_page_top * scale_y,
        width=rect.width * scale_x,
        height=rect.height * scale_y,
    )
