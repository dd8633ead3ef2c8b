"""Aspect-fit placement of a signature image inside a target field."""

import math
from typing import NamedTuple

from signature_engine.core.geometry import InvalidGeometry
from signature_engine.models.signing import DocumentRect


class Placement(NamedTuple):
    """Final image rectangle plus the centering offsets inside the target."""

    rect: DocumentRect
    offset_x: float
    offset_y: float


def fit(target: DocumentRect, image_aspect: float) -> Placement:
    """Largest rectangle of ``image_aspect`` (width / height) centered in ``target``.

    The image is never cropped or stretched: exactly one axis is shrunk and
    the slack on that axis is split evenly on both sides. Equal aspects take
    the height-bound branch and produce zero offsets.
    """
    if target.width <= 0 or target.height <= 0:
        raise InvalidGeometry(f"Target rect must have positive size, got {target.width}x{target.height}")
    if not math.isfinite(image_aspect) or image_aspect <= 0:
        raise InvalidGeometry(f"Image aspect ratio must be positive, got {image_aspect}")

    final_width = target.width
    final_height = target.height
    offset_x = 0.0
    offset_y = 0.0

    if image_aspect > target.aspect_ratio:
        # wider than the box: bound by width
        final_height = target.width / image_aspect
        offset_y = (target.height - final_height) / 2
    else:
        final_width = target.height * image_aspect
        offset_x = (target.width - final_width) / 2

    rect = DocumentRect(
        x=target.x + offset_x,
        y=target.y + offset_y,
        width=final_width,
        height=final_height,
    )
    return Placement(rect=rect, offset_x=offset_x, offset_y=offset_y)
