"""Unit tests for aspect-fit placement."""

import pytest

from signature_engine.core.geometry import InvalidGeometry
from signature_engine.core.placement import fit
from signature_engine.models.signing import DocumentRect


class TestFit:
    """Test cases for fit."""

    def test_wide_image_in_square_target(self):
        """A 4:1 image in a 100x100 box is width-bound and vertically centered."""
        target = DocumentRect(x=0, y=0, width=100, height=100)
        placement = fit(target, 4.0)

        assert placement.rect.width == pytest.approx(100)
        assert placement.rect.height == pytest.approx(25)
        assert placement.offset_y == pytest.approx(37.5)
        assert placement.offset_x == 0

    def test_tall_image_is_height_bound(self):
        """A 1:2 image in a 100x30 box is centered horizontally."""
        target = DocumentRect(x=50, y=50, width=100, height=30)
        placement = fit(target, 0.5)

        assert placement.rect.height == pytest.approx(30)
        assert placement.rect.width == pytest.approx(15)
        assert placement.offset_x == pytest.approx(42.5)
        assert placement.offset_y == 0
        assert placement.rect.x == pytest.approx(92.5)
        assert placement.rect.y == pytest.approx(50)

    def test_equal_aspect_fills_target_with_zero_offsets(self):
        """Matching aspects take the height-bound branch with no offsets."""
        target = DocumentRect(x=50, y=50, width=100, height=30)
        placement = fit(target, 100 / 30)

        assert placement.offset_x == pytest.approx(0)
        assert placement.offset_y == 0
        assert placement.rect.width == pytest.approx(100)
        assert placement.rect.height == pytest.approx(30)

    @pytest.mark.parametrize("aspect", [0.1, 0.75, 1.0, 1.5, 3.0, 12.0])
    @pytest.mark.parametrize(
        "target",
        [
            DocumentRect(x=0, y=0, width=100, height=100),
            DocumentRect(x=10, y=20, width=200, height=40),
            DocumentRect(x=5, y=5, width=30, height=90),
        ],
    )
    def test_stays_within_target_and_centered(self, target, aspect):
        """Result never exceeds the target and is centered on the shrunk axis."""
        placement = fit(target, aspect)
        rect = placement.rect

        assert rect.width <= target.width + 1e-9
        assert rect.height <= target.height + 1e-9
        assert placement.offset_x * 2 + rect.width == pytest.approx(target.width)
        assert placement.offset_y * 2 + rect.height == pytest.approx(target.height)
        assert rect.width / rect.height == pytest.approx(aspect)

        if aspect == pytest.approx(target.aspect_ratio):
            assert placement.offset_x == pytest.approx(0)
            assert placement.offset_y == pytest.approx(0)
        else:
            assert (placement.offset_x == 0) != (placement.offset_y == 0)

    @pytest.mark.parametrize("aspect", [0, -1.0, float("inf"), float("nan")])
    def test_invalid_aspect_rejected(self, aspect):
        """Non-positive or non-finite aspect ratios are rejected."""
        with pytest.raises(InvalidGeometry):
            fit(DocumentRect(x=0, y=0, width=10, height=10), aspect)
