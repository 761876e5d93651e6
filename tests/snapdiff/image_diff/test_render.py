from __future__ import annotations

from snapdiff.config import BlendStep, OverlayColor
from snapdiff.image_diff.raster import RasterImage
from snapdiff.image_diff.render import render_diff
from snapdiff.image_diff.types import BoundaryRect, Offset, RegionKind

WHITE = (255, 255, 255, 255)


def _pixel(img: RasterImage, x: int, y: int) -> tuple[int, ...]:
    return tuple(int(v) for v in img.pixels[y, x])


class TestRenderDiff:
    def test_canvas_is_larger_of_both(self):
        rendered = render_diff(
            RasterImage.blank(20, 10, WHITE), RasterImage.blank(10, 20, WHITE), Offset(), []
        )
        assert rendered.size == (20, 20)

    def test_background_is_opaque_white(self):
        transparent = RasterImage.blank(8, 8)
        rendered = render_diff(transparent, transparent, Offset(), [])
        assert _pixel(rendered, 4, 4) == WHITE

    def test_content_region_is_tinted_red(self):
        img = RasterImage.blank(20, 20, WHITE)
        region = BoundaryRect(left=5, top=5, right=10, bottom=10, kind=RegionKind.CONTENT)
        rendered = render_diff(img, img, Offset(), [region])
        red, green, blue, alpha = _pixel(rendered, 7, 7)
        assert red > green
        assert green == blue
        assert alpha == 255
        assert _pixel(rendered, 0, 0) == WHITE
        # right and bottom edges are exclusive
        assert _pixel(rendered, 10, 10) == WHITE
        assert _pixel(rendered, 9, 9) != WHITE

    def test_size_region_uses_its_own_color(self):
        img = RasterImage.blank(20, 20, WHITE)
        region = BoundaryRect(left=0, top=0, right=4, bottom=20, kind=RegionKind.SIZE)
        rendered = render_diff(img, img, Offset(), [region])
        red, green, blue, _ = _pixel(rendered, 1, 1)
        assert red == green == blue
        assert red < 255

    def test_custom_colors(self):
        img = RasterImage.blank(10, 10, WHITE)
        region = BoundaryRect(left=0, top=0, right=10, bottom=10, kind=RegionKind.CONTENT)
        colors = {RegionKind.CONTENT: OverlayColor(red=0, green=0, blue=255, alpha=255)}
        rendered = render_diff(img, img, Offset(), [region], colors=colors)
        assert _pixel(rendered, 5, 5) == (0, 0, 255, 255)

    def test_degenerate_region_is_not_drawn(self):
        img = RasterImage.blank(10, 10, WHITE)
        region = BoundaryRect(left=3, top=3, right=3, bottom=8, kind=RegionKind.CONTENT)
        rendered = render_diff(img, img, Offset(), [region])
        assert rendered == RasterImage.blank(10, 10, WHITE)

    def test_reference_drawn_at_offset(self):
        black = RasterImage.blank(5, 5, (0, 0, 0, 255))
        candidate = RasterImage.blank(10, 5)
        blend = (BlendStep(layer="reference", opacity=1.0),)
        rendered = render_diff(black, candidate, Offset(3, 0), [], blend=blend)
        assert _pixel(rendered, 2, 2) == WHITE
        assert _pixel(rendered, 3, 2) == (0, 0, 0, 255)
        assert _pixel(rendered, 7, 2) == (0, 0, 0, 255)
        assert _pixel(rendered, 8, 2) == WHITE

    def test_deterministic(self):
        reference = RasterImage.blank(12, 12, (10, 200, 30, 255))
        candidate = RasterImage.blank(14, 10, (200, 10, 30, 255))
        regions = [BoundaryRect(left=1, top=1, right=6, bottom=6)]
        first = render_diff(reference, candidate, Offset(), regions)
        assert first == render_diff(reference, candidate, Offset(), regions)
