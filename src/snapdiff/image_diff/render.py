from __future__ import annotations

from collections.abc import Iterable, Sequence

from PIL import Image, ImageDraw

from snapdiff.config import DEFAULT_BLEND_STEPS, BlendStep, OverlayColor, RegressionConfig

from .raster import WHITE, RasterImage
from .types import BoundaryRect, Offset, RegionKind

_DEFAULTS = RegressionConfig()

DEFAULT_COLORS: dict[RegionKind, OverlayColor] = {
    RegionKind.CONTENT: _DEFAULTS.color_content,
    RegionKind.SIZE: _DEFAULTS.color_size,
}

# size strips go underneath so content highlights stay on top
_OVERLAY_ORDER = (RegionKind.SIZE, RegionKind.CONTENT)


def _faded_layer(
    img: Image.Image, canvas_size: tuple[int, int], position: Offset, opacity: float
) -> Image.Image:
    layer = Image.new("RGBA", canvas_size, (0, 0, 0, 0))
    layer.paste(img, (position.dx, position.dy))
    alpha = layer.getchannel("A")
    faded = alpha.point(lambda a: round(a * opacity))
    layer.putalpha(faded)
    alpha.close()
    faded.close()
    return layer


def _draw_overlay(
    canvas: Image.Image, rects: Iterable[BoundaryRect], color: OverlayColor
) -> Image.Image:
    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for rect in rects:
        box = (rect.left, rect.top, rect.right - 1, rect.bottom - 1)
        draw.rectangle(box, fill=color.as_tuple())
    try:
        return Image.alpha_composite(canvas, overlay)
    finally:
        overlay.close()


def render_diff(
    reference: RasterImage,
    candidate: RasterImage,
    offset: Offset,
    regions: Sequence[BoundaryRect],
    colors: dict[RegionKind, OverlayColor] | None = None,
    blend: Sequence[BlendStep] = DEFAULT_BLEND_STEPS,
) -> RasterImage:
    """Ghosted overlay of both images with every region highlighted.

    The candidate sits at the canvas origin and the reference at ``offset``.
    """
    colors = {**DEFAULT_COLORS, **(colors or {})}
    offset = Offset(*offset)
    canvas_size = (
        max(reference.width, candidate.width),
        max(reference.height, candidate.height),
    )

    sources = {
        "candidate": (candidate.to_pil(), Offset()),
        "reference": (reference.to_pil(), offset),
    }
    canvas = Image.new("RGBA", canvas_size, WHITE)
    try:
        for step in blend:
            img, position = sources[step.layer]
            layer = _faded_layer(img, canvas_size, position, step.opacity)
            blended = Image.alpha_composite(canvas, layer)
            layer.close()
            canvas.close()
            canvas = blended

        for kind in _OVERLAY_ORDER:
            rects = [r for r in regions if r.kind == kind and not r.is_degenerate]
            if not rects:
                continue
            highlighted = _draw_overlay(canvas, rects, colors[kind])
            canvas.close()
            canvas = highlighted

        return RasterImage.from_pil(canvas)
    finally:
        canvas.close()
        for img, _ in sources.values():
            img.close()
