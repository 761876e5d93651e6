from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .raster import RasterImage
from .types import BoundaryRect, Offset

# a pixel counts as changed once its distance (0-100) exceeds this
PIXEL_THRESHOLD = 0.0

_MAX_CHANNEL_ERROR = 255.0 * 255.0


@dataclass(frozen=True)
class PixelDifference:
    """Per-pixel comparison of a candidate against an offset reference.

    ``mask`` and ``distances`` are laid out on the canvas, which is the
    candidate's frame grown to the larger of both images. The reference is
    placed on it at ``offset``. Only ``overlap`` holds compared pixels.
    """

    mask: np.ndarray
    distances: np.ndarray
    overlap: BoundaryRect
    offset: Offset
    percentage: float
    changed_pixels: int

    @property
    def width(self) -> int:
        return int(self.mask.shape[1])

    @property
    def height(self) -> int:
        return int(self.mask.shape[0])

    @property
    def canvas_size(self) -> tuple[int, int]:
        return (self.width, self.height)


def canvas_size(reference: RasterImage, candidate: RasterImage) -> tuple[int, int]:
    return (max(reference.width, candidate.width), max(reference.height, candidate.height))


def overlap_rect(
    reference: RasterImage, candidate: RasterImage, offset: Offset = Offset()
) -> BoundaryRect:
    width, height = canvas_size(reference, candidate)
    x0 = min(max(0, offset.dx), width)
    y0 = min(max(0, offset.dy), height)
    x1 = max(x0, min(width, candidate.width, reference.width + offset.dx))
    y1 = max(y0, min(height, candidate.height, reference.height + offset.dy))
    return BoundaryRect(left=x0, top=y0, right=x1, bottom=y1)


def _overlap_distances(
    reference: RasterImage,
    candidate: RasterImage,
    overlap: BoundaryRect,
    offset: Offset,
    include_alpha: bool,
) -> np.ndarray:
    channels = 4 if include_alpha else 3
    cand = candidate.pixels[overlap.top : overlap.bottom, overlap.left : overlap.right, :channels]
    ref = reference.pixels[
        overlap.top - offset.dy : overlap.bottom - offset.dy,
        overlap.left - offset.dx : overlap.right - offset.dx,
        :channels,
    ]
    delta = cand.astype(np.int32) - ref.astype(np.int32)
    squared = np.einsum("ijk,ijk->ij", delta, delta).astype(np.float64)
    return squared * (100.0 / (channels * _MAX_CHANNEL_ERROR))


def difference_percentage(
    reference: RasterImage,
    candidate: RasterImage,
    offset: Offset = Offset(),
    include_alpha: bool = False,
) -> float:
    """Mean per-pixel distance over the overlap, without building a mask."""
    overlap = overlap_rect(reference, candidate, offset)
    if overlap.is_degenerate:
        return 0.0
    distances = _overlap_distances(reference, candidate, overlap, offset, include_alpha)
    return float(distances.mean())


def diff_pixels(
    reference: RasterImage,
    candidate: RasterImage,
    offset: Offset = Offset(),
    pixel_threshold: float = PIXEL_THRESHOLD,
    include_alpha: bool = False,
) -> PixelDifference:
    offset = Offset(*offset)
    width, height = canvas_size(reference, candidate)
    overlap = overlap_rect(reference, candidate, offset)

    distances = np.zeros((height, width), dtype=np.float64)
    mask = np.zeros((height, width), dtype=bool)
    percentage = 0.0

    if not overlap.is_degenerate:
        region = _overlap_distances(reference, candidate, overlap, offset, include_alpha)
        distances[overlap.top : overlap.bottom, overlap.left : overlap.right] = region
        mask[overlap.top : overlap.bottom, overlap.left : overlap.right] = (
            region > pixel_threshold
        )
        percentage = float(region.mean())

    distances.setflags(write=False)
    mask.setflags(write=False)

    return PixelDifference(
        mask=mask,
        distances=distances,
        overlap=overlap,
        offset=offset,
        percentage=percentage,
        changed_pixels=int(mask.sum()),
    )
