from __future__ import annotations

import logging

from .pixel_diff import difference_percentage
from .raster import RasterImage
from .types import Offset

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 20


def default_window(reference: RasterImage, candidate: RasterImage) -> tuple[Offset, Offset]:
    """Offsets that slide the smaller image across the larger one, per axis."""
    dw = candidate.width - reference.width
    dh = candidate.height - reference.height
    return Offset(min(0, dw), min(0, dh)), Offset(max(0, dw), max(0, dh))


def find_best_offset(
    reference: RasterImage,
    candidate: RasterImage,
    start: Offset | None = None,
    cap: Offset | None = None,
    include_alpha: bool = False,
) -> Offset:
    """Exhaustive search for the offset with the lowest difference.

    Offsets are scanned with ``dx`` outer and ``dy`` inner, both ascending;
    only a strictly lower difference replaces the current best, so the first
    offset wins ties.
    """
    default_start, default_cap = default_window(reference, candidate)
    start = Offset(*start) if start is not None else default_start
    cap = Offset(*cap) if cap is not None else default_cap

    best_offset = Offset()
    best_match: float | None = None
    for dx in range(start.dx, cap.dx + 1):
        for dy in range(start.dy, cap.dy + 1):
            result = difference_percentage(reference, candidate, Offset(dx, dy), include_alpha)
            if best_match is None or result < best_match:
                best_match = result
                best_offset = Offset(dx, dy)
    return best_offset


def align(
    reference: RasterImage,
    candidate: RasterImage,
    scale: int = DEFAULT_SCALE,
    include_alpha: bool = False,
) -> Offset:
    """Two-phase offset search: coarse on downscaled copies, then refine at full size."""
    start, cap = default_window(reference, candidate)

    smallest = min(reference.width, reference.height, candidate.width, candidate.height)
    if scale <= 1 or smallest < scale:
        offset = find_best_offset(reference, candidate, start, cap, include_alpha)
        logger.debug("align: full search picked offset %s", offset, extra={"scale": scale})
        return offset

    small_reference = reference.downscale(scale)
    small_candidate = candidate.downscale(scale)
    coarse = find_best_offset(
        small_reference, small_candidate, include_alpha=include_alpha
    ).scaled(scale)
    del small_reference, small_candidate

    refine_start = Offset(max(start.dx, coarse.dx - scale), max(start.dy, coarse.dy - scale))
    refine_cap = Offset(min(cap.dx, coarse.dx + scale), min(cap.dy, coarse.dy + scale))
    if refine_start.dx > refine_cap.dx or refine_start.dy > refine_cap.dy:
        refine_start, refine_cap = start, cap

    offset = find_best_offset(reference, candidate, refine_start, refine_cap, include_alpha)
    logger.debug(
        "align: picked offset %s (coarse %s)",
        offset,
        coarse,
        extra={"scale": scale},
    )
    return offset
