from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from .types import BoundaryRect, Score

DEFAULT_MAX_DIFFERENCE = 0.01


def union_area(rects: Iterable[BoundaryRect], canvas_size: tuple[int, int]) -> int:
    """Number of canvas pixels covered by at least one rectangle."""
    width, height = canvas_size
    covered = np.zeros((height, width), dtype=bool)
    for rect in rects:
        top, bottom = max(0, rect.top), max(0, rect.bottom)
        left, right = max(0, rect.left), max(0, rect.right)
        covered[top:bottom, left:right] = True
    return int(covered.sum())


def score(
    content_percentage: float,
    size_rects: Iterable[BoundaryRect],
    canvas_size: tuple[int, int],
    max_difference: float = DEFAULT_MAX_DIFFERENCE,
) -> Score:
    width, height = canvas_size
    canvas_area = width * height

    if canvas_area > 0:
        area_diff = 100.0 * union_area(size_rects, canvas_size) / canvas_area
    else:
        area_diff = 0.0

    # pixels outside the overlap cannot also register a content difference
    content_diff = content_percentage * (100.0 - area_diff) / 100.0
    raw_composite = content_diff + area_diff

    return Score(
        area_diff=area_diff,
        content_diff=content_diff,
        raw_composite=raw_composite,
        composite=round(raw_composite, 2),
        max_difference=max_difference,
        passed=raw_composite <= max_difference,
    )
