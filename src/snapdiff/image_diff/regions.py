from __future__ import annotations

from collections.abc import Iterable

import numpy as np
from scipy import ndimage

from .types import BoundaryRect, RegionKind

Box = tuple[int, int, int, int]

# 8-connectivity: diagonal neighbours belong to the same component
_EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)


def merge_boxes(boxes: Iterable[Box]) -> list[Box]:
    """Merge overlapping or touching boxes until none touch.

    The boxes are painted onto a mask and relabelled until the count stops
    changing. Merged boxes come back in raster order of each merged group's
    first component.
    """
    current = list(boxes)
    while current:
        width = max(box[2] for box in current)
        height = max(box[3] for box in current)
        painted = np.zeros((height, width), dtype=bool)
        for x0, y0, x1, y1 in current:
            painted[y0:y1, x0:x1] = True
        # exclusive edges: touching boxes paint 8-connected cells
        merged = component_boxes(painted)
        if len(merged) == len(current):
            return merged
        current = merged
    return current


def component_boxes(mask: np.ndarray) -> list[Box]:
    """Bounding box of every 8-connected component, in raster order."""
    if mask.size == 0 or not mask.any():
        return []
    labeled, _ = ndimage.label(mask, structure=_EIGHT_CONNECTED)
    boxes: list[Box] = []
    for found in ndimage.find_objects(labeled):
        if found is None:
            continue
        rows, cols = found
        boxes.append((int(cols.start), int(rows.start), int(cols.stop), int(rows.stop)))
    return boxes


def drop_degenerate(rects: Iterable[BoundaryRect]) -> list[BoundaryRect]:
    return [rect for rect in rects if not rect.is_degenerate]


def content_regions(mask: np.ndarray) -> list[BoundaryRect]:
    return drop_degenerate(
        BoundaryRect(left=x0, top=y0, right=x1, bottom=y1, kind=RegionKind.CONTENT)
        for x0, y0, x1, y1 in merge_boxes(component_boxes(mask))
    )


def size_regions(canvas_size: tuple[int, int], overlap: BoundaryRect) -> list[BoundaryRect]:
    """Canvas area outside the compared overlap, as non-overlapping strips.

    Left and right strips span the full canvas height; top and bottom strips
    span only the overlap's columns.
    """
    width, height = canvas_size
    if overlap.is_degenerate:
        boxes: list[Box] = [(0, 0, width, height)]
    else:
        boxes = [
            (0, 0, overlap.left, height),
            (overlap.right, 0, width, height),
            (overlap.left, 0, overlap.right, overlap.top),
            (overlap.left, overlap.bottom, overlap.right, height),
        ]
    return drop_degenerate(
        BoundaryRect(left=x0, top=y0, right=x1, bottom=y1, kind=RegionKind.SIZE)
        for x0, y0, x1, y1 in boxes
    )
