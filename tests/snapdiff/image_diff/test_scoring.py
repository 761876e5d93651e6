from __future__ import annotations

import pytest

from snapdiff.image_diff.scoring import score, union_area
from snapdiff.image_diff.types import BoundaryRect, RegionKind


def _size(left: int, top: int, right: int, bottom: int) -> BoundaryRect:
    return BoundaryRect(left=left, top=top, right=right, bottom=bottom, kind=RegionKind.SIZE)


class TestUnionArea:
    def test_overlap_counted_once(self):
        assert union_area([_size(0, 0, 5, 5), _size(3, 3, 8, 8)], (10, 10)) == 46

    def test_clipped_to_canvas(self):
        assert union_area([_size(5, 5, 20, 20)], (10, 10)) == 25


class TestScore:
    def test_identical(self):
        result = score(0.0, [], (100, 100))
        assert result.composite == 0.0
        assert result.passed

    def test_size_mismatch_only(self):
        result = score(0.0, [_size(100, 0, 120, 100)], (120, 100))
        assert result.area_diff == pytest.approx(16.6667, abs=1e-4)
        assert result.content_diff == 0.0
        assert result.composite == 16.67
        assert not result.passed

    def test_content_scaled_by_remaining_area(self):
        result = score(10.0, [_size(0, 0, 50, 100)], (100, 100))
        assert result.area_diff == 50.0
        assert result.content_diff == 5.0
        assert result.composite == 55.0

    def test_area_never_exceeds_hundred(self):
        rects = [_size(0, 0, 10, 10), _size(0, 0, 10, 10), _size(2, 2, 6, 6)]
        result = score(0.0, rects, (10, 10))
        assert result.area_diff == 100.0
        assert result.composite == 100.0

    def test_zero_area_canvas(self):
        result = score(0.0, [], (0, 0))
        assert result.area_diff == 0.0
        assert result.passed

    def test_verdict_uses_unrounded_value(self):
        result = score(0.012, [], (10, 10), max_difference=0.01)
        assert result.composite == 0.01
        assert result.raw_composite == pytest.approx(0.012)
        assert not result.passed

    def test_equal_to_threshold_passes(self):
        assert score(0.5, [], (10, 10), max_difference=0.5).passed
