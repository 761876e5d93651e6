from __future__ import annotations

from enum import StrEnum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, model_validator


class Offset(NamedTuple):
    dx: int = 0
    dy: int = 0

    def scaled(self, factor: int) -> Offset:
        return Offset(self.dx * factor, self.dy * factor)


class RegionKind(StrEnum):
    CONTENT = "content"
    SIZE = "size"


class BoundaryRect(BaseModel):
    """Pixel rectangle; ``right`` and ``bottom`` are exclusive."""

    model_config = ConfigDict(frozen=True)

    left: int
    top: int
    right: int
    bottom: int
    kind: RegionKind = RegionKind.CONTENT

    @model_validator(mode="after")
    def _check_order(self) -> BoundaryRect:
        if self.right < self.left or self.bottom < self.top:
            raise ValueError(
                f"inverted rectangle ({self.left}, {self.top}, {self.right}, {self.bottom})"
            )
        return self

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_degenerate(self) -> bool:
        return self.left >= self.right or self.top >= self.bottom

    def as_box(self) -> tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)


class Score(BaseModel):
    model_config = ConfigDict(frozen=True)

    area_diff: float
    content_diff: float
    raw_composite: float
    composite: float
    max_difference: float
    passed: bool


class ComparisonResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    percentage: float
    passed: bool
    regions: tuple[BoundaryRect, ...] = ()
    offset: Offset = Offset()
    score: Score
    changed_pixels: int
    width: int
    height: int
    reference_width: int
    reference_height: int
    candidate_width: int
    candidate_height: int
    diff_png: bytes | None = None

    @property
    def content_regions(self) -> tuple[BoundaryRect, ...]:
        return tuple(r for r in self.regions if r.kind == RegionKind.CONTENT)

    @property
    def size_regions(self) -> tuple[BoundaryRect, ...]:
        return tuple(r for r in self.regions if r.kind == RegionKind.SIZE)
