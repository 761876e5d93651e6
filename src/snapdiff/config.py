from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})([0-9a-fA-F]{2})?$")


class OverlayColor(BaseModel):
    """RGBA overlay colour; ``alpha`` is opacity (0 transparent, 255 opaque)."""

    model_config = ConfigDict(frozen=True)

    red: int = Field(ge=0, le=255)
    green: int = Field(ge=0, le=255)
    blue: int = Field(ge=0, le=255)
    alpha: int = Field(default=255, ge=0, le=255)

    @model_validator(mode="before")
    @classmethod
    def _parse_shorthand(cls, value: Any) -> Any:
        if isinstance(value, str):
            match = _HEX_COLOR.match(value.strip())
            if match is None:
                raise ValueError(f"invalid color {value!r}, expected RRGGBB or RRGGBBAA")
            rgb, alpha = match.groups()
            return {
                "red": int(rgb[0:2], 16),
                "green": int(rgb[2:4], 16),
                "blue": int(rgb[4:6], 16),
                "alpha": int(alpha, 16) if alpha else 255,
            }
        if isinstance(value, (tuple, list)):
            if len(value) not in (3, 4):
                raise ValueError("color tuples need 3 or 4 components")
            return dict(zip(("red", "green", "blue", "alpha"), value))
        return value

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, self.alpha)

    def to_hex(self) -> str:
        return "{:02X}{:02X}{:02X}{:02X}".format(*self.as_tuple())


class BlendStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    layer: Literal["candidate", "reference"]
    opacity: float = Field(ge=0.0, le=1.0)


DEFAULT_BLEND_STEPS: tuple[BlendStep, ...] = (
    BlendStep(layer="candidate", opacity=0.8),
    BlendStep(layer="reference", opacity=0.8),
    BlendStep(layer="candidate", opacity=0.4),
    BlendStep(layer="reference", opacity=0.1),
)


class RegressionConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    # failure threshold, in percent
    max_difference: float = Field(default=0.01, ge=0.0, alias="maxDifference")
    automatic_cleanup: bool = Field(default=True, alias="automaticCleanup")
    full_screenshots: bool = Field(default=True, alias="fullScreenshots")
    reposition_image: bool = Field(default=False, alias="repositionImage")
    alignment_scale: int = Field(default=20, ge=1, alias="alignmentScale")
    pixel_threshold: float = Field(default=0.0, ge=0.0, le=100.0, alias="pixelThreshold")
    include_alpha: bool = Field(default=False, alias="includeAlpha")
    color_content: OverlayColor = Field(
        default=OverlayColor(red=0xEE, green=0x00, blue=0x00, alpha=0x38),
        alias="colorContent",
    )
    color_size: OverlayColor = Field(
        default=OverlayColor(red=0x88, green=0x88, blue=0x88, alpha=0x99),
        alias="colorSize",
    )
    blend: tuple[BlendStep, ...] = DEFAULT_BLEND_STEPS
