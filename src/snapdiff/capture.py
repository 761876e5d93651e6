from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from snapdiff.image_diff.raster import RasterImage

logger = logging.getLogger(__name__)


class ElementBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    width: int = Field(ge=0)
    height: int = Field(ge=0)


class ScreenshotSource(Protocol):
    def take_screenshot(self) -> bytes: ...

    def viewport_size(self) -> tuple[int, int]: ...

    def element_box(self, selector: str, absolute: bool) -> ElementBox:
        """Locate exactly one element.

        ``absolute`` selects page coordinates; otherwise the element is
        scrolled into view and viewport coordinates are returned. Raises
        ``ElementNotFoundError`` or ``MultipleElementsError``.
        """
        ...


def viewport_size_string(size: tuple[int, int]) -> str:
    width, height = size
    return f"{width}x{height}"


def capture_element(
    source: ScreenshotSource, selector: str, full_screenshots: bool = True
) -> RasterImage:
    box = source.element_box(selector, absolute=full_screenshots)
    viewport = source.viewport_size()

    screenshot = RasterImage.from_bytes(source.take_screenshot(), source="screenshot")
    # device pixel ratio may make the raw screenshot larger than the viewport
    screenshot = screenshot.resize(*viewport)

    logger.debug(
        "capture_element: cropping %s",
        selector,
        extra={"box": box.model_dump(), "viewport": viewport_size_string(viewport)},
    )
    return screenshot.crop(box.x, box.y, box.width, box.height)
