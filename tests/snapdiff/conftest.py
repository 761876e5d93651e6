from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pytest
from PIL import Image, ImageDraw

from snapdiff.capture import ElementBox
from snapdiff.errors import ElementNotFoundError, MultipleElementsError
from snapdiff.storage import ReferenceKey


def png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class FakeScreenshotSource:
    """Serves a fixed page image; selectors map to element boxes."""

    def __init__(
        self,
        page: Image.Image,
        boxes: dict[str, list[ElementBox]],
        viewport: tuple[int, int] | None = None,
    ) -> None:
        self.page = page
        self.boxes = boxes
        self.viewport = viewport or page.size
        self.absolute_requests: list[bool] = []

    def take_screenshot(self) -> bytes:
        return png_bytes(self.page)

    def viewport_size(self) -> tuple[int, int]:
        return self.viewport

    def element_box(self, selector: str, absolute: bool) -> ElementBox:
        self.absolute_requests.append(absolute)
        found = self.boxes.get(selector, [])
        if not found:
            raise ElementNotFoundError(selector)
        if len(found) > 1:
            raise MultipleElementsError(selector, len(found))
        return found[0]


class InMemoryReferenceStore:
    def __init__(self) -> None:
        self.images: dict[ReferenceKey, bytes] = {}
        self.saves: list[tuple[ReferenceKey, bytes]] = []

    def exists(self, key: ReferenceKey) -> bool:
        return key in self.images

    def load(self, key: ReferenceKey) -> bytes:
        return self.images[key]

    def save(self, key: ReferenceKey, data: bytes) -> None:
        self.saves.append((key, data))
        self.images[key] = data


class RecordingArtifactSink:
    def __init__(self) -> None:
        self.failures: list[tuple[ReferenceKey, bytes, bytes | None, dict[str, Any]]] = []
        self.temporary: list[ReferenceKey] = []
        self.purges = 0

    def write_failure(
        self,
        key: ReferenceKey,
        candidate_png: bytes,
        diff_png: bytes | None,
        summary: dict[str, Any],
    ) -> None:
        self.failures.append((key, candidate_png, diff_png, summary))

    def write_temporary(self, key: ReferenceKey, data: bytes) -> Path:
        self.temporary.append(key)
        return Path("/dev/null")

    def purge_temporary(self) -> int:
        self.purges += 1
        return len(self.temporary)


def make_page(marker: tuple[int, int, int, int] | None = None) -> Image.Image:
    page = Image.new("RGBA", (200, 150), (240, 240, 240, 255))
    draw = ImageDraw.Draw(page)
    draw.rectangle((20, 30, 119, 89), fill=(30, 60, 90, 255))
    if marker is not None:
        draw.rectangle((40, 40, 49, 49), fill=marker)
    return page


@pytest.fixture
def store() -> InMemoryReferenceStore:
    return InMemoryReferenceStore()


@pytest.fixture
def sink() -> RecordingArtifactSink:
    return RecordingArtifactSink()


@pytest.fixture
def make_source():
    def _make_source(
        marker: tuple[int, int, int, int] | None = None,
        boxes: dict[str, list[ElementBox]] | None = None,
        viewport: tuple[int, int] | None = None,
        page: Image.Image | None = None,
    ) -> FakeScreenshotSource:
        if boxes is None:
            boxes = {"#panel": [ElementBox(x=20, y=30, width=100, height=60)]}
        return FakeScreenshotSource(page or make_page(marker), boxes, viewport)

    return _make_source
