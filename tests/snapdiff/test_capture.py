from __future__ import annotations

import pytest
from PIL import Image

from snapdiff.capture import ElementBox, capture_element, viewport_size_string
from snapdiff.errors import ElementNotFoundError, MultipleElementsError


class TestCaptureElement:
    def test_crops_element(self, make_source):
        captured = capture_element(make_source(), "#panel")
        assert captured.size == (100, 60)
        assert tuple(captured.pixels[0, 0]) == (30, 60, 90, 255)
        assert tuple(captured.pixels[59, 99]) == (30, 60, 90, 255)

    def test_screenshot_scaled_to_viewport(self, make_source):
        page = Image.new("RGBA", (400, 300), (240, 240, 240, 255))
        page.paste((30, 60, 90, 255), (40, 60, 240, 180))
        source = make_source(page=page, viewport=(200, 150))
        captured = capture_element(source, "#panel")
        assert captured.size == (100, 60)
        assert tuple(captured.pixels[30, 50]) == (30, 60, 90, 255)

    def test_viewport_relative_request(self, make_source):
        source = make_source()
        capture_element(source, "#panel", full_screenshots=False)
        assert source.absolute_requests == [False]

    def test_missing_element(self, make_source):
        with pytest.raises(ElementNotFoundError):
            capture_element(make_source(), "#nope")

    def test_multiple_elements(self, make_source):
        box = ElementBox(x=0, y=0, width=5, height=5)
        source = make_source(boxes={".item": [box, box]})
        with pytest.raises(MultipleElementsError) as excinfo:
            capture_element(source, ".item")
        assert excinfo.value.count == 2

    def test_viewport_size_string(self):
        assert viewport_size_string((1280, 800)) == "1280x800"
