from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from snapdiff.errors import ImageDecodeError

WHITE = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


class RasterImage:
    """Decoded RGBA image backed by a read-only ``(height, width, 4)`` uint8 array.

    Transform operations never modify the receiver; they return a new image.
    """

    __slots__ = ("_pixels", "source")

    def __init__(self, pixels: np.ndarray, source: str | None = None) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"expected an (h, w, 4) array, got shape {pixels.shape}")
        pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
        if pixels.flags.writeable:
            pixels = pixels.copy()
            pixels.setflags(write=False)
        self._pixels = pixels
        self.source = source

    @classmethod
    def from_pil(cls, img: Image.Image, source: str | None = None) -> RasterImage:
        rgba = img if img.mode == "RGBA" else img.convert("RGBA")
        try:
            return cls(np.asarray(rgba, dtype=np.uint8), source=source)
        finally:
            if rgba is not img:
                rgba.close()

    @classmethod
    def from_bytes(cls, data: bytes, source: str = "<bytes>") -> RasterImage:
        try:
            img = Image.open(io.BytesIO(data))
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageDecodeError(source, str(e)) from e
        try:
            img.load()
            return cls.from_pil(img, source=source)
        except (OSError, ValueError) as e:
            raise ImageDecodeError(source, str(e)) from e
        finally:
            img.close()

    @classmethod
    def open(cls, path: str | Path) -> RasterImage:
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise ImageDecodeError(str(path), str(e)) from e
        return cls.from_bytes(data, source=str(path))

    @classmethod
    def blank(
        cls, width: int, height: int, color: tuple[int, int, int, int] = TRANSPARENT
    ) -> RasterImage:
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = color
        return cls(pixels)

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_pil(self) -> Image.Image:
        if self.area == 0:
            return Image.new("RGBA", self.size)
        return Image.fromarray(np.array(self._pixels))

    def to_png_bytes(self) -> bytes:
        buf = io.BytesIO()
        with self.to_pil() as img:
            img.save(buf, format="PNG")
        return buf.getvalue()

    def save(self, path: str | Path) -> None:
        with self.to_pil() as img:
            img.save(path, "PNG")

    def resize(self, width: int, height: int) -> RasterImage:
        if self.area == 0:
            return RasterImage.blank(0, 0)
        width = max(1, int(width))
        height = max(1, int(height))
        if (width, height) == self.size:
            return self
        with self.to_pil() as img:
            with img.resize((width, height), Image.BILINEAR) as resized:
                return RasterImage.from_pil(resized, source=self.source)

    def downscale(self, factor: int) -> RasterImage:
        return self.resize(self.width // factor, self.height // factor)

    def crop(self, left: int, top: int, width: int, height: int) -> RasterImage:
        x0 = min(max(0, left), self.width)
        y0 = min(max(0, top), self.height)
        x1 = min(max(x0, left + width), self.width)
        y1 = min(max(y0, top + height), self.height)
        return RasterImage(self._pixels[y0:y1, x0:x1].copy(), source=self.source)

    def extend_canvas(
        self, width: int, height: int, fill: tuple[int, int, int, int] = TRANSPARENT
    ) -> RasterImage:
        width = max(width, self.width)
        height = max(height, self.height)
        if (width, height) == self.size:
            return self
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = fill
        pixels[: self.height, : self.width] = self._pixels
        return RasterImage(pixels, source=self.source)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return np.array_equal(self._pixels, other._pixels)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height}, source={self.source!r})"
