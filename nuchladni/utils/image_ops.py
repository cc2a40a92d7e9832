from __future__ import annotations

import base64
import io
from typing import Protocol, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

Point2D = Tuple[float, float]
RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]


class Surface(Protocol):
    """What the renderer needs from a 2D drawing target."""

    @property
    def size(self) -> Tuple[int, int]: ...

    def resize(self, width: int, height: int) -> None: ...

    def clear(self) -> None: ...

    def fill_polygon(self, points: Sequence[Point2D], fill: RGB, outline: RGBA | None = None) -> None: ...


class PilSurface:
    """Pillow image used as a drawing surface.

    Outlines are alpha-blended over the fill, like a translucent canvas stroke.
    """

    def __init__(self, width: int, height: int, bg_color: RGB = (0, 0, 0)):
        self.bg_color = tuple(bg_color)
        self.image = Image.new("RGB", (1, 1), color=self.bg_color)
        self._draw = ImageDraw.Draw(self.image, "RGBA")
        self.resize(width, height)

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"surface size must be positive, got {width}x{height}")
        self.image = Image.new("RGB", (int(width), int(height)), color=self.bg_color)
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    def clear(self) -> None:
        self._draw.rectangle((0, 0, self.image.width, self.image.height), fill=self.bg_color)

    def fill_polygon(self, points: Sequence[Point2D], fill: RGB, outline: RGBA | None = None) -> None:
        pts = [(float(x), float(y)) for x, y in points]
        self._draw.polygon(pts, fill=tuple(fill))
        if outline is not None:
            self._draw.line(pts + pts[:1], fill=tuple(outline), width=1)

    def to_array(self) -> np.ndarray:
        return np.array(self.image, dtype=np.uint8)

    def copy(self) -> Image.Image:
        return self.image.copy()


def encode_png_base64(img: Image.Image) -> str:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode()
