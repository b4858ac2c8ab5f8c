"""Logical-resolution RGB frame buffer and the primitives the renderers draw with."""

from __future__ import annotations

from functools import lru_cache

import numpy as np
from PIL import Image, ImageDraw, ImageFont

Colour = tuple[int, int, int]

WHITE: Colour = (255, 255, 255)
BLACK: Colour = (0, 0, 0)


class FrameBuffer:
    """Half-open rectangles, clipped to the frame; out-of-range pixels are ignored."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("frame dimensions must be positive")
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)

    def clear(self, colour: Colour = BLACK) -> None:
        self.pixels[:, :] = colour

    def pixel(self, x: int, y: int, colour: Colour) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self.pixels[y, x] = colour

    def rect(self, x1: int, y1: int, x2: int, y2: int, colour: Colour) -> None:
        cx1, cy1, cx2, cy2 = self._clip(x1, y1, x2, y2)
        if cx1 >= cx2 or cy1 >= cy2:
            return
        self.pixels[cy1:cy2, cx1:cx2] = colour

    def rect_gradient(self, x1: int, y1: int, x2: int, y2: int, colour: Colour) -> None:
        """Every third row one component drops by one, cycling R, G, B, floored at 0."""
        cx1, cy1, cx2, cy2 = self._clip(x1, y1, x2, y2)
        if cx1 >= cx2 or cy1 >= cy2:
            return
        bands = (np.arange(cy1, cy2) - y1) // 3
        steps = (bands[:, None] + 2 - np.arange(3)[None, :]) // 3
        rows = np.clip(np.asarray(colour, dtype=np.int32)[None, :] - steps, 0, 255).astype(np.uint8)
        self.pixels[cy1:cy2, cx1:cx2] = rows[:, None, :]

    def text(self, x: int, y: int, text: str, colour: Colour = WHITE) -> None:
        mask = _text_mask(_printable(text))
        height, width = mask.shape
        cx1, cy1, cx2, cy2 = self._clip(x, y, x + width, y + height)
        if cx1 >= cx2 or cy1 >= cy2:
            return
        visible = mask[cy1 - y : cy2 - y, cx1 - x : cx2 - x]
        self.pixels[cy1:cy2, cx1:cx2][visible] = colour

    def text_width(self, text: str) -> int:
        return _text_mask(_printable(text)).shape[1]

    def _clip(self, x1: int, y1: int, x2: int, y2: int) -> tuple[int, int, int, int]:
        return (
            max(int(x1), 0),
            max(int(y1), 0),
            min(int(x2), self.width),
            min(int(y2), self.height),
        )


def _printable(text: str) -> str:
    return "".join(ch for ch in text if 32 <= ord(ch) < 128)


@lru_cache(maxsize=1)
def _font() -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    return ImageFont.load_default()


@lru_cache(maxsize=256)
def _text_mask(text: str) -> np.ndarray:
    font = _font()
    _left, _top, right, bottom = font.getbbox(text) if text else (0, 0, 0, 0)
    image = Image.new("L", (max(int(right), 1), max(int(bottom), 1)), 0)
    if text:
        ImageDraw.Draw(image).text((0, 0), text, fill=255, font=font)
    return np.asarray(image) > 127
