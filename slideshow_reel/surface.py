"""RGBA pixel surfaces and source-over drawing."""
from __future__ import annotations

from typing import Optional, Protocol, Tuple, runtime_checkable

import cv2
import numpy as np
from PIL import Image

from .fit import FitRect


@runtime_checkable
class PixelSource(Protocol):
    """Anything that can hand out straight-alpha RGBA pixels."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def read_pixels(self) -> np.ndarray: ...


def _is_opaque(arr: np.ndarray) -> bool:
    return bool(arr[..., 3].min() == 255)


def _premultiply(arr: np.ndarray) -> np.ndarray:
    """Return float32 copy of *arr* with RGB multiplied by alpha."""
    out = arr.astype(np.float32)
    out[..., :3] *= out[..., 3:4] / 255.0
    return out


def _scale(pixels: np.ndarray, w: int, h: int) -> np.ndarray:
    src_h, src_w = pixels.shape[:2]
    if (src_w, src_h) == (w, h):
        return pixels
    interp = cv2.INTER_AREA if (w < src_w and h < src_h) else cv2.INTER_LINEAR
    return cv2.resize(pixels, (w, h), interpolation=interp)


# Targets at least this large are scaled region-by-region when mostly hidden.
_CROP_MIN_PIXELS = 1 << 20


def _scaled_region(pixels, tw, th, x0, y0, x1, y1, prepare=None) -> np.ndarray:
    """Return ``[y0:y1, x0:x1]`` of *pixels* scaled to ``tw x th``.

    When only a small part of a large target is visible, just that part is
    resampled (bilinear) from the matching source window, so the memory use
    follows the visible area instead of the full scaled size.
    """
    src_h, src_w = pixels.shape[:2]
    visible = (x1 - x0) * (y1 - y0)
    if (
        tw * th < _CROP_MIN_PIXELS
        or visible * 4 >= tw * th
        or tw * 2 < src_w
        or th * 2 < src_h
    ):
        full = pixels if prepare is None else prepare(pixels)
        return _scale(full, tw, th)[y0:y1, x0:x1]

    sx, sy = src_w / tw, src_h / th
    cx0 = max(0, int(np.floor((x0 + 0.5) * sx - 0.5)) - 1)
    cy0 = max(0, int(np.floor((y0 + 0.5) * sy - 0.5)) - 1)
    cx1 = min(src_w, int(np.ceil((x1 - 0.5) * sx - 0.5)) + 2)
    cy1 = min(src_h, int(np.ceil((y1 - 0.5) * sy - 0.5)) + 2)
    window = np.ascontiguousarray(pixels[cy0:cy1, cx0:cx1])
    if prepare is not None:
        window = prepare(window)
    # Same pixel-centre mapping as cv2.resize, shifted into the window.
    m = np.array(
        [
            [sx, 0.0, (x0 + 0.5) * sx - 0.5 - cx0],
            [0.0, sy, (y0 + 0.5) * sy - 0.5 - cy0],
        ],
        dtype=np.float64,
    )
    return cv2.warpAffine(
        window,
        m,
        (x1 - x0, y1 - y0),
        flags=cv2.INTER_LINEAR | cv2.WARP_INVERSE_MAP,
        borderMode=cv2.BORDER_REPLICATE,
    )


def _composite(dst: np.ndarray, src_p: np.ndarray) -> None:
    """Source-over *src_p* (premultiplied float32) onto straight *dst* in place."""
    sa = src_p[..., 3:4] / 255.0
    da = dst[..., 3:4].astype(np.float32) / 255.0
    dst_p = dst[..., :3].astype(np.float32) * da
    inv = 1.0 - sa
    out_a = sa + da * inv
    out_p = src_p[..., :3] + dst_p * inv
    rgb = np.divide(out_p, out_a, out=np.zeros_like(out_p), where=out_a > 0)
    dst[..., :3] = np.clip(rgb + 0.5, 0, 255).astype(np.uint8)
    dst[..., 3:4] = np.clip(out_a * 255.0 + 0.5, 0, 255).astype(np.uint8)


class Surface:
    """Fixed-size transparent RGBA canvas.

    Surfaces are themselves pixel sources, so a composite slide can be
    drawn exactly like a decoded image.
    """

    def __init__(self, width: int, height: int, pixels: Optional[np.ndarray] = None):
        self._width = int(width)
        self._height = int(height)
        if pixels is None:
            pixels = np.zeros((self._height, self._width, 4), dtype=np.uint8)
        elif pixels.shape != (self._height, self._width, 4) or pixels.dtype != np.uint8:
            raise ValueError(
                f"pixels must be uint8 {self._height}x{self._width}x4, got "
                f"{pixels.dtype} {pixels.shape}"
            )
        self.pixels = pixels

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> Tuple[int, int]:
        return self._width, self._height

    def read_pixels(self) -> np.ndarray:
        return self.pixels

    def clear(self) -> None:
        self.pixels[...] = 0

    def copy(self) -> "Surface":
        return Surface(self._width, self._height, self.pixels.copy())

    def draw(
        self,
        src: PixelSource,
        x: float,
        y: float,
        w: float,
        h: float,
        clip: Optional[FitRect] = None,
    ) -> None:
        """Draw *src* scaled to ``w x h`` with its top-left at ``(x, y)``.

        Anything outside the surface, or outside *clip* when given, is
        discarded. Fully opaque source pixels replace what is underneath.
        """
        tw, th = int(round(w)), int(round(h))
        if tw <= 0 or th <= 0:
            return
        ox, oy = int(round(x)), int(round(y))

        bx0, by0, bx1, by1 = 0, 0, self._width, self._height
        if clip is not None:
            bx0 = max(bx0, int(round(clip.x)))
            by0 = max(by0, int(round(clip.y)))
            bx1 = min(bx1, int(round(clip.x + clip.w)))
            by1 = min(by1, int(round(clip.y + clip.h)))

        dx0, dy0 = max(bx0, ox), max(by0, oy)
        dx1, dy1 = min(bx1, ox + tw), min(by1, oy + th)
        if dx1 <= dx0 or dy1 <= dy0:
            return

        pixels = src.read_pixels()
        rx0, ry0, rx1, ry1 = dx0 - ox, dy0 - oy, dx1 - ox, dy1 - oy
        if _is_opaque(pixels):
            region = _scaled_region(pixels, tw, th, rx0, ry0, rx1, ry1)
            self.pixels[dy0:dy1, dx0:dx1] = region
            return
        region = _scaled_region(pixels, tw, th, rx0, ry0, rx1, ry1, prepare=_premultiply)
        _composite(self.pixels[dy0:dy1, dx0:dx1], region)

    def fill(self, src: PixelSource) -> None:
        """Stretch *src* over the whole surface."""
        self.draw(src, 0, 0, self._width, self._height)

    def to_rgb(self, background: Tuple[int, int, int] = (0, 0, 0)) -> np.ndarray:
        """Flatten onto a solid *background* and drop alpha."""
        if _is_opaque(self.pixels):
            return np.ascontiguousarray(self.pixels[..., :3])
        a = self.pixels[..., 3:4].astype(np.float32) / 255.0
        bg = np.asarray(background, dtype=np.float32).reshape(1, 1, 3)
        rgb = self.pixels[..., :3].astype(np.float32) * a + bg * (1.0 - a)
        return np.clip(rgb + 0.5, 0, 255).astype(np.uint8)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def __repr__(self) -> str:
        return f"Surface({self._width}x{self._height})"
