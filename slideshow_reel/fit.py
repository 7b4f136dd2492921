"""Scale-and-centre helpers mapping a source rectangle onto a canvas.

Both policies keep the source aspect ratio and centre the result:

``cover``
    fills the destination completely; one axis overflows and is clipped
    when drawn. Slides use this so no letterbox bars show while they move.
``contain``
    fits the whole source inside the destination, leaving bars.
"""
from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class FitRect(NamedTuple):
    x: float
    y: float
    w: float
    h: float


class FitMode(str, Enum):
    COVER = "cover"
    CONTAIN = "contain"


def _centered(src_w: float, src_h: float, dst_w: float, dst_h: float, scale: float) -> FitRect:
    w = src_w * scale
    h = src_h * scale
    return FitRect((dst_w - w) / 2, (dst_h - h) / 2, w, h)


def cover_fit(src_w: float, src_h: float, dst_w: float, dst_h: float) -> FitRect:
    """Return the rectangle that covers ``dst_w x dst_h`` with the source."""
    scale = max(dst_w / src_w, dst_h / src_h)
    return _centered(src_w, src_h, dst_w, dst_h, scale)


def contain_fit(src_w: float, src_h: float, dst_w: float, dst_h: float) -> FitRect:
    """Return the largest source rectangle that fits inside the destination."""
    scale = min(dst_w / src_w, dst_h / src_h)
    return _centered(src_w, src_h, dst_w, dst_h, scale)


def fit_rect(mode: FitMode, src_w: float, src_h: float, dst_w: float, dst_h: float) -> FitRect:
    if mode is FitMode.COVER:
        return cover_fit(src_w, src_h, dst_w, dst_h)
    if mode is FitMode.CONTAIN:
        return contain_fit(src_w, src_h, dst_w, dst_h)
    raise ValueError(f"unknown fit mode: {mode}")
