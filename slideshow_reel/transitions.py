"""Slide transitions.

Every transition blends two canvas-sized composite slides for a progress
value ``p`` in ``[0, 1]`` and moves along one of four direction vectors.
At ``p == 0`` only the current slide is visible; at ``p == 1`` only the
next one.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from .fit import FitRect
from .surface import PixelSource, Surface


class TransitionKind(str, Enum):
    WIPE = "wipe"
    PUSH = "push"
    PULL = "pull"
    # Same motion as PUSH; listed separately because users pick it by name.
    SWIPE = "swipe"


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


DIRECTION_VECTORS: Dict[Direction, Tuple[int, int]] = {
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
}


def _clamp01(p: float) -> float:
    return min(1.0, max(0.0, p))


def _offset(direction: Direction, progress: float, w: int, h: int) -> Tuple[float, float]:
    dx, dy = DIRECTION_VECTORS[direction]
    return dx * w * progress, dy * h * progress


def wipe_rect(direction: Direction, progress: float, w: int, h: int) -> FitRect:
    """Area of the next slide revealed by a wipe.

    ``right`` grows from the left edge, ``left`` from the right edge,
    ``down`` from the top and ``up`` from the bottom.
    """
    p = _clamp01(progress)
    if direction is Direction.RIGHT:
        return FitRect(0.0, 0.0, w * p, float(h))
    if direction is Direction.LEFT:
        return FitRect(w * (1 - p), 0.0, w * p, float(h))
    if direction is Direction.DOWN:
        return FitRect(0.0, 0.0, float(w), h * p)
    if direction is Direction.UP:
        return FitRect(0.0, h * (1 - p), float(w), h * p)
    raise ValueError(f"unknown direction: {direction}")


def apply_wipe(
    dest: Surface,
    current: PixelSource,
    nxt: PixelSource,
    progress: float,
    direction: Direction,
    canvas_w: int,
    canvas_h: int,
) -> None:
    dest.draw(current, 0, 0, canvas_w, canvas_h)
    clip = wipe_rect(direction, progress, canvas_w, canvas_h)
    dest.draw(nxt, 0, 0, canvas_w, canvas_h, clip=clip)


def apply_push(
    dest: Surface,
    current: PixelSource,
    nxt: PixelSource,
    progress: float,
    direction: Direction,
    canvas_w: int,
    canvas_h: int,
) -> None:
    """Both slides move rigidly; next lands on the origin at ``p == 1``."""
    p = _clamp01(progress)
    vx, vy = DIRECTION_VECTORS[direction]
    dx, dy = _offset(direction, p, canvas_w, canvas_h)
    dest.draw(current, -dx, -dy, canvas_w, canvas_h)
    dest.draw(nxt, vx * canvas_w - dx, vy * canvas_h - dy, canvas_w, canvas_h)


def apply_pull(
    dest: Surface,
    current: PixelSource,
    nxt: PixelSource,
    progress: float,
    direction: Direction,
    canvas_w: int,
    canvas_h: int,
) -> None:
    """Next stays put underneath while current slides off the canvas."""
    p = _clamp01(progress)
    dx, dy = _offset(direction, p, canvas_w, canvas_h)
    dest.draw(nxt, 0, 0, canvas_w, canvas_h)
    dest.draw(current, -dx, -dy, canvas_w, canvas_h)


def apply_transition(
    kind: TransitionKind,
    current: PixelSource,
    nxt: PixelSource,
    progress: float,
    direction: Direction,
    canvas_w: int,
    canvas_h: int,
    dest: Surface,
) -> None:
    """Blend *current* into *nxt* and write the result into *dest*."""
    if kind is TransitionKind.WIPE:
        apply_wipe(dest, current, nxt, progress, direction, canvas_w, canvas_h)
    elif kind is TransitionKind.PUSH or kind is TransitionKind.SWIPE:
        apply_push(dest, current, nxt, progress, direction, canvas_w, canvas_h)
    elif kind is TransitionKind.PULL:
        apply_pull(dest, current, nxt, progress, direction, canvas_w, canvas_h)
    else:
        raise ValueError(f"unknown transition: {kind}")
