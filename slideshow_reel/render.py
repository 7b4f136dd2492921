"""Two-stage frame rendering.

Stage-1 draws the slideshow (composite slides plus transitions) on the
inner canvas. Stage-2, used only when an outer frame is configured,
places the Stage-1 picture inside that frame. A frame depends on nothing
but its index and the config, so preview and export share this code.
"""
from __future__ import annotations

from typing import Iterator, Optional, Tuple

from .compositor import SlideCache, build_composite_slide
from .config import RenderConfig
from .surface import Surface
from .timeline import compute_timeline_state
from .transitions import apply_transition


def _slide(config: RenderConfig, index: int, cache: Optional[SlideCache]) -> Surface:
    image = config.images[index]
    w, h = config.frame1_w, config.frame1_h
    if cache is not None:
        return cache.get(image, config.frame1, w, h, config.fit)
    return build_composite_slide(image, config.frame1, w, h, config.fit)


def render_stage1(
    frame_index: int, config: RenderConfig, cache: Optional[SlideCache] = None
) -> Surface:
    w, h = config.frame1_w, config.frame1_h
    if not config.images:
        return Surface(w, h)
    state = compute_timeline_state(frame_index, config)
    current = _slide(config, state.current_index, cache)
    if not state.is_transitioning:
        # cached slides are shared between frames
        return current.copy() if cache is not None else current
    nxt = _slide(config, state.next_index, cache)
    dest = Surface(w, h)
    apply_transition(
        config.transition.kind,
        current,
        nxt,
        state.progress,
        config.transition.direction,
        w,
        h,
        dest,
    )
    return dest


def render_stage2(stage1: Surface, config: RenderConfig) -> Surface:
    dest = Surface(config.frame2_w, config.frame2_h)
    tf = config.transform
    dest.draw(
        stage1,
        tf.x,
        tf.y,
        config.frame1_w * tf.scale,
        config.frame1_h * tf.scale,
    )
    if config.frame2 is not None:
        dest.fill(config.frame2)
    return dest


def render_frame(
    frame_index: int, config: RenderConfig, cache: Optional[SlideCache] = None
) -> Surface:
    """Final picture for *frame_index*; Stage-2 is skipped without an outer frame."""
    stage1 = render_stage1(frame_index, config, cache)
    if not config.has_stage2:
        return stage1
    return render_stage2(stage1, config)


def iter_frames(
    config: RenderConfig,
    start: int = 0,
    stop: Optional[int] = None,
    cache: Optional[SlideCache] = None,
) -> Iterator[Tuple[int, Surface]]:
    """Yield ``(index, surface)`` in increasing frame order."""
    if stop is None:
        stop = config.total_frames
    if cache is None:
        cache = SlideCache()
    for i in range(max(0, start), stop):
        yield i, render_frame(i, config, cache)
