"""Frame-to-slide scheduling.

A slideshow of ``n`` images is split into ``n`` equal cycles. Each cycle
holds its image still and then transitions to the next one, wrapping to
the first image after the last. When the configured transition length
would not fit (``transition * n > duration``) every cycle is instead
split evenly between hold and transition, so the schedule still spans
exactly the requested duration and no image is dropped.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .config import RenderConfig


@dataclass(frozen=True)
class TimelineState:
    current_index: int
    next_index: int
    progress: float
    is_transitioning: bool


@dataclass(frozen=True)
class TimingInfo:
    hold_per_image: float
    transition_seconds: float
    total_cycles: float
    time_per_cycle: float
    adjusted: bool = False


def schedule_timing(image_count: int, duration_seconds: float, transition_ms: float) -> TimingInfo:
    """Derive per-cycle hold and transition lengths, in seconds."""
    if image_count <= 0:
        return TimingInfo(0.0, 0.0, 0.0, 0.0)
    transition_s = transition_ms / 1000.0
    adjusted = transition_s * image_count > duration_seconds
    if adjusted:
        transition_s = (duration_seconds / image_count) * 0.5
    total_hold = duration_seconds - transition_s * image_count
    hold = total_hold / image_count
    per_cycle = hold + transition_s
    cycles = duration_seconds / per_cycle if per_cycle > 0 else 0.0
    return TimingInfo(hold, transition_s, cycles, per_cycle, adjusted)


def timing_breakdown(config: RenderConfig) -> TimingInfo:
    return schedule_timing(
        len(config.images),
        config.export.duration_seconds,
        config.transition.duration_ms,
    )


def _hold_last(image_count: int) -> TimelineState:
    last = image_count - 1
    return TimelineState(last, last, 0.0, False)


def compute_timeline_state(frame_index: int, config: RenderConfig) -> TimelineState:
    """Return which slides frame *frame_index* shows and how far it blends."""
    image_count = len(config.images)
    if image_count == 0:
        return TimelineState(0, 0, 0.0, False)
    fps = config.export.fps
    if frame_index >= config.export.total_frames:
        return _hold_last(image_count)
    frame_index = max(0, frame_index)

    timing = timing_breakdown(config)
    current_time = frame_index / fps
    cycle_index = int(math.floor(current_time / timing.time_per_cycle))
    cycle_time = current_time % timing.time_per_cycle
    if cycle_index >= image_count:
        return _hold_last(image_count)

    next_index = (cycle_index + 1) % image_count
    if cycle_time >= timing.hold_per_image:
        if timing.transition_seconds > 0:
            progress = (cycle_time - timing.hold_per_image) / timing.transition_seconds
        else:
            progress = 1.0
        return TimelineState(cycle_index, next_index, min(1.0, max(0.0, progress)), True)
    return TimelineState(cycle_index, next_index, 0.0, False)
