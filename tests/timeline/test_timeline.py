import numpy as np
import pytest

from slideshow_reel.config import ExportSpec, RenderConfig, TransitionSpec
from slideshow_reel.sources import ImageSource
from slideshow_reel.timeline import (
    TimelineState,
    compute_timeline_state,
    schedule_timing,
    timing_breakdown,
)


def _images(n):
    return tuple(
        ImageSource(np.full((4, 4, 4), (i * 10, 0, 0, 255), dtype=np.uint8)) for i in range(n)
    )


def make_config(n=2, duration=4.0, fps=10, transition_ms=1000.0):
    return RenderConfig(
        images=_images(n),
        frame1_size=(8, 8),
        transition=TransitionSpec(duration_ms=transition_ms),
        export=ExportSpec(duration_seconds=duration, fps=fps),
    )


def test_unadjusted_schedule_phases():
    cfg = make_config()
    s0 = compute_timeline_state(0, cfg)
    assert s0.current_index == 0 and not s0.is_transitioning

    s10 = compute_timeline_state(10, cfg)
    assert (s10.current_index, s10.next_index) == (0, 1)
    assert s10.is_transitioning
    assert s10.progress == 0.0

    s15 = compute_timeline_state(15, cfg)
    assert s15.is_transitioning
    assert s15.progress == pytest.approx(0.5)

    s20 = compute_timeline_state(20, cfg)
    assert s20.current_index == 1 and not s20.is_transitioning


def test_last_cycle_wraps_to_first_image():
    s = compute_timeline_state(39, make_config())
    assert (s.current_index, s.next_index) == (1, 0)
    assert s.is_transitioning
    assert s.progress == pytest.approx(0.9)


def test_overflow_correction_splits_cycles():
    cfg = make_config(n=20, duration=30.0, fps=24, transition_ms=2000.0)
    info = timing_breakdown(cfg)
    assert info.adjusted
    assert info.transition_seconds == pytest.approx(0.75)
    assert info.hold_per_image == pytest.approx(0.75)
    assert info.time_per_cycle == pytest.approx(1.5)
    assert info.total_cycles == pytest.approx(20)


def test_overflow_corrected_frame_states():
    cfg = make_config(n=20, duration=30.0, fps=24, transition_ms=2000.0)
    hold = compute_timeline_state(17, cfg)
    assert hold == TimelineState(0, 1, 0.0, False)

    start = compute_timeline_state(18, cfg)  # t = 0.75 s
    assert (start.current_index, start.next_index) == (0, 1)
    assert start.is_transitioning
    assert start.progress == 0.0

    mid = compute_timeline_state(27, cfg)  # t = 1.125 s
    assert mid.is_transitioning
    assert mid.progress == pytest.approx(0.5)

    assert compute_timeline_state(36, cfg) == TimelineState(1, 2, 0.0, False)

    last = compute_timeline_state(cfg.total_frames - 1, cfg)
    assert (last.current_index, last.next_index) == (19, 0)
    assert last.is_transitioning

    shown = {compute_timeline_state(i, cfg).current_index for i in range(cfg.total_frames)}
    assert shown == set(range(20))


def test_unadjusted_timing_breakdown():
    info = timing_breakdown(make_config())
    assert not info.adjusted
    assert info.transition_seconds == pytest.approx(1.0)
    assert info.hold_per_image == pytest.approx(1.0)
    assert info.total_cycles == pytest.approx(2)


@pytest.mark.parametrize(
    "n,duration,ms",
    [(1, 5.0, 500), (3, 10.0, 4000), (7, 12.5, 900), (20, 30.0, 2000), (50, 5.0, 80)],
)
def test_schedule_spans_full_duration(n, duration, ms):
    info = schedule_timing(n, duration, ms)
    total = info.hold_per_image * n + info.transition_seconds * n
    assert total == pytest.approx(duration)
    assert info.total_cycles == pytest.approx(n)
    assert info.hold_per_image >= 0


@pytest.mark.parametrize("frame", [40, 41, 400, 10**9])
def test_terminal_clamp(frame):
    s = compute_timeline_state(frame, make_config())
    assert s == TimelineState(1, 1, 0.0, False)


def test_empty_slideshow():
    cfg = RenderConfig(images=(), export=ExportSpec(4.0, 10))
    assert compute_timeline_state(5, cfg) == TimelineState(0, 0, 0.0, False)
    assert timing_breakdown(cfg).time_per_cycle == 0.0


def test_deterministic():
    cfg = make_config(n=5, duration=7.3, fps=30, transition_ms=700)
    for f in range(0, cfg.total_frames, 7):
        assert compute_timeline_state(f, cfg) == compute_timeline_state(f, cfg)


def test_progress_stays_in_unit_range():
    cfg = make_config(n=6, duration=9.7, fps=60, transition_ms=1300)
    for f in range(cfg.total_frames + 5):
        s = compute_timeline_state(f, cfg)
        assert 0.0 <= s.progress <= 1.0
        assert 0 <= s.current_index < 6
        assert 0 <= s.next_index < 6
        if not s.is_transitioning:
            assert s.progress == 0.0
