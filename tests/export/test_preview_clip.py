import numpy as np
import pytest

pytest.importorskip("moviepy")

from slideshow_reel.config import ExportSpec, RenderConfig, TransitionSpec
from slideshow_reel.preview import frame_at, make_preview_clip, render_still
from slideshow_reel.render import render_frame
from slideshow_reel.sources import ImageSource
from slideshow_reel.transitions import Direction, TransitionKind


def make_config():
    images = (
        ImageSource(np.full((6, 8, 4), (255, 0, 0, 255), dtype=np.uint8)),
        ImageSource(np.full((6, 8, 4), (0, 0, 255, 255), dtype=np.uint8)),
    )
    return RenderConfig(
        images=images,
        frame1_size=(8, 6),
        transition=TransitionSpec(TransitionKind.WIPE, Direction.DOWN, 1000),
        export=ExportSpec(duration_seconds=4.0, fps=10),
    )


def test_frame_at():
    assert frame_at(0.0, 10) == 0
    assert frame_at(1.5, 10) == 15
    assert frame_at(0.3, 10) == 3
    assert frame_at(0.099, 10) == 0


def test_preview_matches_export_frames():
    cfg = make_config()
    clip = make_preview_clip(cfg)
    assert clip.duration == pytest.approx(4.0)
    for i in (0, 12, 15, 25):
        frame = clip.get_frame(i / 10)
        assert np.array_equal(frame, render_frame(i, cfg).to_rgb())


def test_render_still():
    img = render_still(make_config(), 20)
    assert img.size == (8, 6)
    assert img.mode == "RGBA"
    assert img.getpixel((0, 0)) == (0, 0, 255, 255)
