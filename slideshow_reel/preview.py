"""Preview helpers sharing the export render path."""
from __future__ import annotations

import math
from typing import Optional

from PIL import Image

try:
    from moviepy.editor import VideoClip
except ModuleNotFoundError:  # moviepy >=2.0
    from moviepy import VideoClip

from .compositor import SlideCache
from .config import RenderConfig
from .render import render_frame
from .validate import ensure_valid


def _set_fps(clip, fps):
    """Set frames-per-second on a clip for moviepy 1.x/2.x."""
    return clip.set_fps(fps) if hasattr(clip, "set_fps") else clip.with_fps(fps)


def frame_at(t: float, fps: int) -> int:
    """Index of the frame on screen at time *t*."""
    return int(math.floor(t * fps + 1e-6))


def make_preview_clip(config: RenderConfig, cache: Optional[SlideCache] = None):
    """Return a moviepy ``VideoClip`` that renders frames on demand.

    ``frame_at(t)`` picks the frame so a clip frame is pixel-identical to
    the exported frame with the same index.
    """
    ensure_valid(config)
    fps = config.export.fps
    if cache is None:
        cache = SlideCache()

    def make_frame(t):
        return render_frame(frame_at(t, fps), config, cache).to_rgb()

    clip = VideoClip(make_frame, duration=config.export.duration_seconds)
    return _set_fps(clip, fps)


def render_still(config: RenderConfig, frame_index: int) -> Image.Image:
    """Render a single final frame as an RGBA Pillow image."""
    ensure_valid(config)
    return render_frame(frame_index, config).to_image()
