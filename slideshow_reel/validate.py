"""Configuration checks run before any frame is rendered."""
from __future__ import annotations

from typing import List

from .config import RenderConfig
from .errors import InvalidConfiguration


def _check_size(name: str, w: float, h: float, errors: List[str]) -> None:
    if w <= 0 or h <= 0:
        errors.append(f"{name} must have positive dimensions, got {w}x{h}")


def validate_config(config: RenderConfig) -> List[str]:
    """Return human readable problems with *config*.

    The caller should abort if the list is non-empty.
    """
    errors: List[str] = []
    ex = config.export
    if ex.fps <= 0 or int(ex.fps) != ex.fps:
        errors.append(f"fps must be a positive integer, got {ex.fps}")
    if ex.duration_seconds <= 0:
        errors.append(f"duration must be > 0s, got {ex.duration_seconds}")
    elif ex.fps > 0 and ex.total_frames < 1:
        errors.append("duration and fps give no frames to render")
    _check_size("frame1 canvas", config.frame1_w, config.frame1_h, errors)
    if config.has_stage2:
        _check_size("frame2 canvas", config.frame2_w, config.frame2_h, errors)
        if config.transform.scale <= 0:
            errors.append(f"transform.scale must be > 0, got {config.transform.scale}")
    if config.images and config.transition.duration_ms <= 0:
        errors.append(
            f"transition duration must be > 0ms, got {config.transition.duration_ms}"
        )
    for i, img in enumerate(config.images):
        _check_size(f"image {i + 1}", img.width, img.height, errors)
    for name in ("frame1", "frame2"):
        overlay = getattr(config, name)
        if overlay is not None:
            _check_size(f"{name} overlay", overlay.width, overlay.height, errors)
    return errors


def ensure_valid(config: RenderConfig) -> RenderConfig:
    errors = validate_config(config)
    if errors:
        raise InvalidConfiguration(errors)
    return config
