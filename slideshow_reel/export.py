"""Sequential export of a slideshow into a streaming encoder."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

import numpy as np
from moviepy.video.io.ffmpeg_writer import FFMPEG_VideoWriter

from .compositor import SlideCache
from .config import RenderConfig
from .errors import EncodeFailure, ExportAborted
from .render import render_frame
from .validate import ensure_valid

CODECS = {"h264": "libx264", "hevc": "libx265", "vp9": "libvpx-vp9"}


def export_profile(profile: str, codec: str) -> Dict[str, object]:
    """Return encoder settings for given *profile* and *codec*."""
    base = {
        "preview": {"crf": "31", "preset": "veryfast"},
        "social": {"crf": "26", "preset": "medium"},
        "quality": {"crf": "21", "preset": "slow"},
    }[profile]
    ffmpeg_params = ["-crf", base["crf"], "-pix_fmt", "yuv420p"]
    if codec in ("h264", "hevc"):
        ffmpeg_params = ["-movflags", "+faststart"] + ffmpeg_params
    if codec == "hevc":
        ffmpeg_params.extend(["-tag:v", "hvc1"])
    if codec == "vp9":
        ffmpeg_params.extend(["-b:v", "0"])
    return {
        "codec": CODECS[codec],
        "preset": base["preset"],
        "ffmpeg_params": ffmpeg_params,
    }


class FrameEncoder(Protocol):
    def open(self, size: Tuple[int, int], fps: int) -> None: ...

    def write_frame(self, frame: np.ndarray) -> None: ...

    def close(self) -> None: ...


class FfmpegEncoder:
    """Streams RGB frames to an ffmpeg process through moviepy's writer.

    One instance per export; it is handed to :func:`export_slideshow`
    rather than shared, so concurrent exports never touch the same pipe.
    """

    def __init__(
        self,
        path: str,
        codec: str = "libx264",
        preset: str = "medium",
        ffmpeg_params: Optional[Sequence[str]] = None,
        writer_factory: Callable[..., object] = FFMPEG_VideoWriter,
    ):
        self.path = path
        self.codec = codec
        self.preset = preset
        self.ffmpeg_params: List[str] = list(ffmpeg_params or [])
        self._factory = writer_factory
        self._writer = None

    @classmethod
    def for_profile(cls, path: str, profile: str = "social", codec: str = "h264") -> "FfmpegEncoder":
        prof = export_profile(profile, codec)
        return cls(
            path,
            codec=prof["codec"],
            preset=prof["preset"],
            ffmpeg_params=prof["ffmpeg_params"],
        )

    def open(self, size: Tuple[int, int], fps: int) -> None:
        if size[0] % 2 or size[1] % 2:
            logging.warning("odd frame size %dx%d may be rejected by %s", size[0], size[1], self.codec)
        try:
            self._writer = self._factory(
                self.path,
                size,
                fps,
                codec=self.codec,
                preset=self.preset,
                ffmpeg_params=self.ffmpeg_params,
            )
        except OSError as e:
            raise EncodeFailure(f"cannot start encoder for {self.path}: {e}") from e

    def write_frame(self, frame: np.ndarray) -> None:
        if self._writer is None:
            raise EncodeFailure("encoder is not open")
        try:
            self._writer.write_frame(frame)
        except OSError as e:
            raise EncodeFailure(str(e)) from e

    def close(self) -> None:
        writer, self._writer = self._writer, None
        if writer is None:
            return
        try:
            writer.close()
        except OSError as e:
            raise EncodeFailure(f"encoder did not finish cleanly: {e}") from e


def _close_after_failure(encoder: FrameEncoder) -> None:
    try:
        encoder.close()
    except EncodeFailure as e:
        logging.warning("encoder close after failure: %s", e)


def export_slideshow(
    config: RenderConfig,
    encoder: FrameEncoder,
    on_progress: Optional[Callable[[int, int], None]] = None,
    background: Tuple[int, int, int] = (0, 0, 0),
) -> int:
    """Render every frame in order and feed it to *encoder*.

    Returns the number of frames delivered. Any encoder failure stops the
    loop at once and is re-raised as :class:`ExportAborted`.
    """
    ensure_valid(config)
    total = config.total_frames
    fps = config.export.fps
    size = config.output_size
    logging.info(
        "export: %d frames @ %d fps, %dx%d, %d images, %s",
        total,
        fps,
        size[0],
        size[1],
        len(config.images),
        "two-stage" if config.has_stage2 else "single-stage",
    )
    try:
        encoder.open(size, fps)
    except EncodeFailure as e:
        raise ExportAborted(0, total, e) from e

    cache = SlideCache()
    step = max(1, total // 10)
    try:
        for i in range(total):
            frame = render_frame(i, config, cache).to_rgb(background)
            try:
                encoder.write_frame(frame)
            except EncodeFailure as e:
                logging.error("encoder rejected frame %d/%d: %s", i, total, e)
                raise ExportAborted(i, total, e) from e
            if on_progress:
                on_progress(i + 1, total)
            if (i + 1) % step == 0:
                logging.info("export: %d/%d frames (%.0f%%)", i + 1, total, 100.0 * (i + 1) / total)
    except BaseException:
        _close_after_failure(encoder)
        raise
    finally:
        cache.clear()

    try:
        encoder.close()
    except EncodeFailure as e:
        raise ExportAborted(total, total, e) from e
    logging.info("export finished: %d frames", total)
    return total
