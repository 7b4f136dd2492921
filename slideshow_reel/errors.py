"""Error types raised around the slideshow render core."""
from __future__ import annotations

from typing import Iterable, List, Optional


class SlideshowError(Exception):
    """Base class for all slideshow_reel failures."""

    kind = "error"


class InvalidConfiguration(SlideshowError):
    """Configuration rejected before any frame is rendered."""

    kind = "invalid-configuration"

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "invalid configuration")


class DecodeFailure(SlideshowError):
    """An image could not be supplied as valid pixels."""

    kind = "decode-failure"

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"cannot decode {self.path}: {reason}")


class EncodeFailure(SlideshowError):
    """The encoder rejected a frame or terminated early."""

    kind = "encode-failure"


class ExportAborted(SlideshowError):
    """Export stopped before all frames were delivered.

    ``frame_index`` is the frame that failed, ``last_delivered`` the last
    frame the encoder accepted (``-1`` when none was).
    """

    def __init__(
        self,
        frame_index: int,
        total_frames: int,
        cause: Optional[BaseException] = None,
    ):
        self.frame_index = frame_index
        self.total_frames = total_frames
        self.last_delivered = frame_index - 1
        self.cause = cause
        msg = f"export aborted at frame {frame_index} of {total_frames}"
        if cause is not None:
            msg += f" ({getattr(cause, 'kind', type(cause).__name__)}: {cause})"
        super().__init__(msg)

    @property
    def kind(self) -> str:  # type: ignore[override]
        return getattr(self.cause, "kind", "error")
