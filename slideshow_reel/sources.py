"""Decoded image sources handed to the render core."""
from __future__ import annotations

import logging
import os
from typing import Callable, List, Optional, Sequence

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeFailure


class ImageSource:
    """Straight-alpha RGBA pixels decoded once from an image file."""

    def __init__(self, pixels: np.ndarray, path: Optional[str] = None):
        if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint8:
            raise ValueError("ImageSource expects uint8 HxWx4 pixels")
        self._pixels = pixels
        self.path = path

    @classmethod
    def from_image(cls, img: Image.Image, path: Optional[str] = None) -> "ImageSource":
        return cls(np.array(img.convert("RGBA")), path)

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    def read_pixels(self) -> np.ndarray:
        return self._pixels

    def __repr__(self) -> str:
        name = os.path.basename(self.path) if self.path else "<memory>"
        return f"ImageSource({name}, {self.width}x{self.height})"


def load_image(path: str) -> ImageSource:
    """Decode *path* into an :class:`ImageSource`.

    Raises :class:`DecodeFailure` when the file is missing, unreadable or
    not an image Pillow understands.
    """
    try:
        with Image.open(path) as img:
            img.load()
            return ImageSource.from_image(img, str(path))
    except FileNotFoundError as e:
        raise DecodeFailure(path, "file not found") from e
    except UnidentifiedImageError as e:
        raise DecodeFailure(path, "unrecognised image format") from e
    except OSError as e:
        raise DecodeFailure(path, str(e)) from e


def load_images(
    paths: Sequence[str],
    on_progress: Optional[Callable[[int, int], None]] = None,
    loader: Callable[[str], ImageSource] = load_image,
) -> List[ImageSource]:
    """Decode *paths* one at a time, keeping playback order.

    The first failure aborts the whole batch.
    """
    total = len(paths)
    logging.info("loading %d images", total)
    out: List[ImageSource] = []
    for i, path in enumerate(paths, 1):
        out.append(loader(path))
        logging.debug("loaded %s (%d/%d)", path, i, total)
        if on_progress:
            on_progress(i, total)
    return out
