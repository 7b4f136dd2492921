"""Composite slides: one image with the inner overlay baked in."""
from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from .fit import FitMode, fit_rect
from .surface import PixelSource, Surface


def build_composite_slide(
    image: PixelSource,
    overlay: Optional[PixelSource],
    canvas_w: int,
    canvas_h: int,
    fit: FitMode = FitMode.COVER,
) -> Surface:
    """Render *image* fitted to the canvas with *overlay* stretched on top.

    The overlay is part of the slide, so it moves and gets clipped together
    with the image while a transition runs.
    """
    slide = Surface(canvas_w, canvas_h)
    rect = fit_rect(fit, image.width, image.height, canvas_w, canvas_h)
    slide.draw(image, rect.x, rect.y, rect.w, rect.h)
    if overlay is not None:
        slide.fill(overlay)
    return slide


_Key = Tuple[int, int, int, int, FitMode]


class SlideCache:
    """Composite slides built during one render or export session.

    Keys are object identities; the cache holds a reference to every
    source it was asked about so an id cannot be reused while cached.
    """

    def __init__(self) -> None:
        self._slides: Dict[_Key, Surface] = {}
        self._refs: Dict[_Key, Tuple[PixelSource, Optional[PixelSource]]] = {}
        self.hits = 0
        self.misses = 0

    def get(
        self,
        image: PixelSource,
        overlay: Optional[PixelSource],
        canvas_w: int,
        canvas_h: int,
        fit: FitMode = FitMode.COVER,
    ) -> Surface:
        key = (id(image), id(overlay), canvas_w, canvas_h, fit)
        slide = self._slides.get(key)
        if slide is not None:
            self.hits += 1
            return slide
        self.misses += 1
        slide = build_composite_slide(image, overlay, canvas_w, canvas_h, fit)
        self._slides[key] = slide
        self._refs[key] = (image, overlay)
        logging.debug("composite slide built for %r (%dx%d)", image, canvas_w, canvas_h)
        return slide

    def clear(self) -> None:
        self._slides.clear()
        self._refs.clear()

    def __len__(self) -> int:
        return len(self._slides)
