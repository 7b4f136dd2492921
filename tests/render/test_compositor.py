import numpy as np

from slideshow_reel.compositor import SlideCache, build_composite_slide
from slideshow_reel.fit import FitMode
from slideshow_reel.sources import ImageSource


def _wide_image():
    """100x50, green outer quarters and red middle half."""
    arr = np.zeros((50, 100, 4), dtype=np.uint8)
    arr[..., 1] = 255
    arr[:, 25:75] = (255, 0, 0, 255)
    arr[..., 3] = 255
    return ImageSource(arr)


def _top_bar_overlay(w, h):
    arr = np.zeros((h, w, 4), dtype=np.uint8)
    arr[0] = (255, 255, 255, 255)
    return ImageSource(arr)


def test_cover_fills_canvas_and_crops_sides():
    slide = build_composite_slide(_wide_image(), None, 200, 200)
    assert slide.size == (200, 200)
    assert np.all(slide.pixels[..., 3] == 255)
    # the centre half of the source is what remains visible
    assert list(slide.pixels[100, 100]) == [255, 0, 0, 255]
    assert list(slide.pixels[100, 20]) == [255, 0, 0, 255]


def test_contain_leaves_transparent_bars():
    slide = build_composite_slide(_wide_image(), None, 200, 200, fit=FitMode.CONTAIN)
    assert np.all(slide.pixels[:50, :, 3] == 0)
    assert np.all(slide.pixels[150:, :, 3] == 0)
    assert np.all(slide.pixels[50:150, :, 3] == 255)


def test_overlay_is_stretched_and_baked_on_top():
    overlay = _top_bar_overlay(10, 10)
    slide = build_composite_slide(_wide_image(), overlay, 40, 40)
    # overlay row 0 scaled 4x covers rows 0..3
    assert np.all(slide.pixels[0] == [255, 255, 255, 255])
    assert list(slide.pixels[20, 20]) == [255, 0, 0, 255]


def test_slide_cache_reuses_surfaces():
    cache = SlideCache()
    img = _wide_image()
    a = cache.get(img, None, 20, 20)
    b = cache.get(img, None, 20, 20)
    c = cache.get(img, None, 30, 20)
    assert a is b
    assert c is not a
    assert (cache.hits, cache.misses) == (1, 2)
    assert len(cache) == 2
    cache.clear()
    assert len(cache) == 0


def test_cached_slide_matches_fresh_build():
    img = _wide_image()
    overlay = _top_bar_overlay(8, 8)
    cached = SlideCache().get(img, overlay, 32, 24)
    fresh = build_composite_slide(img, overlay, 32, 24)
    assert np.array_equal(cached.pixels, fresh.pixels)
