import pytest

from slideshow_reel.fit import FitMode, FitRect, contain_fit, cover_fit, fit_rect


def test_cover_fit_wide_into_square():
    assert cover_fit(100, 50, 200, 200) == FitRect(-100, 0, 400, 200)


def test_cover_fit_always_covers():
    for src in [(100, 50), (50, 100), (333, 77), (1920, 1080)]:
        r = cover_fit(*src, 300, 200)
        assert r.x <= 0 and r.y <= 0
        assert r.x + r.w >= 300 - 1e-9
        assert r.y + r.h >= 200 - 1e-9
        assert r.w / r.h == pytest.approx(src[0] / src[1])


def test_contain_fit_letterboxes():
    r = contain_fit(100, 50, 200, 200)
    assert r == FitRect(0, 50, 200, 100)


def test_fit_rect_dispatch():
    assert fit_rect(FitMode.COVER, 100, 50, 200, 200) == cover_fit(100, 50, 200, 200)
    assert fit_rect(FitMode("contain"), 100, 50, 200, 200) == contain_fit(100, 50, 200, 200)
