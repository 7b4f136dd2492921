import numpy as np
import pytest

from slideshow_reel.config import ExportSpec, RenderConfig, TransformSpec, TransitionSpec
from slideshow_reel.errors import InvalidConfiguration
from slideshow_reel.sources import ImageSource
from slideshow_reel.validate import ensure_valid, validate_config


def img(w=4, h=4):
    return ImageSource(np.zeros((h, w, 4), dtype=np.uint8))


def test_valid_config_has_no_errors():
    cfg = RenderConfig(images=(img(),), frame1_size=(8, 8))
    assert validate_config(cfg) == []
    assert ensure_valid(cfg) is cfg


def test_empty_slideshow_is_valid():
    cfg = RenderConfig(images=(), transition=TransitionSpec(duration_ms=0))
    assert validate_config(cfg) == []


@pytest.mark.parametrize(
    "kw,needle",
    [
        ({"export": ExportSpec(duration_seconds=0, fps=30)}, "duration"),
        ({"export": ExportSpec(duration_seconds=-1, fps=30)}, "duration"),
        ({"export": ExportSpec(duration_seconds=5, fps=0)}, "fps"),
        ({"export": ExportSpec(duration_seconds=0.01, fps=10)}, "no frames"),
        ({"frame1_size": (0, 10)}, "frame1 canvas"),
        ({"transition": TransitionSpec(duration_ms=0)}, "transition duration"),
        ({"images": (img(0, 4),)}, "image 1"),
        ({"frame1": img(4, 0)}, "frame1 overlay"),
        ({"frame2": img(), "transform": TransformSpec(scale=0)}, "scale"),
    ],
)
def test_problems_detected(kw, needle):
    base = dict(images=(img(),), frame1_size=(8, 8))
    base.update(kw)
    errors = validate_config(RenderConfig(**base))
    assert any(needle in e for e in errors), errors


def test_ensure_valid_raises_with_all_errors():
    cfg = RenderConfig(
        images=(img(),),
        frame1_size=(0, 0),
        export=ExportSpec(duration_seconds=0, fps=0),
    )
    with pytest.raises(InvalidConfiguration) as exc:
        ensure_valid(cfg)
    assert len(exc.value.errors) == 3
