"""Slideshow reel package."""

__all__ = ["export_slideshow", "render_frame"]


def export_slideshow(*args, **kwargs):
    from .export import export_slideshow as _export_slideshow

    return _export_slideshow(*args, **kwargs)


def render_frame(*args, **kwargs):
    from .render import render_frame as _render_frame

    return _render_frame(*args, **kwargs)
