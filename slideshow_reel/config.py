"""Render configuration and project file loading."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from .errors import InvalidConfiguration
from .fit import FitMode
from .sources import ImageSource, load_image, load_images
from .surface import PixelSource
from .transitions import Direction, TransitionKind

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".webp"}

# Portrait 1080p.
DEFAULT_CANVAS: Tuple[int, int] = (1080, 1920)
DEFAULT_TRANSITION_MS = 500.0
DEFAULT_DURATION_S = 30.0
DEFAULT_FPS = 30

Size = Tuple[int, int]


@dataclass(frozen=True)
class TransitionSpec:
    kind: TransitionKind = TransitionKind.WIPE
    direction: Direction = Direction.RIGHT
    duration_ms: float = DEFAULT_TRANSITION_MS

    @property
    def seconds(self) -> float:
        return self.duration_ms / 1000.0


@dataclass(frozen=True)
class TransformSpec:
    """Placement of the Stage-1 picture inside the outer frame."""

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0


@dataclass(frozen=True)
class ExportSpec:
    duration_seconds: float = DEFAULT_DURATION_S
    fps: int = DEFAULT_FPS

    @property
    def total_frames(self) -> int:
        return int(round(self.duration_seconds * self.fps))


@dataclass(frozen=True)
class RenderConfig:
    """Everything one render/export session needs, fixed for its lifetime.

    ``images`` is in playback order. ``frame1`` is the inner overlay baked
    into every slide, ``frame2`` the optional outer frame; Stage-2 only
    runs when ``frame2`` is set.
    """

    images: Tuple[PixelSource, ...] = ()
    frame1: Optional[PixelSource] = None
    frame2: Optional[PixelSource] = None
    frame1_size: Size = DEFAULT_CANVAS
    frame2_size: Optional[Size] = None
    transition: TransitionSpec = field(default_factory=TransitionSpec)
    transform: TransformSpec = field(default_factory=TransformSpec)
    export: ExportSpec = field(default_factory=ExportSpec)
    fit: FitMode = FitMode.COVER

    def __post_init__(self) -> None:
        object.__setattr__(self, "images", tuple(self.images))
        if self.frame2_size is None:
            object.__setattr__(self, "frame2_size", self.frame1_size)

    @property
    def frame1_w(self) -> int:
        return int(self.frame1_size[0])

    @property
    def frame1_h(self) -> int:
        return int(self.frame1_size[1])

    @property
    def frame2_w(self) -> int:
        return int(self.frame2_size[0])

    @property
    def frame2_h(self) -> int:
        return int(self.frame2_size[1])

    @property
    def has_stage2(self) -> bool:
        return self.frame2 is not None

    @property
    def output_size(self) -> Size:
        if self.has_stage2:
            return self.frame2_w, self.frame2_h
        return self.frame1_w, self.frame1_h

    @property
    def total_frames(self) -> int:
        return self.export.total_frames


# ---------------------------------------------------------------------------
# Project files
# ---------------------------------------------------------------------------


@dataclass
class ProjectSpec:
    """Paths and settings read from a project file, before decoding."""

    name: str = "slideshow"
    image_paths: List[str] = field(default_factory=list)
    frame1_path: Optional[str] = None
    frame2_path: Optional[str] = None
    frame1_size: Optional[Size] = None
    frame2_size: Optional[Size] = None
    transition: TransitionSpec = field(default_factory=TransitionSpec)
    transform: TransformSpec = field(default_factory=TransformSpec)
    export: ExportSpec = field(default_factory=ExportSpec)
    fit: FitMode = FitMode.COVER


def _get(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key; project files may use camelCase."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _number(value: Any, name: str, errors: List[str], cast=float):
    try:
        return cast(value)
    except (TypeError, ValueError):
        errors.append(f"{name}: expected a number, got {value!r}")
        return None


def _integer(value: Any, name: str, errors: List[str]) -> Optional[int]:
    """Like :func:`_number` but refuses fractional values instead of truncating."""
    number = _number(value, name, errors)
    if number is None:
        return None
    if not number.is_integer():
        errors.append(f"{name}: expected an integer, got {value!r}")
        return None
    return int(number)


def _size(data: Mapping[str, Any], prefix: str, errors: List[str]) -> Optional[Size]:
    w = _get(data, f"{prefix}_w", f"{prefix}W")
    h = _get(data, f"{prefix}_h", f"{prefix}H")
    if w is None and h is None:
        return None
    if w is None or h is None:
        errors.append(f"{prefix}: both width and height are required")
        return None
    w = _integer(w, f"{prefix}_w", errors)
    h = _integer(h, f"{prefix}_h", errors)
    if w is None or h is None:
        return None
    return (w, h)


def _resolve(path: Optional[str], base_dir: str) -> Optional[str]:
    if not path:
        return None
    path = os.path.expanduser(str(path))
    if os.path.isabs(path):
        return path
    return os.path.normpath(os.path.join(base_dir, path))


def _image_paths(raw: Any, base_dir: str, errors: List[str]) -> List[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        errors.append("images: expected a list")
        return []
    entries = []
    for pos, item in enumerate(raw):
        order: Any = pos
        if isinstance(item, str):
            path = item
        elif isinstance(item, Mapping):
            path = _get(item, "path", "url")
            if not path:
                errors.append(f"images[{pos}]: missing path")
                continue
            order = _number(_get(item, "order", default=pos), f"images[{pos}].order", errors)
        else:
            errors.append(f"images[{pos}]: expected a path or mapping")
            continue
        ext = os.path.splitext(str(path))[1].lower()
        if ext not in IMAGE_EXTS:
            errors.append(f"images[{pos}]: unsupported image type {str(path)!r}")
            continue
        entries.append((pos if order is None else order, pos, path))
    entries.sort(key=lambda e: (e[0], e[1]))
    return [_resolve(p, base_dir) for _, _, p in entries]


def parse_project(data: Mapping[str, Any], base_dir: str = ".") -> ProjectSpec:
    """Build a :class:`ProjectSpec` from a decoded project mapping.

    Raises :class:`InvalidConfiguration` listing every problem found.
    """
    if not isinstance(data, Mapping):
        raise InvalidConfiguration(["project file must contain a mapping"])
    errors: List[str] = []

    trans = _get(data, "transition", default={}) or {}
    kind = _get(trans, "type", "kind", default=TransitionKind.WIPE.value)
    direction = _get(trans, "direction", default=Direction.RIGHT.value)
    try:
        kind = TransitionKind(kind)
    except ValueError:
        errors.append(f"transition.type: unknown transition {kind!r}")
        kind = TransitionKind.WIPE
    try:
        direction = Direction(direction)
    except ValueError:
        errors.append(f"transition.direction: unknown direction {direction!r}")
        direction = Direction.RIGHT
    duration_ms = _number(
        _get(trans, "duration_ms", "durationMs", default=DEFAULT_TRANSITION_MS),
        "transition.duration_ms",
        errors,
    )

    tf = _get(data, "transform", default={}) or {}
    tx = _number(_get(tf, "x", default=0.0), "transform.x", errors)
    ty = _number(_get(tf, "y", default=0.0), "transform.y", errors)
    scale = _number(_get(tf, "scale", default=1.0), "transform.scale", errors)

    ex = _get(data, "export", default={}) or {}
    duration = _number(
        _get(ex, "duration_seconds", "durationSeconds", default=DEFAULT_DURATION_S),
        "export.duration_seconds",
        errors,
    )
    fps = _integer(_get(ex, "fps", default=DEFAULT_FPS), "export.fps", errors)

    fit = _get(data, "fit", default=FitMode.COVER.value)
    try:
        fit = FitMode(fit)
    except ValueError:
        errors.append(f"fit: unknown fit mode {fit!r}")
        fit = FitMode.COVER

    project = ProjectSpec(
        name=str(_get(data, "name", default="slideshow")),
        image_paths=_image_paths(data.get("images"), base_dir, errors),
        frame1_path=_resolve(_get(data, "frame1", "frame1_path", "frame1Url"), base_dir),
        frame2_path=_resolve(_get(data, "frame2", "frame2_path", "frame2Url"), base_dir),
        frame1_size=_size(data, "frame1", errors),
        frame2_size=_size(data, "frame2", errors),
    )
    if errors:
        raise InvalidConfiguration(errors)
    project.transition = TransitionSpec(kind, direction, duration_ms)
    project.transform = TransformSpec(tx, ty, scale)
    project.export = ExportSpec(duration, fps)
    project.fit = fit
    return project


def load_project(path: str) -> ProjectSpec:
    """Read a YAML (or JSON) project file."""
    with open(path, "r", encoding="utf8") as fh:
        try:
            data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise InvalidConfiguration([f"{path}: {e}"]) from e
    base_dir = os.path.dirname(os.path.abspath(path))
    project = parse_project(data, base_dir)
    logging.info(
        "project %s: %d images, %s/%s %.0fms",
        project.name,
        len(project.image_paths),
        project.transition.kind.value,
        project.transition.direction.value,
        project.transition.duration_ms,
    )
    return project


def build_render_config(
    project: ProjectSpec,
    loader: Callable[[str], ImageSource] = load_image,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> RenderConfig:
    """Decode the project's images and assemble a :class:`RenderConfig`.

    Canvas sizes not given explicitly come from the overlay images; the
    outer canvas falls back to the inner one.
    """
    images = load_images(project.image_paths, on_progress=on_progress, loader=loader)
    frame1 = loader(project.frame1_path) if project.frame1_path else None
    frame2 = loader(project.frame2_path) if project.frame2_path else None

    frame1_size = project.frame1_size
    if frame1_size is None:
        frame1_size = (frame1.width, frame1.height) if frame1 else DEFAULT_CANVAS
    frame2_size = project.frame2_size
    if frame2_size is None:
        frame2_size = (frame2.width, frame2.height) if frame2 else frame1_size

    return RenderConfig(
        images=tuple(images),
        frame1=frame1,
        frame2=frame2,
        frame1_size=frame1_size,
        frame2_size=frame2_size,
        transition=project.transition,
        transform=project.transform,
        export=project.export,
        fit=project.fit,
    )


def project_to_dict(project: ProjectSpec) -> Dict[str, Any]:
    """Inverse of :func:`parse_project`, for ``--dump`` style output."""
    out: Dict[str, Any] = {
        "name": project.name,
        "images": list(project.image_paths),
        "transition": {
            "type": project.transition.kind.value,
            "direction": project.transition.direction.value,
            "duration_ms": project.transition.duration_ms,
        },
        "transform": {
            "x": project.transform.x,
            "y": project.transform.y,
            "scale": project.transform.scale,
        },
        "export": {
            "duration_seconds": project.export.duration_seconds,
            "fps": project.export.fps,
        },
        "fit": project.fit.value,
    }
    for prefix, path, size in (
        ("frame1", project.frame1_path, project.frame1_size),
        ("frame2", project.frame2_path, project.frame2_size),
    ):
        if path:
            out[prefix] = path
        if size:
            out[f"{prefix}_w"], out[f"{prefix}_h"] = size
    return out
