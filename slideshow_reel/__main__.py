"""Command line interface for slideshow_reel."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import List

import yaml

from .config import ProjectSpec, build_render_config, load_project, project_to_dict
from .errors import DecodeFailure, ExportAborted, InvalidConfiguration
from .export import CODECS, FfmpegEncoder, export_slideshow
from .preview import render_still
from .timeline import timing_breakdown
from .transitions import Direction, TransitionKind
from .validate import validate_config


def _positive_float(x: str) -> float:
    v = float(x)
    if v <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return v


def _positive_int(x: str) -> int:
    v = int(x)
    if v <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return v


def _nonneg_int(x: str) -> int:
    v = int(x)
    if v < 0:
        raise argparse.ArgumentTypeError("--still must be >= 0")
    return v


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slideshow_reel",
        description="Render a looping image slideshow with transitions into a video",
    )
    parser.add_argument("project", help="Project file (YAML or JSON)")
    parser.add_argument("--out", "-o", dest="output", help="Output file or folder")
    parser.add_argument(
        "--out-naming",
        choices=["auto", "keep"],
        default="auto",
        help="auto: <name>-<transition>_<timestamp>.mp4, keep: use --out as given",
    )
    parser.add_argument("--out-prefix", default="", help="Prefix for auto-named files")
    parser.add_argument(
        "--profile", choices=["preview", "social", "quality"], default="social"
    )
    parser.add_argument("--codec", choices=sorted(CODECS), default="h264")
    parser.add_argument(
        "--preset", action="append", default=[], help="YAML file with option defaults"
    )
    parser.add_argument("--duration", type=_positive_float, help="Override export duration (s)")
    parser.add_argument("--fps", type=_positive_int, help="Override export fps")
    parser.add_argument(
        "--trans", choices=[k.value for k in TransitionKind], help="Override transition type"
    )
    parser.add_argument(
        "--direction", choices=[d.value for d in Direction], help="Override transition direction"
    )
    parser.add_argument(
        "--transition-ms", type=float, dest="transition_ms", help="Override transition duration (ms)"
    )
    parser.add_argument("--validate", action="store_true", help="Validate project and exit")
    parser.add_argument("--timing", action="store_true", help="Print timing breakdown and exit")
    parser.add_argument("--dump", action="store_true", help="Print the resolved project as YAML and exit")
    parser.add_argument("--still", type=_nonneg_int, help="Write a single frame as PNG and exit")
    parser.add_argument("--verbose", "-v", action="count", default=0)
    return parser


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    prelim, _ = parser.parse_known_args(argv)
    for path in prelim.preset:
        with open(path, "r", encoding="utf8") as fh:
            data = yaml.safe_load(fh) or {}
        parser.set_defaults(**{k.replace("-", "_"): v for k, v in data.items()})
    return parser.parse_args(argv)


def apply_overrides(project: ProjectSpec, args: argparse.Namespace) -> ProjectSpec:
    """Return *project* with command line overrides applied."""
    trans = project.transition
    if args.trans:
        trans = replace(trans, kind=TransitionKind(args.trans))
    if args.direction:
        trans = replace(trans, direction=Direction(args.direction))
    if args.transition_ms is not None:
        trans = replace(trans, duration_ms=float(args.transition_ms))
    export = project.export
    if args.duration is not None:
        export = replace(export, duration_seconds=float(args.duration))
    if args.fps is not None:
        export = replace(export, fps=int(args.fps))
    return replace(project, transition=trans, export=export)


def _resolve_out_path(args: argparse.Namespace, project: ProjectSpec, ext: str = ".mp4") -> str:
    base_folder = os.path.dirname(os.path.abspath(args.project))
    if args.out_naming == "keep" and args.output and not (
        args.output.endswith(os.sep) or os.path.isdir(args.output)
    ):
        out = args.output
        parent = os.path.dirname(os.path.abspath(out))
        os.makedirs(parent, exist_ok=True)
        return out
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    slug = Path(project.name).name.replace(" ", "_") or "slideshow"
    name = f"{args.out_prefix}{slug}-{project.transition.kind.value}_{ts}{ext}"
    out_dir = args.output if args.output else base_folder
    os.makedirs(out_dir, exist_ok=True)
    return os.path.join(out_dir, name)


def _print_timing(config) -> None:
    info = timing_breakdown(config)
    if info.adjusted:
        logging.warning(
            "transitions do not fit %.2fs; shortened to %.3fs each",
            config.export.duration_seconds,
            info.transition_seconds,
        )
    print(f"images:          {len(config.images)}")
    print(f"total frames:    {config.total_frames}")
    print(f"hold per image:  {info.hold_per_image:.3f}s")
    print(f"transition:      {info.transition_seconds:.3f}s")
    print(f"time per cycle:  {info.time_per_cycle:.3f}s")
    print(f"total cycles:    {info.total_cycles:.2f}")


def main(argv: List[str] | None = None) -> None:
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        project = apply_overrides(load_project(args.project), args)
    except InvalidConfiguration as e:
        for err in e.errors:
            print(f"validation error: {err}", file=sys.stderr)
        raise SystemExit(1)
    except OSError as e:
        raise SystemExit(f"cannot read project {args.project}: {e}")

    if args.dump:
        print(yaml.safe_dump(project_to_dict(project), sort_keys=False), end="")
        return

    try:
        config = build_render_config(project)
    except DecodeFailure as e:
        raise SystemExit(f"export aborted at frame 0 of {project.export.total_frames} ({e.kind}: {e})")

    errs = validate_config(config)
    if errs:
        for e in errs:
            print(f"validation error: {e}", file=sys.stderr)
        raise SystemExit(1)
    if args.validate:
        logging.info("project is valid")
        return
    if args.timing:
        _print_timing(config)
        return

    if args.still is not None:
        out_path = _resolve_out_path(args, project, ext=f"_{args.still:05d}.png")
        render_still(config, args.still).save(out_path)
        print(out_path)
        return

    ext = ".webm" if args.codec == "vp9" else ".mp4"
    out_path = _resolve_out_path(args, project, ext=ext)
    encoder = FfmpegEncoder.for_profile(out_path, args.profile, args.codec)
    try:
        export_slideshow(config, encoder)
    except ExportAborted as e:
        raise SystemExit(str(e))
    print(out_path)


if __name__ == "__main__":
    main()
