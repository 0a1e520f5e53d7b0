"""Command-line entry point: run the eye tracker over a directory of eye images."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterator

import numpy as np
from PIL import Image

from .tracker import EyeTracker
from .utils import get_config_path, load_config

__all__ = ["read_frames", "main"]

_IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".ppm", ".pgm"}


def _load_bgr(path: Path) -> np.ndarray:
    with Image.open(path) as image:
        rgb = np.asarray(image.convert("RGB"))
    return np.ascontiguousarray(rgb[..., ::-1])


def read_frames(directory) -> Iterator[np.ndarray]:
    """BGR frames from the image files in ``directory``, in file-name order."""
    path = Path(directory)
    if not path.is_dir():
        raise NotADirectoryError(f"not a directory: {directory}")
    files = sorted(
        p for p in path.iterdir() if p.is_file() and p.suffix.lower() in _IMAGE_SUFFIXES
    )
    return (_load_bgr(p) for p in files)


def _run(args: argparse.Namespace) -> int:
    print("Eye Tracking System Starting...")

    if not load_config(args.config or get_config_path()):
        print("Warning: Could not load config file, using defaults")

    try:
        frames = read_frames(args.frames)
    except NotADirectoryError:
        print(f"Failed to open frame source {args.frames}", file=sys.stderr)
        print("Failed to initialize eye tracker", file=sys.stderr)
        return 1

    output = Path(args.output) if args.output else None
    if output is not None:
        output.mkdir(parents=True, exist_ok=True)

    tracker = EyeTracker()
    print("Eye tracker initialized successfully")
    print("Double blink to activate command mode")
    print("Press Ctrl+C to exit")

    try:
        for index, result in enumerate(tracker.run(frames)):
            if output is not None:
                image = Image.fromarray(np.ascontiguousarray(result.frame[..., ::-1]))
                image.save(output / f"frame_{index:06d}.png")
    except KeyboardInterrupt:
        tracker.stop()

    print("Eye tracking system stopped")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="gazekeys",
        description="Turn double blinks and gaze shifts in eye images into arrow keys.",
    )
    parser.add_argument("frames", help="directory of eye images, processed in name order")
    parser.add_argument("--config", help="configuration file (default: per-user location)")
    parser.add_argument("--output", help="directory to write annotated frames to")
    args = parser.parse_args(argv)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_log = logging.getLogger("gazekeys")
    previous_level = package_log.level
    package_log.addHandler(handler)
    package_log.setLevel(logging.INFO)
    try:
        return _run(args)
    finally:
        package_log.removeHandler(handler)
        package_log.setLevel(previous_level)


if __name__ == "__main__":
    sys.exit(main())