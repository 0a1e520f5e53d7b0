"""Paths, configuration, calibration storage, frame-rate counting and debug drawing."""

from __future__ import annotations

import json
import logging
import math
import os
import time
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .vision import Point

__all__ = [
    "FpsCounter",
    "get_config_path",
    "get_data_path",
    "load_config",
    "save_calibration_data",
    "load_calibration_data",
    "draw_debug_info",
]

log = logging.getLogger(__name__)

_WINDOWS = os.name == "nt"

# Colours in BGR order, as stored in frames.
_GREEN = (0, 255, 0)
_BLUE = (255, 0, 0)
_RED = (0, 0, 255)
_WHITE = (255, 255, 255)


def get_config_path() -> str:
    """Per-user location of the configuration file."""
    if _WINDOWS:
        appdata = os.environ.get("LOCALAPPDATA")
        if appdata:
            return appdata + "\\EyeTracker\\config.xml"
        return ".\\config.xml"
    home = os.environ.get("HOME")
    if home:
        return home + "/.eyetracker/config.xml"
    return "./config.xml"


def get_data_path() -> str:
    """Directory for data files, relative to the working directory."""
    return ".\\data\\" if _WINDOWS else "./data/"


def load_config(config_path: str | os.PathLike) -> bool:
    """True if the configuration file can be opened for reading."""
    try:
        with open(config_path, "rb"):
            pass
    except OSError:
        return False
    log.info("Config loaded from: %s", config_path)
    return True


def _storage_kind(filename: str | os.PathLike) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yml", ".yaml"):
        return "yaml"
    return "xml"


def save_calibration_data(filename: str | os.PathLike, baseline: Point) -> None:
    """Store a calibration baseline with a timestamp (XML, YAML or JSON by suffix)."""
    values = {
        "baseline_x": float(baseline.x),
        "baseline_y": float(baseline.y),
        "timestamp": int(time.time()),
    }
    kind = _storage_kind(filename)
    if kind == "json":
        text = json.dumps(values, indent=4) + "\n"
    elif kind == "yaml":
        text = "%YAML:1.0\n---\n" + "".join(f"{k}: {v!r}\n" for k, v in values.items())
    else:
        root = ET.Element("opencv_storage")
        for key, value in values.items():
            ET.SubElement(root, key).text = repr(value)
        text = '<?xml version="1.0"?>\n' + ET.tostring(root, encoding="unicode") + "\n"
    Path(filename).write_text(text, encoding="utf-8")


def _read_values(filename: str | os.PathLike, text: str) -> dict[str, str]:
    kind = _storage_kind(filename)
    if kind == "json":
        return {k: str(v) for k, v in json.loads(text).items()}
    if kind == "yaml":
        values = {}
        for line in text.splitlines():
            key, sep, value = line.partition(":")
            if sep and not line.startswith("%"):
                values[key.strip()] = value.strip()
        return values
    root = ET.fromstring(text)
    return {child.tag: (child.text or "").strip() for child in root}


def load_calibration_data(filename: str | os.PathLike) -> Point:
    """Read a stored baseline; ``Point(-1, -1)`` if the file cannot be opened."""
    try:
        text = Path(filename).read_text(encoding="utf-8")
    except OSError:
        return Point(-1.0, -1.0)
    values = _read_values(filename, text)
    return Point(
        float(values.get("baseline_x", -1.0)),
        float(values.get("baseline_y", -1.0)),
    )


def _rgb(bgr: tuple[int, int, int]) -> tuple[int, int, int]:
    return bgr[2], bgr[1], bgr[0]


def _draw_arrow(draw: ImageDraw.ImageDraw, start, end, color, width: int) -> None:
    draw.line([start, end], fill=color, width=width)
    length = math.hypot(end[0] - start[0], end[1] - start[1])
    if length == 0:
        return
    tip = 0.1 * length
    angle = math.atan2(start[1] - end[1], start[0] - end[0])
    for offset in (math.pi / 4, -math.pi / 4):
        wing = (end[0] + tip * math.cos(angle + offset), end[1] + tip * math.sin(angle + offset))
        draw.line([end, wing], fill=color, width=width)


def _draw_text(draw: ImageDraw.ImageDraw, baseline_origin, text: str, color) -> None:
    font = ImageFont.load_default()
    height = draw.textbbox((0, 0), text, font=font)[3]
    x, y = baseline_origin
    draw.text((x, y - height), text, fill=color, font=font)


def draw_debug_info(
    frame: np.ndarray,
    pupil_pos: Point,
    gaze_direction: Point,
    command_active: bool,
    fps: float,
) -> np.ndarray:
    """Draw pupil, gaze arrow, mode and frame rate onto a BGR frame in place."""
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise ValueError(f"expected a BGR frame, got shape {frame.shape}")
    rows, cols = frame.shape[:2]
    image = Image.fromarray(np.ascontiguousarray(frame[..., ::-1]).astype(np.uint8))
    draw = ImageDraw.Draw(image)

    if pupil_pos.x >= 0 and pupil_pos.y >= 0:
        x, y = round(pupil_pos.x), round(pupil_pos.y)
        draw.ellipse((x - 3, y - 3, x + 3, y + 3), fill=_rgb(_GREEN))

    if gaze_direction.x != 0 or gaze_direction.y != 0:
        center = (float(cols // 2), float(rows // 2))
        end = (center[0] + gaze_direction.x * 50, center[1] + gaze_direction.y * 50)
        _draw_arrow(draw, center, end, _rgb(_BLUE), 2)

    mode_text = "COMMAND ACTIVE" if command_active else "MONITORING"
    _draw_text(draw, (10, 30), mode_text, _rgb(_RED if command_active else _WHITE))
    _draw_text(draw, (10, rows - 10), f"FPS: {int(fps)}", _rgb(_WHITE))

    frame[...] = np.asarray(image)[..., ::-1]
    return frame


class FpsCounter:
    """Counts frames and reports the rate once at least a second has passed."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._last_time = clock()
        self._frame_count = 0

    def update(self) -> float:
        """Count one frame; the rate over the last period, or 0.0 mid-period."""
        self._frame_count += 1
        now = self._clock()
        elapsed_ms = int((now - self._last_time) * 1000)
        if elapsed_ms >= 1000:
            fps = self._frame_count * 1000.0 / elapsed_ms
            self._frame_count = 0
            self._last_time = now
            return fps
        return 0.0