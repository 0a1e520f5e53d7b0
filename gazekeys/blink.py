"""Blink detection from the eye aspect ratio of the eye contour."""

from __future__ import annotations

import math
import time
from typing import Callable

import numpy as np

from .vision import find_external_contours, largest_contour, otsu_threshold, to_gray

__all__ = ["BlinkDetector", "eye_aspect_ratio"]

MAX_BLINK_INTERVAL_MS = 800
MIN_BLINK_INTERVAL_MS = 100
BLINK_MEMORY_MS = 5000


def _distance(a, b) -> float:
    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def eye_aspect_ratio(contour) -> float:
    """EAR from the first six contour points; 1.0 (open) if there are fewer."""
    if len(contour) < 6:
        return 1.0
    vertical_1 = _distance(contour[1], contour[5])
    vertical_2 = _distance(contour[2], contour[4])
    horizontal = _distance(contour[0], contour[3])
    if horizontal == 0:
        return math.inf
    return (vertical_1 + vertical_2) / (2.0 * horizontal)


def _ms_between(later: float, earlier: float) -> int:
    return int((later - earlier) * 1000)


class BlinkDetector:
    """Detects blinks and double-blink patterns over a stream of eye images."""

    def __init__(
        self,
        threshold: float = 0.25,
        frames: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ear_threshold = threshold
        self.consecutive_frames = frames
        self._clock = clock
        self._frame_counter = 0
        self._is_blinking = False
        self._blink_times: list[float] = []
        self.last_blink_time: float | None = None

    def calculate_ear(self, eye_roi: np.ndarray) -> float:
        """Eye aspect ratio of the largest bright region in the image."""
        contours = find_external_contours(otsu_threshold(to_gray(eye_roi)))
        if not contours:
            return 1.0
        return eye_aspect_ratio(largest_contour(contours))

    def detect_blink(self, eye_roi: np.ndarray) -> bool:
        """Feed one frame; True on the frame where a new blink is recognised."""
        if self.calculate_ear(eye_roi) < self.ear_threshold:
            self._frame_counter += 1
            if self._frame_counter >= self.consecutive_frames and not self._is_blinking:
                self._is_blinking = True
                now = self._clock()
                self._blink_times.append(now)
                self.last_blink_time = now
                return True
        else:
            self._is_blinking = False
            self._frame_counter = 0
        return False

    def check_double_blink_pattern(self) -> bool:
        """True if the last two recent blinks form a double blink; clears history then."""
        if len(self._blink_times) < 2:
            return False
        now = self._clock()
        recent = [t for t in self._blink_times if _ms_between(now, t) <= BLINK_MEMORY_MS]
        if len(recent) >= 2:
            interval = _ms_between(recent[-1], recent[-2])
            if MIN_BLINK_INTERVAL_MS <= interval <= MAX_BLINK_INTERVAL_MS:
                self._blink_times.clear()
                return True
        return False

    def reset(self) -> None:
        """Forget all blink history and frame state."""
        self._blink_times.clear()
        self._frame_counter = 0
        self._is_blinking = False