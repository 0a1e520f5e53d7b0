"""Pupil localisation and gaze direction relative to a calibrated baseline."""

from __future__ import annotations

import logging

import numpy as np

from .vision import (
    Point,
    adaptive_mean_threshold,
    contour_centroid,
    find_external_contours,
    gaussian_blur,
    hough_circles,
    largest_contour,
    to_gray,
)

__all__ = ["GazeEstimator", "preprocess_eye_image"]

log = logging.getLogger(__name__)

_NOT_FOUND = Point(-1.0, -1.0)
_ZERO = Point(0.0, 0.0)


def preprocess_eye_image(eye_roi: np.ndarray) -> np.ndarray:
    """Grayscale, blur and adaptively threshold an eye image."""
    blurred = gaussian_blur(to_gray(eye_roi), 5, 0)
    return adaptive_mean_threshold(blurred, 11, 2)


def _found(p: Point) -> bool:
    return p.x >= 0 and p.y >= 0


class GazeEstimator:
    """Estimates normalised gaze direction from pupil displacement."""

    def __init__(self, threshold: float = 0.05, deadzone: float = 0.1):
        self.movement_threshold = threshold
        self.deadzone_radius = deadzone
        self.baseline_pupil_pos = _NOT_FOUND
        self.eye_roi_size = (0, 0)
        self.is_calibrated = False

    def _pupil_by_circles(self, eye_roi: np.ndarray) -> Point:
        processed = preprocess_eye_image(eye_roi)
        rows = processed.shape[0]
        circles = hough_circles(processed, rows // 8, 100, 30, rows // 8, rows // 3)
        if not circles:
            return _NOT_FOUND
        best = circles[0]
        for circle in circles:
            if circle[2] > best[2]:
                best = circle
        return Point(best[0], best[1])

    def _pupil_by_contours(self, eye_roi: np.ndarray) -> Point:
        inverted = 255 - preprocess_eye_image(eye_roi)
        contours = find_external_contours(inverted)
        if not contours:
            return _NOT_FOUND
        centroid = contour_centroid(largest_contour(contours))
        return centroid if centroid is not None else _NOT_FOUND

    def detect_pupil_center(self, eye_roi: np.ndarray) -> Point:
        """Pupil centre in pixels, or ``Point(-1, -1)`` if none is found."""
        center = self._pupil_by_circles(eye_roi)
        if not _found(center):
            center = self._pupil_by_contours(eye_roi)
        return center

    def calculate_gaze_direction(self, eye_roi: np.ndarray) -> Point:
        """Pupil offset from baseline scaled by half the eye size; zero inside the dead zone."""
        if not self.is_calibrated:
            return _ZERO
        current = self.detect_pupil_center(eye_roi)
        if not _found(current):
            return _ZERO
        width, height = self.eye_roi_size
        relative = Point(
            (current.x - self.baseline_pupil_pos.x) / (width * 0.5),
            (current.y - self.baseline_pupil_pos.y) / (height * 0.5),
        )
        magnitude = relative.magnitude()
        if magnitude < self.deadzone_radius or magnitude < self.movement_threshold:
            return _ZERO
        return relative

    def calibrate_baseline(self, eye_roi: np.ndarray) -> None:
        """Record the current pupil position as the neutral gaze."""
        self.baseline_pupil_pos = self.detect_pupil_center(eye_roi)
        rows, cols = np.asarray(eye_roi).shape[:2]
        self.eye_roi_size = (cols, rows)
        if _found(self.baseline_pupil_pos):
            self.is_calibrated = True
            log.info("Baseline calibrated: %s", self.baseline_pupil_pos)