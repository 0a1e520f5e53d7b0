"""The frame-processing loop tying blink, gaze and command handling together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import numpy as np

from .blink import BlinkDetector
from .commands import CommandController
from .gaze import GazeEstimator
from .utils import FpsCounter, draw_debug_info
from .vision import Point

__all__ = ["EyeTracker", "FrameResult"]

log = logging.getLogger(__name__)

GAZE_COMMAND_MAGNITUDE = 0.3


@dataclass
class FrameResult:
    """What one processed frame produced."""

    frame: np.ndarray
    pupil: Point
    gaze: Point
    command_mode_active: bool


class EyeTracker:
    """Runs blink detection and gaze-driven commands over a stream of eye images."""

    def __init__(
        self,
        blink_detector: Optional[BlinkDetector] = None,
        gaze_estimator: Optional[GazeEstimator] = None,
        command_controller: Optional[CommandController] = None,
    ):
        self.blink_detector = blink_detector if blink_detector is not None else BlinkDetector()
        self.gaze_estimator = gaze_estimator if gaze_estimator is not None else GazeEstimator()
        self.command_controller = (
            command_controller if command_controller is not None else CommandController()
        )
        self.is_running = False
        self.command_mode_active = False
        self._fps = FpsCounter()

    def _handle_double_blink(self) -> None:
        log.info("Double blink detected!")
        if not self.command_mode_active:
            self.command_controller.activate_command_mode()
            self.command_mode_active = True
            log.info("Command mode activated")
        else:
            self.command_controller.deactivate_command_mode()
            self.command_mode_active = False
            log.info("Command mode deactivated")

    def _handle_gaze_direction(self, direction: Point) -> None:
        if direction.magnitude() > GAZE_COMMAND_MAGNITUDE:
            self.command_controller.execute_direction_command(direction)
        if not self.command_controller.is_command_mode_active():
            self.command_mode_active = False

    def process_frame(self, frame: np.ndarray) -> FrameResult:
        """Process one eye image; the input is left untouched."""
        eye_roi = np.array(frame, copy=True)

        if self.blink_detector.detect_blink(eye_roi):
            if self.blink_detector.check_double_blink_pattern():
                self._handle_double_blink()

        if self.command_mode_active:
            if not self.gaze_estimator.is_calibrated:
                self.gaze_estimator.calibrate_baseline(eye_roi)
            else:
                self._handle_gaze_direction(
                    self.gaze_estimator.calculate_gaze_direction(eye_roi)
                )

        pupil = self.gaze_estimator.detect_pupil_center(eye_roi)
        gaze = self.gaze_estimator.calculate_gaze_direction(eye_roi)

        display = np.array(frame, dtype=np.uint8, copy=True)
        if display.ndim == 2:
            display = np.repeat(display[..., np.newaxis], 3, axis=2)
        draw_debug_info(display, pupil, gaze, self.command_mode_active, self._fps.update())
        return FrameResult(display, pupil, gaze, self.command_mode_active)

    def run(self, frames: Iterable[Optional[np.ndarray]]) -> Iterator[FrameResult]:
        """Process frames until they run out, an empty frame arrives or ``stop`` is called."""
        self.is_running = True
        try:
            for frame in frames:
                if not self.is_running:
                    break
                if frame is None or np.asarray(frame).size == 0:
                    log.error("Failed to capture frame")
                    break
                yield self.process_frame(frame)
        finally:
            self.stop()

    def stop(self) -> None:
        """End the processing loop."""
        self.is_running = False