"""Command mode: a timed window in which gaze directions become arrow-key presses."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from .vision import Point

__all__ = ["Direction", "CommandController", "dominant_direction", "COMMAND_TIMEOUT_MS"]

log = logging.getLogger(__name__)

COMMAND_TIMEOUT_MS = 5000


class Direction(Enum):
    """Arrow-key directions; the value is the label announced when a key is sent."""

    LEFT = "← Left"
    RIGHT = "→ Right"
    UP = "↑ Up"
    DOWN = "↓ Down"


def dominant_direction(direction: Point) -> Direction:
    """The arrow for the strongest component of a gaze vector (vertical wins ties)."""
    if abs(direction.x) > abs(direction.y):
        return Direction.RIGHT if direction.x > 0 else Direction.LEFT
    return Direction.DOWN if direction.y > 0 else Direction.UP


class CommandController:
    """Turns gaze directions into key presses while command mode is active.

    ``key_sender`` is called with a :class:`Direction` for every key that is
    sent; without one, the direction is only announced on the log.
    """

    def __init__(
        self,
        key_sender: Optional[Callable[[Direction], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._key_sender = key_sender
        self._clock = clock
        self._active = False
        self._activation_time = 0.0

    def activate_command_mode(self) -> None:
        """Start a command window, restarting its timeout."""
        self._active = True
        self._activation_time = self._clock()

    def deactivate_command_mode(self) -> None:
        """End the command window."""
        self._active = False

    def is_command_mode_active(self) -> bool:
        """True while activated and fewer than five seconds have passed."""
        if not self._active:
            return False
        elapsed_ms = int((self._clock() - self._activation_time) * 1000)
        return elapsed_ms < COMMAND_TIMEOUT_MS

    def execute_direction_command(self, direction: Point) -> Optional[Direction]:
        """Send the arrow key for ``direction``; returns it, or None when inactive."""
        if not self.is_command_mode_active():
            return None
        arrow = dominant_direction(direction)
        log.info(arrow.value)
        if self._key_sender is not None:
            self._key_sender(arrow)
        return arrow