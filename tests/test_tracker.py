import numpy as np

from gazekeys.commands import CommandController, Direction
from gazekeys.tracker import EyeTracker
from gazekeys.vision import Point


class FakeClock:
    def __init__(self, start=10.0):
        self.now = start

    def __call__(self):
        return self.now


class ScriptedBlinks:
    def __init__(self, blinks, doubles):
        self.blinks = list(blinks)
        self.doubles = list(doubles)

    def detect_blink(self, eye_roi):
        return self.blinks.pop(0) if self.blinks else False

    def check_double_blink_pattern(self):
        return self.doubles.pop(0) if self.doubles else False


class FixedGaze:
    def __init__(self, direction):
        self.direction = direction
        self.is_calibrated = False
        self.calibrations = 0

    def calibrate_baseline(self, eye_roi):
        self.is_calibrated = True
        self.calibrations += 1

    def detect_pupil_center(self, eye_roi):
        return Point(30.0, 30.0)

    def calculate_gaze_direction(self, eye_roi):
        return self.direction if self.is_calibrated else Point(0.0, 0.0)


def _frame():
    return np.zeros((64, 64, 3), dtype=np.uint8)


def _tracker(blinks, doubles, direction, clock=None):
    sent = []
    controller = CommandController(key_sender=sent.append, clock=clock or FakeClock())
    gaze = FixedGaze(direction)
    tracker = EyeTracker(ScriptedBlinks(blinks, doubles), gaze, controller)
    return tracker, gaze, sent


def test_double_blink_toggles_command_mode():
    tracker, gaze, _ = _tracker([True, True], [True, True], Point(0.0, 0.0))
    first = tracker.process_frame(_frame())
    assert first.command_mode_active is True
    assert gaze.calibrations == 1
    second = tracker.process_frame(_frame())
    assert second.command_mode_active is False
    assert tracker.command_mode_active is False


def test_single_blink_does_not_activate():
    tracker, gaze, _ = _tracker([True], [False], Point(0.0, 0.0))
    result = tracker.process_frame(_frame())
    assert result.command_mode_active is False
    assert gaze.calibrations == 0


def test_strong_gaze_sends_key():
    tracker, _, sent = _tracker([True], [True], Point(0.5, 0.1))
    tracker.process_frame(_frame())
    tracker.process_frame(_frame())
    assert sent == [Direction.RIGHT]


def test_weak_gaze_sends_nothing():
    tracker, _, sent = _tracker([True], [True], Point(0.2, 0.1))
    tracker.process_frame(_frame())
    tracker.process_frame(_frame())
    assert sent == []
    assert tracker.command_mode_active is True


def test_command_mode_times_out():
    clock = FakeClock()
    tracker, _, sent = _tracker([True], [True], Point(0.0, -0.9), clock=clock)
    tracker.process_frame(_frame())
    clock.now += 6.0
    result = tracker.process_frame(_frame())
    assert sent == []
    assert result.command_mode_active is False


def test_result_carries_annotated_copy():
    tracker, _, _ = _tracker([], [], Point(0.0, 0.0))
    frame = _frame()
    result = tracker.process_frame(frame)
    assert result.pupil == Point(30.0, 30.0)
    assert result.frame[30, 30].tolist() == [0, 255, 0]
    assert not frame.any()


def test_grayscale_frame_is_displayed_in_colour():
    tracker, _, _ = _tracker([], [], Point(0.0, 0.0))
    result = tracker.process_frame(np.zeros((40, 50), dtype=np.uint8))
    assert result.frame.shape == (40, 50, 3)


def test_run_stops_at_empty_frame():
    tracker, _, _ = _tracker([], [], Point(0.0, 0.0))
    frames = [_frame(), np.empty((0, 0, 3), dtype=np.uint8), _frame()]
    results = list(tracker.run(frames))
    assert len(results) == 1
    assert tracker.is_running is False


def test_run_processes_all_frames():
    tracker, _, _ = _tracker([], [], Point(0.0, 0.0))
    results = list(tracker.run([_frame() for _ in range(3)]))
    assert len(results) == 3


def test_stop_ends_run():
    tracker, _, _ = _tracker([], [], Point(0.0, 0.0))
    seen = 0
    for _ in tracker.run([_frame() for _ in range(5)]):
        seen += 1
        tracker.stop()
    assert seen == 1
    assert tracker.is_running is False


def test_default_components_on_blank_frame():
    tracker = EyeTracker()
    result = tracker.process_frame(np.zeros((24, 24, 3), dtype=np.uint8))
    assert result.command_mode_active is False
    assert result.pupil == Point(-1.0, -1.0)
    assert result.gaze == Point(0.0, 0.0)