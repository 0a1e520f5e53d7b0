import math

import numpy as np
import pytest

from gazekeys.blink import BlinkDetector, eye_aspect_ratio


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _step_shape():
    img = np.zeros((30, 70, 3), dtype=np.uint8)
    img[10:12, 5:61] = 255
    img[12, 5:31] = 255
    return img


BLANK = np.zeros((30, 70, 3), dtype=np.uint8)


def _frames():
    """Return (low_ear_frame, high_ear_frame, threshold between them)."""
    probe = BlinkDetector()
    shape_ear = probe.calculate_ear(_step_shape())
    blank_ear = probe.calculate_ear(BLANK)
    assert blank_ear == 1.0
    assert math.isfinite(shape_ear) and shape_ear != 1.0
    if shape_ear < blank_ear:
        return _step_shape(), BLANK, (shape_ear + blank_ear) / 2
    return BLANK, _step_shape(), (shape_ear + blank_ear) / 2


def _blink(det, low, high):
    results = [det.detect_blink(low) for _ in range(3)]
    det.detect_blink(high)
    return results


def test_ear_of_short_contour_is_open():
    assert eye_aspect_ratio([(0, 0), (1, 0), (1, 1)]) == 1.0


def test_ear_from_six_points():
    pts = [(0, 0), (1, -1), (3, -1), (4, 0), (3, 1), (1, 1)]
    assert eye_aspect_ratio(pts) == pytest.approx(0.5)


def test_ear_zero_width_is_infinite():
    assert eye_aspect_ratio([(0, 0)] * 6) == math.inf


def test_blink_needs_consecutive_frames():
    low, high, thr = _frames()
    det = BlinkDetector(thr, 3, FakeClock())
    assert _blink(det, low, high) == [False, False, True]


def test_blink_reported_once_while_closed():
    low, _, thr = _frames()
    det = BlinkDetector(thr, 3, FakeClock())
    results = [det.detect_blink(low) for _ in range(6)]
    assert results.count(True) == 1


def test_double_blink_detected_and_cleared():
    low, high, thr = _frames()
    clock = FakeClock()
    det = BlinkDetector(thr, 3, clock)
    _blink(det, low, high)
    clock.now = 0.3
    _blink(det, low, high)
    assert det.check_double_blink_pattern() is True
    assert det.check_double_blink_pattern() is False


@pytest.mark.parametrize("gap", [0.05, 1.0])
def test_double_blink_interval_limits(gap):
    low, high, thr = _frames()
    clock = FakeClock()
    det = BlinkDetector(thr, 3, clock)
    _blink(det, low, high)
    clock.now = gap
    _blink(det, low, high)
    assert det.check_double_blink_pattern() is False


def test_old_blinks_are_ignored():
    low, high, thr = _frames()
    clock = FakeClock()
    det = BlinkDetector(thr, 3, clock)
    _blink(det, low, high)
    clock.now = 0.3
    _blink(det, low, high)
    clock.now = 6.0
    assert det.check_double_blink_pattern() is False


def test_reset_forgets_history():
    low, high, thr = _frames()
    clock = FakeClock()
    det = BlinkDetector(thr, 3, clock)
    _blink(det, low, high)
    det.reset()
    clock.now = 0.3
    _blink(det, low, high)
    assert det.check_double_blink_pattern() is False