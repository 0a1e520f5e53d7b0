import pytest

from gazekeys.commands import CommandController, Direction, dominant_direction
from gazekeys.vision import Point


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now


@pytest.mark.parametrize(
    "vector, expected",
    [
        (Point(0.5, 0.1), Direction.RIGHT),
        (Point(-0.5, 0.1), Direction.LEFT),
        (Point(0.1, 0.5), Direction.DOWN),
        (Point(0.1, -0.5), Direction.UP),
        (Point(0.4, 0.4), Direction.DOWN),
        (Point(-0.4, -0.4), Direction.UP),
        (Point(0.0, 0.0), Direction.UP),
    ],
)
def test_dominant_direction(vector, expected):
    assert dominant_direction(vector) is expected


@pytest.mark.parametrize(
    "vector, label",
    [
        (Point(1.0, 0.0), "→ Right"),
        (Point(-1.0, 0.0), "← Left"),
        (Point(0.0, 1.0), "↓ Down"),
        (Point(0.0, -1.0), "↑ Up"),
    ],
)
def test_direction_labels(vector, label):
    assert dominant_direction(vector).value == label


def test_inactive_by_default():
    controller = CommandController(clock=FakeClock())
    assert controller.is_command_mode_active() is False


def test_timeout_expires_after_five_seconds():
    clock = FakeClock()
    controller = CommandController(clock=clock)
    controller.activate_command_mode()
    assert controller.is_command_mode_active() is True
    clock.now += 4.999
    assert controller.is_command_mode_active() is True
    clock.now += 0.001
    assert controller.is_command_mode_active() is False


def test_reactivation_restarts_timeout():
    clock = FakeClock()
    controller = CommandController(clock=clock)
    controller.activate_command_mode()
    clock.now += 4.0
    controller.activate_command_mode()
    clock.now += 4.0
    assert controller.is_command_mode_active() is True


def test_deactivate():
    controller = CommandController(clock=FakeClock())
    controller.activate_command_mode()
    controller.deactivate_command_mode()
    assert controller.is_command_mode_active() is False


def test_execute_sends_key_when_active():
    sent = []
    controller = CommandController(key_sender=sent.append, clock=FakeClock())
    controller.activate_command_mode()
    result = controller.execute_direction_command(Point(-0.8, 0.2))
    assert result is Direction.LEFT
    assert sent == [Direction.LEFT]


def test_execute_does_nothing_when_inactive():
    sent = []
    clock = FakeClock()
    controller = CommandController(key_sender=sent.append, clock=clock)
    assert controller.execute_direction_command(Point(0.8, 0.0)) is None
    controller.activate_command_mode()
    clock.now += 10.0
    assert controller.execute_direction_command(Point(0.8, 0.0)) is None
    assert sent == []


def test_execute_without_sender_still_reports_direction():
    controller = CommandController(clock=FakeClock())
    controller.activate_command_mode()
    assert controller.execute_direction_command(Point(0.0, 0.9)) is Direction.DOWN