import threading
import time

import pytest

from tdbot.modules.input.actuator import GuardedActuator, NullActuator
from tdbot.modules.input.heartbeat import HeartbeatThread
from tdbot.modules.input.keys import key_code, key_name


@pytest.mark.parametrize(
    "key, code",
    [("a", 0x04), ("Z", 0x1D), ("1", 0x1E), ("9", 0x26), ("0", 0x27), ("esc", 0x29), ("\x1b", 0x29), ("space", 0x2C), ("tab", 0x2B)],
)
def test_key_code(key, code):
    assert key_code(key) == code


@pytest.mark.parametrize("key", ["", "f13", "?", "ctrl"])
def test_unknown_key_code(key):
    assert key_code(key) is None


def test_key_name_reverses_code():
    assert key_name(0x04) == "a"
    assert key_name(0x27) == "0"
    assert key_name(0x29) == "esc"
    assert key_name(0x2C) == "space"
    assert key_name(0xFF) is None


class _Flaky:
    def __init__(self):
        self.calls = []

    def move_to(self, x, y, duration):
        raise OSError("serial port gone")

    def key_click(self, key):
        self.calls.append(("key_click", key))

    def key_hold(self, key, ms):
        self.calls.append(("key_hold", key, ms))

    def heartbeat(self):
        self.calls.append(("heartbeat",))


def test_guarded_actuator_swallows_device_errors():
    inner = _Flaky()
    guarded = GuardedActuator(inner)

    guarded.move_to(10, 20, 0.1)
    guarded.move_to(10, 20, 0.1)
    guarded.key_click("a")

    assert guarded.error_count == 2
    assert inner.calls == [("key_click", "a")]


def test_guarded_actuator_drops_unknown_keys():
    inner = _Flaky()
    guarded = GuardedActuator(inner)

    guarded.key_click("f13")
    guarded.key_hold("ctrl", 100)
    guarded.key_hold("w", 250.7)

    assert inner.calls == [("key_hold", "w", 250)]
    assert guarded.error_count == 0


def test_guarded_actuator_holds_lock_during_call():
    lock = threading.Lock()
    seen = []

    class _Probe:
        def heartbeat(self):
            seen.append(lock.locked())

    GuardedActuator(_Probe(), lock).heartbeat()

    assert seen == [True]
    assert not lock.locked()


def test_null_actuator_accepts_everything():
    null = NullActuator()

    null.move_to(1, 2, 0.1)
    null.click()
    null.double_click()
    null.key_down(0x04)
    null.key_up()
    null.key_click("a")
    null.key_hold("a", 10)
    null.scroll(-3)
    null.heartbeat()


def test_heartbeat_thread_beats_until_stopped():
    inner = _Flaky()
    thread = HeartbeatThread(GuardedActuator(inner), interval_sec=0.01)

    thread.start()
    deadline = time.monotonic() + 2.0
    while thread.beats < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    thread.stop(timeout=1.0)

    assert thread.daemon
    assert not thread.is_alive()
    assert thread.beats >= 3
    assert inner.calls.count(("heartbeat",)) == thread.beats
