from types import SimpleNamespace

import pytest


class RecordingActuator:
    """记录所有输入调用，便于断言动作序列。"""

    def __init__(self):
        self.calls = []

    def _record(self, *call):
        self.calls.append(call)

    def move_to(self, x, y, duration):
        self._record("move_to", x, y)

    def click(self, left=True, right=False, hold_ms=0):
        self._record("click", left, right)

    def double_click(self, left=True, right=False):
        self._record("double_click", left, right)

    def key_down(self, code):
        self._record("key_down", code)

    def key_up(self):
        self._record("key_up")

    def key_click(self, key):
        self._record("key_click", key)

    def key_hold(self, key, ms):
        self._record("key_hold", key, ms)

    def scroll(self, delta):
        self._record("scroll", delta)

    def heartbeat(self):
        self._record("heartbeat")

    def named(self, name):
        return [c for c in self.calls if c[0] == name]


class FakeClock:
    """sleep 只推进时间，不真正等待。"""

    def __init__(self, start=1000.0):
        self.now = start
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds):
        self.now += seconds

    def as_module(self):
        return SimpleNamespace(monotonic=self.monotonic, sleep=self.sleep, time=self.monotonic)


@pytest.fixture()
def actuator():
    return RecordingActuator()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def patch_clock(monkeypatch, clock):
    """把指定模块的 time 替换为假时钟。"""

    def _patch(*modules):
        for module in modules:
            monkeypatch.setattr(module, "time", clock.as_module())
        return clock

    return _patch
