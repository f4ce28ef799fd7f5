import pytest

import tdbot.modules.tower_defense.wave as wave_module
from tdbot.modules.tower_defense.types import ExecutionState
from tdbot.modules.tower_defense.wave import WaveMonitor

RECT = (262, 16, 389, 97)


class _Reader:
    def __init__(self, *texts):
        self.texts = list(texts)
        self.rects = []

    def __call__(self, rect):
        self.rects.append(tuple(rect))
        if len(self.texts) > 1:
            return self.texts.pop(0)
        return self.texts[0] if self.texts else ""


@pytest.fixture()
def fake_time(patch_clock):
    return patch_clock(wave_module)


def _monitor(actuator, clock, *texts):
    state = ExecutionState()
    state.last_wave_change_time = clock.now
    monitor = WaveMonitor(
        _Reader(*texts),
        actuator,
        state,
        aux_key="tab",
        aux_settle_ms=300,
        cooldown_sec=60,
    )
    return monitor, state


@pytest.mark.parametrize(
    "text, expected",
    [
        ("波次12", 12),
        ("第波次3关", 3),
        ("波次", None),
        ("", None),
        ("12波", None),
    ],
)
def test_parse_hud_wave(actuator, clock, text, expected):
    monitor, _ = _monitor(actuator, clock)

    assert monitor.parse_wave(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("12波", 12),
        ("7 第 波", 7),
        ("波次12", None),
        ("x12波", None),
    ],
)
def test_parse_overlay_wave(actuator, clock, text, expected):
    monitor, _ = _monitor(actuator, clock)

    assert monitor.parse_wave(text, use_auxiliary_overlay=True) == expected


def test_overlay_read_holds_aux_key_then_restores(actuator, fake_time):
    monitor, _ = _monitor(actuator, fake_time, "5波")

    assert monitor.read_wave(RECT, use_auxiliary_overlay=True) == 5
    assert actuator.calls == [("key_down", 0x2B), ("key_up",), ("key_click", "tab")]
    assert fake_time.sleeps == [0.3]


def test_hud_read_has_no_input(actuator, fake_time):
    monitor, _ = _monitor(actuator, fake_time, "波次4")

    assert monitor.read_wave(RECT) == 4
    assert actuator.calls == []


def test_overlay_key_released_when_reader_fails(actuator, fake_time):
    state = ExecutionState()

    def _broken(rect):
        raise RuntimeError("ocr down")

    monitor = WaveMonitor(_broken, actuator, state, aux_key="tab", aux_settle_ms=0)

    with pytest.raises(RuntimeError):
        monitor.read_wave(RECT, use_auxiliary_overlay=True)
    assert ("key_up",) in actuator.calls


def test_first_wave_accepted_without_cooldown(actuator, fake_time):
    monitor, state = _monitor(actuator, fake_time)

    assert monitor.validate_transition(1) is True
    assert state.last_confirmed_wave == 1
    assert state.last_wave_change_time == fake_time.now


def test_skipped_or_repeated_wave_rejected(actuator, fake_time):
    monitor, state = _monitor(actuator, fake_time)
    monitor.validate_transition(1)
    fake_time.advance(120)

    assert monitor.validate_transition(3) is False
    assert monitor.validate_transition(1) is False
    assert monitor.validate_transition(0) is False
    assert state.last_confirmed_wave == 1


def test_rapid_sequence_only_accepts_after_cooldown(actuator, fake_time):
    monitor, state = _monitor(actuator, fake_time)
    accepted = []

    for wave in (1, 2, 2, 3):
        if monitor.validate_transition(wave):
            accepted.append(wave)
        fake_time.advance(3)
    assert accepted == [1]

    fake_time.advance(60)
    assert monitor.validate_transition(3) is False
    assert monitor.validate_transition(2) is True

    fake_time.advance(10)
    assert monitor.validate_transition(3) is False
    fake_time.advance(50)
    assert monitor.validate_transition(3) is True
    assert state.last_confirmed_wave == 3


def test_wait_for_combat_returns_first_positive_wave(actuator, fake_time):
    monitor, state = _monitor(actuator, fake_time, "", "载入中", "波次1")

    wave = monitor.wait_for_combat(RECT, timeout_sec=30, poll_sec=1.0)

    assert wave == 1
    assert fake_time.sleeps == [1.0, 1.0]
    assert state.last_wave_change_time == fake_time.now
    # 进入战斗不算确认波次
    assert state.last_confirmed_wave == 0


def test_wait_for_combat_times_out(actuator, fake_time):
    monitor, _ = _monitor(actuator, fake_time, "")

    assert monitor.wait_for_combat(RECT, timeout_sec=5, poll_sec=1.0) is None
    assert len(fake_time.sleeps) == 5
