import pytest

import tdbot.main as main_module
import tdbot.modules.diagnostics as diagnostics_module
from tdbot.core.constants import DiagnosticMode
from tdbot.modules.input.actuator import NullActuator
from tdbot.modules.ui.types import NavResult


class _Engine:
    def __init__(self, result):
        self.result = result
        self.targets = []

    def navigate(self, target):
        self.targets.append(target)
        return self.result


@pytest.fixture()
def fake_time(patch_clock):
    return patch_clock(main_module)


def test_handover_runs_level_then_backs_off(actuator, fake_time):
    ran = []
    engine = _Engine(NavResult.handover("空间站普通"))

    result = main_module.run_cycle(engine, actuator, "空间站普通", lambda scene: ran.append(scene) or True)

    assert result.scene_id == "空间站普通"
    assert engine.targets == ["空间站普通"]
    assert ran == ["空间站普通"]
    assert actuator.calls == []
    assert fake_time.sleeps == [5.0]


def test_level_runner_crash_does_not_escape(actuator, fake_time):
    def _boom(scene):
        raise RuntimeError("level crashed")

    main_module.run_cycle(_Engine(NavResult.handover("关卡")), actuator, "关卡", _boom)

    assert fake_time.sleeps == [5.0]


def test_unknown_handler_still_runs_level(actuator, fake_time):
    ran = []
    engine = _Engine(NavResult.handover("活动", handler="event"))

    main_module.run_cycle(engine, actuator, "活动", ran.append)

    assert ran == ["活动"]


def test_failed_navigation_resets_with_escape(actuator, fake_time):
    ran = []

    main_module.run_cycle(_Engine(NavResult.failed()), actuator, "关卡", ran.append)

    assert ran == []
    assert actuator.calls == [
        ("key_hold", "esc", 100),
        ("key_hold", "esc", 100),
        ("key_hold", "space", 100),
    ]
    assert fake_time.sleeps[-1] == 3.0


def test_success_waits_before_next_cycle(actuator, fake_time):
    main_module.run_cycle(_Engine(NavResult.success()), actuator, "大厅", lambda scene: True)

    assert actuator.calls == []
    assert fake_time.sleeps == [5.0]


def test_null_port_gives_null_actuator():
    assert isinstance(main_module.create_actuator("NULL"), NullActuator)
    assert isinstance(main_module.create_actuator(" null "), NullActuator)


def test_unavailable_desktop_falls_back_to_null(monkeypatch):
    import tdbot.modules.input.software as software_module

    class _NoDisplay:
        def __init__(self):
            raise RuntimeError("no display")

    monkeypatch.setattr(software_module, "SoftwareActuator", _NoDisplay)

    assert isinstance(main_module.create_actuator("COM3"), NullActuator)
    assert isinstance(main_module.create_actuator("SOFT"), NullActuator)


def test_parser_defaults():
    args = main_module.build_parser().parse_args([])

    assert args.port == "COM3"
    assert args.target == "空间站普通"
    assert args.test is None
    assert args.ui_map is None


def test_parser_rejects_unknown_test_mode():
    with pytest.raises(SystemExit):
        main_module.build_parser().parse_args(["--test", "gpu"])


def test_main_exits_when_scene_map_missing(tmp_path, monkeypatch, fake_time):
    monkeypatch.setattr(main_module, "setup_logger", lambda: None)

    code = main_module.main(["--port", "NULL", "--ui-map", str(tmp_path / "missing.toml")])

    assert code == 2


def test_main_runs_diagnostic_and_exits(monkeypatch, fake_time):
    monkeypatch.setattr(main_module, "setup_logger", lambda: None)
    monkeypatch.setattr(diagnostics_module, "time", fake_time.as_module())
    modes = []
    monkeypatch.setattr(diagnostics_module, "run_diagnostic", lambda mode, act, reader: modes.append(mode))

    code = main_module.main(["--port", "NULL", "--test", "scroll"])

    assert code == 0
    assert modes == [DiagnosticMode.SCROLL]
