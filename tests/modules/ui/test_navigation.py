import pytest

import tdbot.modules.ui.manager as manager_module
from tdbot.core.constants import NavStatus
from tdbot.modules.ui.detector import SceneMatcher
from tdbot.modules.ui.manager import NavigationEngine
from tdbot.modules.ui.registry import SceneDef, SceneRegistry, TextAnchor, Transition

TITLE_RECT = (0, 0, 200, 40)


class _Game:
    """屏幕只显示当前场景名；点击命中跳转坐标时切换场景。"""

    def __init__(self, current, links=None):
        self.current = current
        self.links = links or {}
        self.reads = 0

    def read(self, rect):
        self.reads += 1
        return self.current if tuple(rect) == TITLE_RECT else ""

    def sample(self, point):
        return None


class _GameActuator:
    def __init__(self, game):
        self.game = game
        self.pos = None
        self.calls = []

    def move_to(self, x, y, duration):
        self.pos = (x, y)
        self.calls.append(("move_to", x, y))

    def click(self, left=True, right=False, hold_ms=0):
        self.calls.append(("click", left, right))
        nxt = self.game.links.get(self.pos)
        if nxt is not None:
            self.game.current = nxt


def _real(scene_id, *transitions):
    return SceneDef(id=scene_id, texts=[TextAnchor(TITLE_RECT, scene_id)], transitions=list(transitions))


def _virtual(scene_id):
    return SceneDef(id=scene_id)


def _engine(registry, game):
    actuator = _GameActuator(game)
    engine = NavigationEngine(
        registry,
        SceneMatcher(game.read, game.sample),
        actuator,
        poll_interval_ms=200,
        min_confirm_ms=2000,
        step_settle_ms=300,
        click_move_sec=0.1,
    )
    return engine, actuator


@pytest.fixture()
def fake_time(patch_clock):
    return patch_clock(manager_module)


def test_handover_on_virtual_target_without_confirmation(fake_time):
    registry = SceneRegistry([
        _real("大厅", Transition(target="关卡入口", coords=(10, 20), post_delay=500)),
        _virtual("关卡入口"),
    ])
    game = _Game("大厅")
    engine, actuator = _engine(registry, game)

    result = engine.navigate("关卡入口")

    assert result.status is NavStatus.HANDOVER
    assert result.scene_id == "关卡入口"
    assert result.handler == "td"
    assert actuator.calls == [("move_to", 10, 20), ("click", True, False)]
    # 只有起点识别读过一次屏幕，没有到达确认轮询
    assert game.reads == 1
    assert fake_time.sleeps == [0.5]


def test_handover_forwards_transition_handler(fake_time):
    registry = SceneRegistry([
        _real("大厅", Transition(target="活动", coords=(1, 2), handler="event")),
        _virtual("活动"),
    ])
    engine, _ = _engine(registry, _Game("大厅"))

    result = engine.navigate("活动")

    assert result.status is NavStatus.HANDOVER
    assert result.handler == "event"


def test_unrecognized_screen_fails_without_clicking(fake_time):
    registry = SceneRegistry([
        _real("大厅", Transition(target="商店", coords=(5, 5))),
        _real("商店"),
    ])
    game = _Game("加载中")
    engine, actuator = _engine(registry, game)

    result = engine.navigate("商店")

    assert result.status is NavStatus.FAILED
    assert actuator.calls == []


def test_undeclared_target_fails_before_screen_io(fake_time):
    registry = SceneRegistry([_real("大厅")])
    game = _Game("大厅")
    engine, actuator = _engine(registry, game)

    result = engine.navigate("不存在")

    assert result.status is NavStatus.FAILED
    assert game.reads == 0
    assert actuator.calls == []


def test_already_at_target_is_success(fake_time):
    registry = SceneRegistry([_real("大厅", Transition(target="商店", coords=(5, 5))), _real("商店")])
    engine, actuator = _engine(registry, _Game("商店"))

    result = engine.navigate("商店")

    assert result.status is NavStatus.SUCCESS
    assert actuator.calls == []


def test_multi_step_navigation_confirms_each_step(fake_time):
    registry = SceneRegistry([
        _real("大厅", Transition(target="地图", coords=(100, 100))),
        _real("地图", Transition(target="空间站", coords=(200, 200))),
        _real("空间站"),
    ])
    game = _Game("大厅", links={(100, 100): "地图", (200, 200): "空间站"})
    engine, actuator = _engine(registry, game)

    result = engine.navigate("空间站")

    assert result.status is NavStatus.SUCCESS
    assert [c for c in actuator.calls if c[0] == "move_to"] == [("move_to", 100, 100), ("move_to", 200, 200)]
    assert game.current == "空间站"


def test_confirmation_timeout_fails(fake_time):
    registry = SceneRegistry([
        _real("大厅", Transition(target="商店", coords=(5, 5), post_delay=500)),
        _real("商店"),
    ])
    game = _Game("大厅")  # 点击无效，界面不变
    engine, actuator = _engine(registry, game)

    start = fake_time.now
    result = engine.navigate("商店")

    assert result.status is NavStatus.FAILED
    assert len([c for c in actuator.calls if c[0] == "click"]) == 1
    # 超时取 max(post_delay, min_confirm)
    assert fake_time.now - start >= 2.0


def test_unreachable_target_fails(fake_time):
    registry = SceneRegistry([_real("大厅"), _real("商店")])
    engine, actuator = _engine(registry, _Game("大厅"))

    assert engine.navigate("商店").status is NavStatus.FAILED
    assert actuator.calls == []


def test_identify_hint_short_circuits_scan(fake_time):
    registry = SceneRegistry([_real("大厅"), _real("商店"), _real("背包")])
    game = _Game("背包")
    engine, _ = _engine(registry, game)

    assert engine.identify_current_scene(hint="背包") == "背包"
    assert game.reads == 1


def test_identify_picks_highest_score_first_declared_on_tie(fake_time):
    rect2 = (0, 50, 200, 90)

    class _Screen(_Game):
        def read(self, rect):
            self.reads += 1
            return {TITLE_RECT: "大厅", rect2: "公告"}.get(tuple(rect), "")

    registry = SceneRegistry([
        SceneDef(id="一号", texts=[TextAnchor(TITLE_RECT, "大厅")]),
        SceneDef(id="二号", texts=[TextAnchor(TITLE_RECT, "大厅")]),
        SceneDef(id="三号", texts=[TextAnchor(TITLE_RECT, "大厅"), TextAnchor(rect2, "公告")]),
    ])
    engine, _ = _engine(registry, _Screen(""))

    assert engine.identify_current_scene() == "三号"

    registry_tie = SceneRegistry(registry.all()[:2])
    engine_tie, _ = _engine(registry_tie, _Screen(""))
    assert engine_tie.identify_current_scene() == "一号"
