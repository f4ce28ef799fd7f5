from tdbot.core.config import Settings
from tdbot.core.errors import ConfigError


def test_env_prefix_overrides_defaults(monkeypatch):
    monkeypatch.setenv("TDBOT_SCREEN_HEIGHT", "720")
    monkeypatch.setenv("TDBOT_WAVE_COOLDOWN_SEC", "30")
    monkeypatch.setenv("TDBOT_SAFE_ZONE", "[100, 120, 1180, 600]")

    cfg = Settings(_env_file=None)

    assert cfg.screen_height == 720
    assert cfg.wave_cooldown_sec == 30
    assert tuple(cfg.safe_zone) == (100, 120, 1180, 600)


def test_defaults_match_game_layout():
    cfg = Settings(_env_file=None)

    assert cfg.camera_move_threshold_px == 60
    assert cfg.camera_min_scroll_px == 10
    assert cfg.upgrade_hold_ms == 1500
    assert cfg.tool_key_list == ["4", "5", "6", "7"]


def test_tool_key_list_strips_blanks(monkeypatch):
    monkeypatch.setenv("TDBOT_TOOL_KEYS", '["4", " ", "6 "]')

    cfg = Settings(_env_file=None)

    assert cfg.tool_key_list == ["4", "6"]


def test_config_error_carries_path():
    err = ConfigError("maps/a.json", "缺少 'meta' 对象")

    assert isinstance(err, ValueError)
    assert err.path == "maps/a.json"
    assert str(err) == "maps/a.json: 缺少 'meta' 对象"


def test_build_refresh_repeat_from_env(monkeypatch):
    monkeypatch.setenv("TDBOT_BUILD_REFRESH_REPEAT", "0")

    cfg = Settings(_env_file=None)

    assert cfg.build_refresh_repeat == 0
    assert Settings(_env_file=None, build_refresh_repeat=2).build_refresh_repeat == 2
