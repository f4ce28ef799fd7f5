"""
核心配置模块
"""
from typing import List, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """系统配置（环境变量前缀 TDBOT_，支持 .env）"""

    model_config = SettingsConfigDict(
        env_prefix="TDBOT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # 日志
    log_level: str = Field(default="INFO")
    log_path: str = Field(default="./logs")
    log_retention_days: int = Field(default=3)
    log_console_enabled: bool = Field(default=True)

    # 屏幕
    screen_width: int = Field(default=1920)
    screen_height: int = Field(default=1080)

    # 配置文件
    ui_map_path: str = Field(default="ui_map.toml")
    data_dir: str = Field(default=".")
    traps_config_name: str = Field(default="traps_config.json")

    # OCR
    paddle_ocr_lang: str = Field(default="ch")
    ocr_model_dir: str = Field(default="./models/ocr")
    ocr_min_confidence: float = Field(default=0.5)

    # 导航
    nav_click_move_sec: float = Field(default=0.6)
    nav_poll_interval_ms: int = Field(default=200)
    nav_min_confirm_ms: int = Field(default=2000)
    nav_step_settle_ms: int = Field(default=300)

    # 主循环
    handover_backoff_sec: float = Field(default=5.0)
    failed_backoff_sec: float = Field(default=3.0)
    startup_delay_sec: float = Field(default=5.0)
    heartbeat_interval_sec: float = Field(default=1.0)
    reset_escape_repeat: int = Field(default=2)

    # 波次识别
    hud_wave_rect: Tuple[int, int, int, int] = Field(default=(262, 16, 389, 97))
    overlay_wave_rect: Tuple[int, int, int, int] = Field(default=(820, 90, 1100, 160))
    use_wave_overlay: bool = Field(default=False)
    hud_wave_pattern: str = Field(default=r"波次(\d+)")
    overlay_wave_pattern: str = Field(default=r"^(\d+)\D{0,8}?波")
    aux_overlay_key: str = Field(default="tab")
    aux_overlay_settle_ms: int = Field(default=300)
    wave_cooldown_sec: float = Field(default=60.0)
    wave_poll_interval_sec: float = Field(default=1.5)
    combat_wait_timeout_sec: float = Field(default=300.0)
    level_end_idle_sec: float = Field(default=180.0)

    # 视野与镜头
    safe_zone: Tuple[int, int, int, int] = Field(default=(200, 200, 1720, 880))
    camera_speed_px_per_sec: float = Field(default=720.0)
    camera_move_threshold_px: float = Field(default=60.0)
    camera_min_scroll_px: float = Field(default=10.0)
    camera_edge_align_ms: int = Field(default=3000)
    camera_settle_ms: int = Field(default=400)

    # 按键绑定
    key_camera_up: str = Field(default="w")
    key_camera_down: str = Field(default="s")
    key_camera_left: str = Field(default="a")
    key_demolish_confirm: str = Field(default="e")
    key_upgrade: str = Field(default="u")
    key_combat_start: str = Field(default="g")
    key_loadout: str = Field(default="n")
    key_overview: str = Field(default="o")
    tool_keys: List[str] = Field(default=["4", "5", "6", "7"])
    fallback_tool_key: str = Field(default="1")
    build_refresh_alt_key: str = Field(default="3")

    # 动作重复与延时
    demolish_confirm_repeat: int = Field(default=2)
    demolish_confirm_gap_ms: int = Field(default=150)
    # 工具栏刷新: key -> 其他键 的轮数，0 关闭
    build_refresh_repeat: int = Field(default=1)
    upgrade_hold_ms: int = Field(default=1500)
    action_move_sec: float = Field(default=0.35)
    action_settle_ms: int = Field(default=250)
    key_settle_ms: int = Field(default=200)

    # 关卡入口
    level_start_clicks: List[Tuple[int, int]] = Field(default=[(1700, 950), (1110, 670)])
    loadout_tab_pos: Tuple[int, int] = Field(default=(212, 294))
    loadout_size: int = Field(default=4)

    @property
    def tool_key_list(self) -> List[str]:
        """获取陷阱槽位按键列表"""
        return [k.strip() for k in self.tool_keys if k.strip()]


# 全局配置实例
settings = Settings()
