"""
塔防关卡执行器

导航移交控制权后由主控调用 run(scene_id)：
加载关卡文件 → 点击开始 → 等待战斗 → 赛前准备 → 初始化视野 → 波次监控主循环。
"""
from __future__ import annotations

import time
from pathlib import Path
from typing import Dict, Optional, Sequence

from ...core.config import settings
from ...core.constants import STRATEGY_FILE_SUFFIX, TERRAIN_FILE_SUFFIX
from ...core.errors import ConfigError
from ...core.logger import logger
from ..input.actuator import InputActuator
from ..ui.types import TextReader
from .camera import CameraController
from .loader import load_strategy, load_terrain, load_traps
from .scheduler import TaskScheduler
from .types import (
    ClickAction,
    ExecutionState,
    KeyAction,
    LogAction,
    MapMeta,
    MoveAction,
    PrepAction,
    StrategyPlan,
    TrapConfigItem,
    WaitAction,
)
from .wave import WaveMonitor


class TowerDefenseApp:
    def __init__(
        self,
        actuator: InputActuator,
        text_reader: TextReader,
        *,
        data_dir: Optional[str] = None,
        traps_path: Optional[str] = None,
    ) -> None:
        self.actuator = actuator
        self.text_reader = text_reader
        self.data_dir = Path(data_dir or settings.data_dir)
        self.traps_path = Path(traps_path) if traps_path else self.data_dir / settings.traps_config_name
        self.state = ExecutionState()
        self._log = logger.bind(module="TowerDefense")

    def level_files(self, scene_id: str) -> tuple[Path, Path]:
        return (
            self.data_dir / f"{scene_id}{TERRAIN_FILE_SUFFIX}",
            self.data_dir / f"{scene_id}{STRATEGY_FILE_SUFFIX}",
        )

    @property
    def wave_rect(self) -> Sequence[int]:
        return settings.overlay_wave_rect if settings.use_wave_overlay else settings.hud_wave_rect

    def run(self, scene_id: str) -> bool:
        """执行一局，正常结束返回 True。"""
        self.state.reset()
        terrain_path, strategy_path = self.level_files(scene_id)
        self._log.info(f"加载配置: {terrain_path.name} | {strategy_path.name}")
        try:
            meta = load_terrain(terrain_path)
            plan = load_strategy(strategy_path)
            traps = load_traps(self.traps_path)
        except ConfigError as e:
            self._log.error(f"关卡配置加载失败: {e}")
            return False

        loadout = plan.effective_loadout(settings.loadout_size)
        monitor = WaveMonitor(self.text_reader, self.actuator, self.state)
        camera = CameraController(self.actuator, self.state, meta)
        scheduler = TaskScheduler(self.actuator, self.state, camera, plan, loadout=loadout)

        self.click_level_start()
        if monitor.wait_for_combat(self.wave_rect, settings.use_wave_overlay) is None:
            return False

        self.execute_prep_logic(loadout, traps)
        self.run_prep_actions(meta)
        camera.setup_view()

        return self.wave_loop(monitor, scheduler, plan)

    def click_level_start(self) -> None:
        self._log.info("点击游戏入口/开始按钮...")
        for x, y in settings.level_start_clicks:
            self.actuator.move_to(x, y, 0.5)
            self.actuator.click(True, False, 0)
            time.sleep(0.5)

    def execute_prep_logic(self, loadout: Sequence[str], traps: Dict[str, TrapConfigItem]) -> None:
        """打开携带界面，按顺序选择本局陷阱。"""
        self._log.info(f"执行赛前准备，携带: {list(loadout)}")
        self.actuator.key_click(settings.key_loadout)
        time.sleep(1.0)
        tx, ty = settings.loadout_tab_pos
        self.actuator.move_to(tx, ty, 0.5)
        self.actuator.click(True, False, 0)
        for name in list(loadout)[: settings.loadout_size]:
            trap = traps.get(name)
            if trap is None:
                self._log.warning(f"陷阱配置中找不到 [{name}]，跳过选择")
                continue
            x, y = trap.select_pos
            self.actuator.move_to(x, y, 0.5)
            self.actuator.click(True, False, 0)
            time.sleep(0.4)
        self.actuator.key_click(settings.key_loadout)
        time.sleep(0.5)

    def run_prep_actions(self, meta: MapMeta) -> None:
        for action in meta.prep_actions:
            self.perform(action)

    def perform(self, action: PrepAction) -> None:
        if isinstance(action, MoveAction):
            self.actuator.move_to(action.x, action.y, action.duration)
        elif isinstance(action, ClickAction):
            if action.x is not None and action.y is not None:
                self.actuator.move_to(action.x, action.y, 0.35)
            self.actuator.click(not action.right, action.right, 0)
        elif isinstance(action, KeyAction):
            if action.hold_ms > 0:
                self.actuator.key_hold(action.key, action.hold_ms)
            else:
                self.actuator.key_click(action.key)
        elif isinstance(action, WaitAction):
            time.sleep(action.ms / 1000.0)
        elif isinstance(action, LogAction):
            self._log.info(f"[地图脚本] {action.message}")
        else:
            raise TypeError(f"未知准备动作: {action!r}")

    def wave_loop(self, monitor: WaveMonitor, scheduler: TaskScheduler, plan: StrategyPlan) -> bool:
        self._log.info("进入自动化监控主循环...")
        last_seen = time.monotonic()
        while True:
            wave = monitor.read_wave(self.wave_rect, settings.use_wave_overlay)
            now = time.monotonic()
            if wave is not None:
                last_seen = now
            elif now - last_seen >= settings.level_end_idle_sec:
                self._log.info(
                    f"{settings.level_end_idle_sec:.0f}s 未读到波次，判定本局结束 "
                    f"(最后确认波次 {self.state.last_confirmed_wave})"
                )
                return self.state.last_confirmed_wave > 0

            if wave is not None and monitor.validate_transition(wave):
                scheduler.execute_wave_phase(wave, False)
                self._log.info(f"第 {wave} 波前期布防完成，按下 {settings.key_combat_start!r} 启动战斗阶段")
                self.actuator.key_click(settings.key_combat_start)
                time.sleep(1.0)
                scheduler.execute_wave_phase(wave, True)
                if plan.final_wave is not None and wave >= plan.final_wave:
                    self._log.info(f"已完成最终波次 {plan.final_wave}")
                    return True

            time.sleep(settings.wave_poll_interval_sec)


__all__ = ["TowerDefenseApp"]
