from __future__ import annotations

import time
from typing import Dict, Optional

from ...core.config import settings
from ...core.logger import logger
from ..input.actuator import InputActuator
from .detector import SceneMatcher
from .graph import PathPlanner
from .registry import SceneRegistry, Transition
from .types import NavResult


class NavigationEngine:
    """识别当前界面 → 规划路径 → 逐步点击并确认到达。

    屏幕是唯一的状态来源，每一步都是"点击后轮询确认"。
    """

    def __init__(
        self,
        registry: SceneRegistry,
        matcher: SceneMatcher,
        actuator: InputActuator,
        *,
        poll_interval_ms: Optional[int] = None,
        min_confirm_ms: Optional[int] = None,
        step_settle_ms: Optional[int] = None,
        click_move_sec: Optional[float] = None,
    ) -> None:
        self.registry = registry
        self.matcher = matcher
        self.actuator = actuator
        self.planner = PathPlanner(registry)
        self.poll_interval_ms = settings.nav_poll_interval_ms if poll_interval_ms is None else poll_interval_ms
        self.min_confirm_ms = settings.nav_min_confirm_ms if min_confirm_ms is None else min_confirm_ms
        self.step_settle_ms = settings.nav_step_settle_ms if step_settle_ms is None else step_settle_ms
        self.click_move_sec = settings.nav_click_move_sec if click_move_sec is None else click_move_sec
        self._log = logger.bind(module="NavEngine")

    def match_value(self, scene_id: str) -> int:
        scene = self.registry.get(scene_id)
        if scene is None:
            return 0
        return self.matcher.match_value(scene)

    def identify_current_scene(self, hint: Optional[str] = None) -> Optional[str]:
        """扫描所有场景，返回得分最高者（同分取声明顺序靠前者）。

        hint 命中时直接返回，跳过全量扫描。
        """
        self._log.debug("扫描当前界面...")
        if hint is not None and self.match_value(hint) > 0:
            self._log.info(f"命中预期场景: [{hint}]")
            return hint

        best_id: Optional[str] = None
        best_value = 0
        scores: Dict[str, int] = {}
        for scene in self.registry.all():
            if scene.id == hint or scene.is_virtual:
                continue
            value = self.matcher.match_value(scene)
            scores[scene.id] = value
            if value > best_value:
                best_value = value
                best_id = scene.id

        if best_id is None:
            self._log.warning(f"无法识别当前界面，候选得分: {scores}")
            return None
        self._log.info(f"定位: [{best_id}] (得分: {best_value})")
        return best_id

    def wait_for_scene(self, scene_id: str, timeout_ms: int) -> bool:
        """轮询确认进入目标场景。"""
        start = time.monotonic()
        self._log.debug(f"确认进入 [{scene_id}]...")
        while (time.monotonic() - start) * 1000 < timeout_ms:
            if self.match_value(scene_id) > 0:
                elapsed_ms = int((time.monotonic() - start) * 1000)
                self._log.info(f"确认到达 [{scene_id}] (耗时 {elapsed_ms}ms)")
                return True
            time.sleep(self.poll_interval_ms / 1000.0)
        self._log.warning(f"等待超时 [{scene_id}] ({timeout_ms}ms)")
        return False

    def _click(self, step: Transition) -> None:
        x, y = step.coords
        self.actuator.move_to(x, y, self.click_move_sec)
        self.actuator.click(True, False, 0)

    def navigate(self, target_id: str) -> NavResult:
        if target_id not in self.registry:
            self._log.error(f"目标场景未声明: [{target_id}]")
            return NavResult.failed()

        start_id = self.identify_current_scene()
        if start_id is None:
            self._log.error("无法定位起点")
            return NavResult.failed()

        if start_id == target_id:
            self._log.info("已在目标位置")
            return NavResult.success()

        path = self.planner.find_path(start_id, target_id)
        if path is None:
            self._log.error(f"无路可走: [{start_id}] -> [{target_id}]")
            return NavResult.failed()
        self._log.info(f"规划路径: [{start_id}] -> [{target_id}] ({len(path)} 步)")

        for i, step in enumerate(path, start=1):
            self._log.info(f"[步骤 {i}/{len(path)}] 点击 {step.coords} -> [{step.target}]")
            self._click(step)

            if self.registry.is_virtual(step.target):
                self._log.info(f"到达关卡入口 [{step.target}]，移交控制权")
                time.sleep(step.post_delay / 1000.0)
                return NavResult.handover(step.target, step.handler)

            timeout_ms = max(step.post_delay, self.min_confirm_ms)
            if not self.wait_for_scene(step.target, timeout_ms):
                self._log.error(f"导航中断: 未能进入 [{step.target}]")
                actual = self.identify_current_scene()
                if actual is not None:
                    self._log.warning(f"当前实际位于: [{actual}]")
                return NavResult.failed()
            time.sleep(self.step_settle_ms / 1000.0)

        self._log.info("导航完成")
        return NavResult.success()


__all__ = ["NavigationEngine"]
