"""
波次任务调度

每个 (波次, 阶段) 调用一次 execute_wave_phase：
1. 收集未完成的拆除 / 建造 / 升级任务，计算地图坐标
2. 拆除先于建造，对整个波次生效（避免拆掉其他任务刚要用的格子）
3. 空间任务按地图上下半区分批：整批都在安全区内则不动镜头，
   否则先对齐该半区的边界，再按行顺序执行（上半区从上往下，下半区从下往上）
4. 升级任务无坐标，最后在当前镜头位置执行

动作执行后立即记入完成集合；游戏没有反馈通道，只保证"至多下发一次"。
"""
from __future__ import annotations

import time
from typing import Dict, List, Optional, Sequence

from ...core.config import settings
from ...core.constants import CameraEdge, MapRegion, TaskKind
from ...core.logger import logger
from ..input.actuator import InputActuator
from .camera import CameraController
from .types import (
    BuildingTask,
    DemolishTask,
    ExecutionState,
    ScheduledTask,
    StrategyPlan,
    UpgradeTask,
)


class TaskScheduler:
    def __init__(
        self,
        actuator: InputActuator,
        state: ExecutionState,
        camera: CameraController,
        plan: StrategyPlan,
        *,
        loadout: Optional[Sequence[str]] = None,
    ) -> None:
        self.actuator = actuator
        self.state = state
        self.camera = camera
        self.plan = plan
        self.loadout: List[str] = list(loadout if loadout is not None else plan.effective_loadout(settings.loadout_size))
        self.tool_keys = settings.tool_key_list
        self.fallback_key = settings.fallback_tool_key
        self.refresh_alt_key = settings.build_refresh_alt_key
        self.build_refresh_repeat = max(0, settings.build_refresh_repeat)
        self.demolish_key = settings.key_demolish_confirm
        self.demolish_repeat = max(1, settings.demolish_confirm_repeat)
        self.demolish_gap_ms = settings.demolish_confirm_gap_ms
        self.upgrade_key = settings.key_upgrade
        self.upgrade_hold_ms = settings.upgrade_hold_ms
        self.move_sec = settings.action_move_sec
        self.action_settle_ms = settings.action_settle_ms
        self.key_settle_ms = settings.key_settle_ms
        self._log = logger.bind(module="Scheduler")

    # ── 查询 ──

    def tool_key(self, name: str) -> str:
        """建筑名 → 快捷键：携带列表中的槽位序号对应 tool_keys。"""
        if name in self.loadout:
            index = self.loadout.index(name)
            if index < len(self.tool_keys):
                return self.tool_keys[index]
        else:
            self._log.warning(f"建筑 [{name}] 不在携带列表中，使用默认按键 {self.fallback_key}")
        return self.fallback_key

    def _alt_key(self, key: str) -> str:
        for candidate in (self.refresh_alt_key, self.fallback_key, *self.tool_keys):
            if candidate != key:
                return candidate
        return key

    def collect(self, wave: int, is_late: bool) -> Dict[TaskKind, List[ScheduledTask]]:
        meta = self.camera.meta
        tasks: Dict[TaskKind, List[ScheduledTask]] = {kind: [] for kind in TaskKind}

        for d in self.plan.demolishes:
            if d.wave_num == wave and d.is_late == is_late and d.uid not in self.state.completed_demolishes:
                x, y = meta.cell_center(d.grid_x, d.grid_y, d.width, d.height)
                tasks[TaskKind.DEMOLISH].append(ScheduledTask(TaskKind.DEMOLISH, d, x, y))
        for b in self.plan.buildings:
            if b.wave_num == wave and b.is_late == is_late and b.uid not in self.state.completed_buildings:
                x, y = meta.cell_center(b.grid_x, b.grid_y, b.width, b.height)
                tasks[TaskKind.BUILD].append(ScheduledTask(TaskKind.BUILD, b, x, y))
        seen_keys = set()
        for u in self.plan.upgrades:
            if u.wave_num == wave and u.is_late == is_late and u.key not in self.state.completed_upgrades:
                if u.key in seen_keys:
                    continue
                seen_keys.add(u.key)
                tasks[TaskKind.UPGRADE].append(ScheduledTask(TaskKind.UPGRADE, u))
        return tasks

    def region_of(self, map_y: float) -> MapRegion:
        return MapRegion.UPPER if map_y < self.camera.meta.bottom / 2.0 else MapRegion.LOWER

    def order_region(self, region: MapRegion, tasks: List[ScheduledTask]) -> List[ScheduledTask]:
        if region is MapRegion.UPPER:
            return sorted(tasks, key=lambda t: (t.map_y, t.priority))
        return sorted(tasks, key=lambda t: (-t.map_y, t.priority))

    # ── 执行 ──

    def execute_wave_phase(self, wave: int, is_late: bool) -> int:
        """执行指定波次阶段的全部任务，返回本次下发的动作数。"""
        phase_name = "后期" if is_late else "前期"
        tasks = self.collect(wave, is_late)
        total = sum(len(v) for v in tasks.values())
        if total == 0:
            self._log.debug(f"第 {wave} 波 [{phase_name}] 无待执行任务")
            return 0

        self._log.info(
            f"开始执行第 {wave} 波 [{phase_name}] 布防: 拆除 {len(tasks[TaskKind.DEMOLISH])}, "
            f"建造 {len(tasks[TaskKind.BUILD])}, 升级 {len(tasks[TaskKind.UPGRADE])}"
        )
        done = 0
        done += self._run_spatial(tasks[TaskKind.DEMOLISH])
        done += self._run_spatial(tasks[TaskKind.BUILD])
        for st in tasks[TaskKind.UPGRADE]:
            self._upgrade(st.task)
            done += 1
        self._log.info(f"第 {wave} 波 [{phase_name}] 布防完成 ({done} 个动作)")
        return done

    def _run_spatial(self, tasks: List[ScheduledTask]) -> int:
        if not tasks:
            return 0
        regions: Dict[MapRegion, List[ScheduledTask]] = {MapRegion.UPPER: [], MapRegion.LOWER: []}
        for t in tasks:
            regions[self.region_of(t.map_y)].append(t)

        # 先处理镜头当前所在的半区
        view_center = self.state.camera_offset_y + self.camera.safe_center_y
        order = [MapRegion.UPPER, MapRegion.LOWER]
        if self.region_of(view_center) is MapRegion.LOWER:
            order.reverse()

        done = 0
        for region in order:
            if regions[region]:
                done += self._dispatch_region(region, self.order_region(region, regions[region]))
        return done

    def _dispatch_region(self, region: MapRegion, tasks: List[ScheduledTask]) -> int:
        fresh = False
        # 估算值不可盲信：整批都在安全区内才跳过镜头移动
        if not all(self.camera.is_visible(t.map_y) for t in tasks):
            edge = CameraEdge.TOP if region is MapRegion.UPPER else CameraEdge.BOTTOM
            self.camera.align_to_edge(edge)
            fresh = True

        for t in tasks:
            moved = False
            if not self.camera.is_visible(t.map_y):
                moved = self.camera.smart_move_camera(t.map_y)
            if t.kind is TaskKind.DEMOLISH:
                self._demolish(t)
            else:
                self._build(t, camera_moved=moved or fresh)
            fresh = False
        return len(tasks)

    def _sleep_ms(self, ms: int) -> None:
        time.sleep(ms / 1000.0)

    def _demolish(self, st: ScheduledTask) -> None:
        task: DemolishTask = st.task
        sx, sy = self.camera.to_screen(st.map_x, st.map_y)
        self._log.debug(f"拆除 #{task.uid} ({task.grid_x},{task.grid_y}) @ 屏幕 ({sx},{sy})")
        self.actuator.move_to(sx, sy, self.move_sec)
        self.actuator.click(True, False, 0)
        self._sleep_ms(self.key_settle_ms)
        for i in range(self.demolish_repeat):
            if i:
                self._sleep_ms(self.demolish_gap_ms)
            self.actuator.key_click(self.demolish_key)
        # 选中已有建筑后工具栏状态不可信
        self.state.last_tool_key = None
        self.state.completed_demolishes.add(task.uid)
        self._sleep_ms(self.action_settle_ms)

    def _build(self, st: ScheduledTask, camera_moved: bool) -> None:
        task: BuildingTask = st.task
        sx, sy = self.camera.to_screen(st.map_x, st.map_y)
        key = self.tool_key(task.name)
        self._log.debug(f"建造 #{task.uid} [{task.name}] ({task.grid_x},{task.grid_y}) @ 屏幕 ({sx},{sy}) 键 {key}")
        self.actuator.move_to(sx, sy, self.move_sec)
        if camera_moved and self.build_refresh_repeat:
            # 镜头移动后工具栏可能未刷新：key -> 其他键 -> key 强制重绘
            sequence = [key, self._alt_key(key)] * self.build_refresh_repeat + [key]
            for k in sequence:
                self.actuator.key_click(k)
                self._sleep_ms(self.key_settle_ms)
        elif key != self.state.last_tool_key:
            self.actuator.key_click(key)
            self._sleep_ms(self.key_settle_ms)
        self.state.last_tool_key = key
        self.actuator.double_click(True, False)
        self.state.completed_buildings.add(task.uid)
        self._sleep_ms(self.action_settle_ms)

    def _upgrade(self, task: UpgradeTask) -> None:
        key = self.tool_key(task.building_name)
        self._log.debug(f"升级 [{task.building_name}] 键 {key}")
        self.actuator.key_click(key)
        self._sleep_ms(self.key_settle_ms)
        self.actuator.key_hold(self.upgrade_key, self.upgrade_hold_ms)
        self.state.last_tool_key = None
        self.state.completed_upgrades.add(task.key)
        self._sleep_ms(self.action_settle_ms)


__all__ = ["TaskScheduler"]
