"""
镜头控制

游戏无法读取滚动位置，只能估算纵向偏移。估算值通过"边缘对齐"重新校准：
按住方向键足够久，保证镜头一定撞到上/下边界，再把偏移设为已知边界值。
每次大幅移动都先对齐边缘再按时长微调，误差不会累积。
"""
from __future__ import annotations

import time
from typing import Optional, Sequence, Tuple

from ...core.config import settings
from ...core.constants import CameraEdge
from ...core.logger import logger
from ..input.actuator import InputActuator
from .types import ExecutionState, MapMeta

# 初始视野：缩放到最小
ZOOM_OUT_ROUNDS = 7
ZOOM_OUT_NOTCHES = 12


class CameraController:
    def __init__(
        self,
        actuator: InputActuator,
        state: ExecutionState,
        meta: MapMeta,
        *,
        screen_height: Optional[int] = None,
        safe_zone: Optional[Sequence[int]] = None,
        speed_px_per_sec: Optional[float] = None,
        move_threshold_px: Optional[float] = None,
        min_scroll_px: Optional[float] = None,
        edge_align_ms: Optional[int] = None,
        settle_ms: Optional[int] = None,
    ) -> None:
        self.actuator = actuator
        self.state = state
        self.meta = meta
        self.screen_height = settings.screen_height if screen_height is None else screen_height
        self.safe_zone: Tuple[int, int, int, int] = tuple(safe_zone or settings.safe_zone)
        self.speed = settings.camera_speed_px_per_sec if speed_px_per_sec is None else speed_px_per_sec
        self.move_threshold = settings.camera_move_threshold_px if move_threshold_px is None else move_threshold_px
        self.min_scroll = settings.camera_min_scroll_px if min_scroll_px is None else min_scroll_px
        self.edge_align_ms = settings.camera_edge_align_ms if edge_align_ms is None else edge_align_ms
        self.settle_ms = settings.camera_settle_ms if settle_ms is None else settle_ms
        self.key_up = settings.key_camera_up
        self.key_down = settings.key_camera_down
        self.key_left = settings.key_camera_left
        # 最近一次对齐的边界；偏移仍是该边界的精确值时，向同侧的移动可直接微调
        self.calibrated_edge: Optional[CameraEdge] = None
        self._log = logger.bind(module="Camera")

    @property
    def max_scroll(self) -> float:
        return max(self.meta.bottom - self.screen_height, 0.0)

    @property
    def safe_center_y(self) -> float:
        return (self.safe_zone[1] + self.safe_zone[3]) / 2.0

    def is_visible(self, map_y: float) -> bool:
        rel_y = map_y - self.state.camera_offset_y
        return self.safe_zone[1] <= rel_y <= self.safe_zone[3]

    def to_screen(self, map_x: float, map_y: float) -> Tuple[int, int]:
        """地图坐标 → 屏幕坐标，并限制在安全区内。"""
        x1, y1, x2, y2 = self.safe_zone
        sx = min(max(map_x - self.state.camera_offset_x, x1), x2)
        sy = min(max(map_y - self.state.camera_offset_y, y1), y2)
        return int(round(sx)), int(round(sy))

    def ideal_offset(self, target_map_y: float) -> float:
        return min(max(target_map_y - self.safe_center_y, 0.0), self.max_scroll)

    def edge_offset(self, edge: CameraEdge) -> float:
        return 0.0 if edge is CameraEdge.TOP else self.max_scroll

    def _hold_ms_for(self, distance: float) -> int:
        return int(abs(distance) / self.speed * 1000)

    def align_to_edge(self, edge: CameraEdge) -> None:
        # 按住时长至少覆盖整张地图的滚动距离
        hold_ms = max(self.edge_align_ms, int(self._hold_ms_for(self.max_scroll) * 1.2))
        key = self.key_up if edge is CameraEdge.TOP else self.key_down
        self._log.debug(f"对齐{'上' if edge is CameraEdge.TOP else '下'}边界 (按住 {key} {hold_ms}ms)")
        self.actuator.key_hold(key, hold_ms)
        self.state.camera_offset_y = self.edge_offset(edge)
        self.calibrated_edge = edge
        time.sleep(self.settle_ms / 1000.0)

    def nearer_edge(self, offset: float) -> CameraEdge:
        return CameraEdge.TOP if offset <= self.max_scroll / 2.0 else CameraEdge.BOTTOM

    def smart_move_camera(self, target_map_y: float) -> bool:
        """把目标行移入安全区中部；返回是否发生了实际移动。"""
        ideal = self.ideal_offset(target_map_y)
        if abs(ideal - self.state.camera_offset_y) < self.move_threshold:
            return False

        edge = self.nearer_edge(ideal)
        if self.calibrated_edge is not edge:
            self.align_to_edge(edge)
        residual = ideal - self.state.camera_offset_y
        if abs(residual) >= self.min_scroll:
            key = self.key_down if residual > 0 else self.key_up
            self.actuator.key_hold(key, self._hold_ms_for(residual))
            self.state.camera_offset_y = ideal
            self.calibrated_edge = None
            time.sleep(self.settle_ms / 1000.0)
        self._log.debug(f"镜头移动: 目标行 {target_map_y:.0f} -> 偏移 {self.state.camera_offset_y:.0f}")
        return True

    def setup_view(self) -> None:
        """初始视野：打开全局视图、缩放到最小、对齐左上角。"""
        self._log.info("对齐左上角边界...")
        self.actuator.key_click(settings.key_overview)
        time.sleep(2.0)
        for _ in range(ZOOM_OUT_ROUNDS):
            for _ in range(ZOOM_OUT_NOTCHES):
                self.actuator.scroll(-1)
                time.sleep(0.03)
            time.sleep(0.3)
        for _ in range(4):
            self.actuator.key_hold(self.key_up, 500)
            time.sleep(0.05)
            self.actuator.key_hold(self.key_left, 500)
            time.sleep(0.05)
        self.actuator.key_hold(self.key_up, 800)
        self.actuator.key_hold(self.key_left, 800)
        self.state.camera_offset_x = 0.0
        self.state.camera_offset_y = 0.0
        self.calibrated_edge = CameraEdge.TOP


__all__ = ["CameraController"]
