"""
塔防关卡数据结构

- 静态数据：MapMeta / 各类任务 / TrapConfigItem / StrategyPlan，加载后不可变
- 运行状态：ExecutionState，由调度器持有，每局开始时重置
- 赛前准备动作：每种动作一个 dataclass，执行时按类型分派
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple, Union

from ...core.constants import TaskKind


# ── 赛前准备动作 ──

@dataclass(frozen=True)
class MoveAction:
    x: int
    y: int
    duration: float = 0.5


@dataclass(frozen=True)
class ClickAction:
    x: Optional[int] = None
    y: Optional[int] = None
    right: bool = False


@dataclass(frozen=True)
class KeyAction:
    key: str
    hold_ms: int = 0


@dataclass(frozen=True)
class WaitAction:
    ms: int


@dataclass(frozen=True)
class LogAction:
    message: str


PrepAction = Union[MoveAction, ClickAction, KeyAction, WaitAction, LogAction]


# ── 地图与策略 ──

@dataclass(frozen=True)
class MapMeta:
    grid_pixel_size: float
    offset_x: float
    offset_y: float
    bottom: float  # 地图总高度（像素）
    prep_actions: Tuple[PrepAction, ...] = ()

    def cell_center(self, grid_x: int, grid_y: int, width: int = 1, height: int = 1) -> Tuple[float, float]:
        """占地区域中心点的地图绝对像素坐标。"""
        px = self.offset_x + (grid_x + width / 2.0) * self.grid_pixel_size
        py = self.offset_y + (grid_y + height / 2.0) * self.grid_pixel_size
        return px, py


@dataclass(frozen=True)
class BuildingTask:
    uid: int
    name: str
    grid_x: int
    grid_y: int
    width: int = 1
    height: int = 1
    wave_num: int = 0
    is_late: bool = False


@dataclass(frozen=True)
class DemolishTask:
    uid: int
    grid_x: int
    grid_y: int
    width: int = 1
    height: int = 1
    wave_num: int = 0
    is_late: bool = False
    name: str = ""


@dataclass(frozen=True)
class UpgradeTask:
    building_name: str
    wave_num: int
    is_late: bool = False

    @property
    def key(self) -> str:
        return f"{self.building_name}-{self.wave_num}-{str(self.is_late).lower()}"


@dataclass(frozen=True)
class TrapConfigItem:
    name: str
    select_pos: Tuple[int, int] = (0, 0)
    category: str = ""


@dataclass
class StrategyPlan:
    map_name: str
    buildings: List[BuildingTask] = field(default_factory=list)
    demolishes: List[DemolishTask] = field(default_factory=list)
    upgrades: List[UpgradeTask] = field(default_factory=list)
    loadout: List[str] = field(default_factory=list)
    final_wave: Optional[int] = None

    def effective_loadout(self, size: int = 4) -> List[str]:
        """显式配置的携带列表；未配置时按建筑首次出现顺序推导。"""
        if self.loadout:
            return list(self.loadout[:size])
        names: List[str] = []
        for b in self.buildings:
            if b.name not in names:
                names.append(b.name)
        return names[:size]


# ── 调度 ──

@dataclass(frozen=True)
class ScheduledTask:
    """带地图坐标与优先级的待执行任务。升级任务无坐标。"""
    kind: TaskKind
    task: Union[BuildingTask, DemolishTask, UpgradeTask]
    map_x: Optional[float] = None
    map_y: Optional[float] = None

    @property
    def priority(self) -> int:
        return int(self.kind)


@dataclass
class ExecutionState:
    completed_buildings: Set[int] = field(default_factory=set)
    completed_demolishes: Set[int] = field(default_factory=set)
    completed_upgrades: Set[str] = field(default_factory=set)
    camera_offset_x: float = 0.0
    camera_offset_y: float = 0.0
    last_confirmed_wave: int = 0
    last_wave_change_time: float = field(default_factory=time.monotonic)
    last_tool_key: Optional[str] = None

    def reset(self) -> None:
        self.completed_buildings.clear()
        self.completed_demolishes.clear()
        self.completed_upgrades.clear()
        self.camera_offset_x = 0.0
        self.camera_offset_y = 0.0
        self.last_confirmed_wave = 0
        self.last_wave_change_time = time.monotonic()
        self.last_tool_key = None


__all__ = [
    "MoveAction",
    "ClickAction",
    "KeyAction",
    "WaitAction",
    "LogAction",
    "PrepAction",
    "MapMeta",
    "BuildingTask",
    "DemolishTask",
    "UpgradeTask",
    "TrapConfigItem",
    "StrategyPlan",
    "ScheduledTask",
    "ExecutionState",
]
