from .types import (
    BuildingTask,
    DemolishTask,
    ExecutionState,
    MapMeta,
    StrategyPlan,
    TrapConfigItem,
    UpgradeTask,
)
from .wave import WaveMonitor
from .camera import CameraController
from .scheduler import TaskScheduler
from .app import TowerDefenseApp

__all__ = [
    "BuildingTask",
    "DemolishTask",
    "ExecutionState",
    "MapMeta",
    "StrategyPlan",
    "TrapConfigItem",
    "UpgradeTask",
    "WaveMonitor",
    "CameraController",
    "TaskScheduler",
    "TowerDefenseApp",
]
