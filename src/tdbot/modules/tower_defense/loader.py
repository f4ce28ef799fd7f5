"""
关卡文件加载器（地形 / 策略 / 陷阱配置，均为 JSON）

格式错误统一抛出 ConfigError，由上层记录后放弃本局。
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ...core.errors import ConfigError
from ...core.logger import logger
from .types import (
    BuildingTask,
    ClickAction,
    DemolishTask,
    KeyAction,
    LogAction,
    MapMeta,
    MoveAction,
    PrepAction,
    StrategyPlan,
    TrapConfigItem,
    UpgradeTask,
    WaitAction,
)

_log = logger.bind(module="LevelLoader")


def _read_json(path: str | Path) -> Any:
    file_path = Path(path)
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(str(file_path), "文件不存在") from e
    except json.JSONDecodeError as e:
        raise ConfigError(str(file_path), f"JSON 解析失败: {e}") from e
    except OSError as e:
        raise ConfigError(str(file_path), f"无法读取: {e}") from e


def parse_prep_action(item: Dict[str, Any]) -> PrepAction:
    kind = str(item.get("type", "")).lower()
    if kind == "move":
        return MoveAction(x=int(item["x"]), y=int(item["y"]), duration=float(item.get("duration", 0.5)))
    if kind == "click":
        x = item.get("x")
        y = item.get("y")
        return ClickAction(
            x=None if x is None else int(x),
            y=None if y is None else int(y),
            right=bool(item.get("right", False)),
        )
    if kind == "key":
        return KeyAction(key=str(item["key"]), hold_ms=int(item.get("hold_ms", 0)))
    if kind == "wait":
        return WaitAction(ms=int(item["ms"]))
    if kind == "log":
        return LogAction(message=str(item.get("message", "")))
    raise ValueError(f"未知准备动作类型: {kind!r}")


def parse_terrain(data: Any, source: str = "<memory>") -> MapMeta:
    if not isinstance(data, dict) or not isinstance(data.get("meta"), dict):
        raise ConfigError(source, "缺少 'meta' 对象")
    meta = data["meta"]
    try:
        grid = float(meta["grid_pixel_size"])
        if grid <= 0:
            raise ValueError("grid_pixel_size 必须大于 0")
        return MapMeta(
            grid_pixel_size=grid,
            offset_x=float(meta.get("offset_x", 0.0)),
            offset_y=float(meta.get("offset_y", 0.0)),
            bottom=float(meta["bottom"]),
            prep_actions=tuple(parse_prep_action(a) for a in meta.get("prep_actions") or []),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ConfigError(source, f"meta 格式错误: {e}") from e


def parse_strategy(data: Any, source: str = "<memory>") -> StrategyPlan:
    if not isinstance(data, dict):
        raise ConfigError(source, "顶层必须是对象")
    try:
        buildings = [
            BuildingTask(
                uid=int(b["uid"]),
                name=str(b["name"]),
                grid_x=int(b["grid_x"]),
                grid_y=int(b["grid_y"]),
                width=int(b.get("width", 1)),
                height=int(b.get("height", 1)),
                wave_num=int(b.get("wave_num", 0)),
                is_late=bool(b.get("is_late", False)),
            )
            for b in data.get("buildings") or []
        ]
        demolishes = [
            DemolishTask(
                uid=int(d["uid"]),
                grid_x=int(d["grid_x"]),
                grid_y=int(d["grid_y"]),
                width=int(d.get("width", 1)),
                height=int(d.get("height", 1)),
                wave_num=int(d.get("wave_num", 0)),
                is_late=bool(d.get("is_late", False)),
                name=str(d.get("name", "")),
            )
            for d in data.get("demolishes") or []
        ]
        upgrades = [
            UpgradeTask(
                building_name=str(u["building_name"]),
                wave_num=int(u["wave_num"]),
                is_late=bool(u.get("is_late", False)),
            )
            for u in data.get("upgrades") or []
        ]
        final_wave = data.get("final_wave")
        plan = StrategyPlan(
            map_name=str(data.get("map_name", "")),
            buildings=buildings,
            demolishes=demolishes,
            upgrades=upgrades,
            loadout=[str(n) for n in data.get("loadout") or []],
            final_wave=None if final_wave is None else int(final_wave),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ConfigError(source, f"策略格式错误: {e}") from e

    errors = _validate_strategy(plan)
    if errors:
        raise ConfigError(source, "; ".join(errors))
    return plan


def _validate_strategy(plan: StrategyPlan) -> List[str]:
    """uid 在同类任务内必须唯一。"""
    errors: List[str] = []
    seen: set[int] = set()
    for b in plan.buildings:
        if b.uid in seen:
            errors.append(f"建筑 uid 重复: {b.uid}")
        seen.add(b.uid)
    seen = set()
    for d in plan.demolishes:
        if d.uid in seen:
            errors.append(f"拆除 uid 重复: {d.uid}")
        seen.add(d.uid)
    return errors


def parse_traps(data: Any, source: str = "<memory>") -> Dict[str, TrapConfigItem]:
    if not isinstance(data, list):
        raise ConfigError(source, "陷阱配置必须是数组")
    lookup: Dict[str, TrapConfigItem] = {}
    try:
        for item in data:
            pos = item.get("select_pos") or [0, 0]
            trap = TrapConfigItem(
                name=str(item["name"]),
                select_pos=(int(pos[0]), int(pos[1])),
                category=str(item.get("category", "")),
            )
            lookup[trap.name] = trap
    except (AttributeError, KeyError, TypeError, ValueError, IndexError) as e:
        raise ConfigError(source, f"陷阱配置格式错误: {e}") from e
    return lookup


def load_terrain(path: str | Path) -> MapMeta:
    meta = parse_terrain(_read_json(path), str(path))
    _log.info(f"地形已加载: {path} (格子 {meta.grid_pixel_size}px, 地图高 {meta.bottom}px)")
    return meta


def load_strategy(path: str | Path) -> StrategyPlan:
    plan = parse_strategy(_read_json(path), str(path))
    _log.info(
        f"策略加载成功: {len(plan.buildings)} 个建筑, "
        f"{len(plan.demolishes)} 个拆除, {len(plan.upgrades)} 个升级任务"
    )
    return plan


def load_traps(path: str | Path) -> Dict[str, TrapConfigItem]:
    lookup = parse_traps(_read_json(path), str(path))
    _log.info(f"陷阱配置已加载: {len(lookup)} 项")
    return lookup


__all__ = [
    "parse_prep_action",
    "parse_terrain",
    "parse_strategy",
    "parse_traps",
    "load_terrain",
    "load_strategy",
    "load_traps",
]
