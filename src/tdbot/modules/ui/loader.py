"""
场景图配置加载器

支持 TOML（ui_map.toml）与 YAML 两种格式，顶层为 scenes 列表：

    [[scenes]]
    id = "大厅"
    logic = "or"
    [[scenes.anchors.text]]
    rect = [100, 100, 300, 150]
    val = "开始游戏"
    [[scenes.anchors.color]]
    pos = [50, 60]
    val = "#FFCC00"
    tol = 10
    [[scenes.transitions]]
    target = "空间站普通"
    coords = [1700, 950]
    post_delay = 1500
"""
from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ...core.constants import DEFAULT_HANDLER, MatchLogic
from ...core.errors import ConfigError
from ...core.logger import logger
from ..vision.utils import parse_hex_color
from .registry import ColorAnchor, SceneDef, SceneRegistry, TextAnchor, Transition

_log = logger.bind(module="SceneLoader")


def _read_document(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(str(path), f"无法读取: {e}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        else:
            data = tomllib.loads(raw)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigError(str(path), f"解析失败: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(str(path), "顶层必须是表/字典")
    return data


def _int_list(value: Any, size: int, what: str) -> List[int]:
    if not isinstance(value, (list, tuple)) or len(value) != size:
        raise ValueError(f"{what} 必须是长度为 {size} 的列表")
    return [int(v) for v in value]


def _parse_text_anchor(t: Dict[str, Any]) -> TextAnchor:
    val = t.get("val")
    # 空串是任何识别结果的子串，会让锚点恒为命中
    if val is None or not str(val).strip():
        raise ValueError("text.val 不能为空")
    return TextAnchor(rect=tuple(_int_list(t.get("rect"), 4, "text.rect")), val=str(val))


def _parse_scene(item: Dict[str, Any]) -> SceneDef:
    scene_id = item.get("id")
    if not isinstance(scene_id, str) or not scene_id:
        raise ValueError("缺少场景 'id'")

    anchors = item.get("anchors") or {}
    texts = [_parse_text_anchor(t) for t in anchors.get("text") or []]
    colors = [
        ColorAnchor(
            pos=tuple(_int_list(c.get("pos"), 2, "color.pos")),
            rgb=parse_hex_color(str(c.get("val", ""))),
            tolerance=int(c.get("tol", 0)),
        )
        for c in anchors.get("color") or []
    ]
    transitions = [
        Transition(
            target=str(t["target"]),
            coords=tuple(_int_list(t.get("coords"), 2, "transition.coords")),
            post_delay=int(t.get("post_delay", 500)),
            handler=str(t.get("handler") or DEFAULT_HANDLER),
        )
        for t in item.get("transitions") or []
    ]
    return SceneDef(
        id=scene_id,
        logic=MatchLogic.parse(item.get("logic")),
        texts=texts,
        colors=colors,
        transitions=transitions,
    )


def parse_scenes(data: Dict[str, Any], source: str = "<memory>") -> SceneRegistry:
    """从已反序列化的文档构建场景注册表。"""
    items = data.get("scenes")
    if not isinstance(items, list):
        raise ConfigError(source, "缺少 'scenes' 列表")

    registry = SceneRegistry()
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ConfigError(source, f"scenes[{index}] 必须是表/字典")
        try:
            scene = _parse_scene(item)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(source, f"scenes[{index}] 格式错误: {e}") from e
        if scene.id in registry:
            raise ConfigError(source, f"场景 id 重复: {scene.id}")
        registry.register(scene)

    for scene in registry.all():
        for t in scene.transitions:
            if t.target not in registry:
                _log.warning(f"场景 [{scene.id}] 的跳转目标未声明: [{t.target}]")
    return registry


def load_scene_map(path: str | Path) -> SceneRegistry:
    """加载场景图配置文件。"""
    file_path = Path(path)
    registry = parse_scenes(_read_document(file_path), str(file_path))
    virtual = [s.id for s in registry.all() if s.is_virtual]
    _log.info(f"场景图已加载: {file_path} ({len(registry)} 个场景，关卡入口 {len(virtual)} 个)")
    return registry


__all__ = ["load_scene_map", "parse_scenes"]
