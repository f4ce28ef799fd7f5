from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ...core.constants import DEFAULT_HANDLER, MatchLogic


@dataclass(frozen=True)
class TextAnchor:
    rect: Tuple[int, int, int, int]  # x1,y1,x2,y2
    val: str


@dataclass(frozen=True)
class ColorAnchor:
    pos: Tuple[int, int]
    rgb: Tuple[int, int, int]
    tolerance: int = 0


@dataclass(frozen=True)
class Transition:
    target: str
    coords: Tuple[int, int]
    post_delay: int = 500  # ms
    handler: str = DEFAULT_HANDLER


@dataclass
class SceneDef:
    id: str
    logic: MatchLogic = MatchLogic.AND
    texts: List[TextAnchor] = field(default_factory=list)
    colors: List[ColorAnchor] = field(default_factory=list)
    transitions: List[Transition] = field(default_factory=list)

    @property
    def anchor_count(self) -> int:
        return len(self.texts) + len(self.colors)

    @property
    def is_virtual(self) -> bool:
        """无锚点的场景为关卡入口，只能作为跳转目标。"""
        return self.anchor_count == 0


class SceneRegistry:
    """按声明顺序保存场景定义。"""

    def __init__(self, scenes: Optional[List[SceneDef]] = None) -> None:
        self._scenes: Dict[str, SceneDef] = {}
        for scene in scenes or []:
            self.register(scene)

    def register(self, scene: SceneDef) -> None:
        self._scenes[scene.id] = scene

    def get(self, scene_id: str) -> Optional[SceneDef]:
        return self._scenes.get(scene_id)

    def all(self) -> List[SceneDef]:
        return list(self._scenes.values())

    def ids(self) -> List[str]:
        return list(self._scenes.keys())

    def is_virtual(self, scene_id: str) -> bool:
        # 未声明的目标不算虚拟场景，需要到达确认
        scene = self._scenes.get(scene_id)
        return scene is not None and scene.is_virtual

    def __contains__(self, scene_id: object) -> bool:
        return scene_id in self._scenes

    def __len__(self) -> int:
        return len(self._scenes)


__all__ = [
    "TextAnchor",
    "ColorAnchor",
    "Transition",
    "SceneDef",
    "SceneRegistry",
]
