from .types import ColorSampler, MatchScore, NavResult, TextReader
from .registry import ColorAnchor, SceneDef, SceneRegistry, TextAnchor, Transition
from .loader import load_scene_map, parse_scenes
from .detector import SceneMatcher
from .graph import PathPlanner
from .manager import NavigationEngine

__all__ = [
    "ColorSampler",
    "MatchScore",
    "NavResult",
    "TextReader",
    "ColorAnchor",
    "SceneDef",
    "SceneRegistry",
    "TextAnchor",
    "Transition",
    "load_scene_map",
    "parse_scenes",
    "SceneMatcher",
    "PathPlanner",
    "NavigationEngine",
]
