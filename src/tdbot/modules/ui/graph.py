from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Tuple

from .registry import SceneRegistry, Transition


class PathPlanner:
    def __init__(self, registry: SceneRegistry) -> None:
        self.registry = registry

    def edges_from(self, scene_id: str) -> List[Transition]:
        scene = self.registry.get(scene_id)
        return scene.transitions if scene else []

    def find_path(self, start: str, target: str) -> Optional[List[Transition]]:
        """BFS by transition count; the first discovery of a scene wins, so ties
        go to declaration order.
        """
        if start == target:
            return []

        came_from: Dict[str, Tuple[str, Transition]] = {}
        visited = {start}
        q = deque([start])
        while q:
            node = q.popleft()
            if node == target:
                break
            for t in self.edges_from(node):
                if t.target in visited:
                    continue
                visited.add(t.target)
                came_from[t.target] = (node, t)
                q.append(t.target)

        if target not in came_from:
            return None

        path: List[Transition] = []
        node = target
        while node != start:
            prev, t = came_from[node]
            path.append(t)
            node = prev
        path.reverse()
        return path


__all__ = ["PathPlanner"]
