"""
场景识别与导航的类型定义，以及外部能力（OCR / 取色）的协议。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple

from ...core.constants import DEFAULT_HANDLER, MatchLogic, NavStatus


class TextReader(Protocol):
    def __call__(self, rect: Sequence[int]) -> str:
        """识别屏幕矩形 (x1, y1, x2, y2) 内的文字，失败返回空串。"""
        ...


class ColorSampler(Protocol):
    def __call__(self, point: Sequence[int]) -> Optional[Tuple[int, int, int]]:
        """读取屏幕点的 (r, g, b)，失败返回 None。"""
        ...


@dataclass
class MatchScore:
    matched: int
    total: int
    logic: MatchLogic = MatchLogic.AND

    @property
    def passed(self) -> bool:
        if self.logic is MatchLogic.OR:
            return self.matched > 0
        return self.total > 0 and self.matched == self.total

    @property
    def value(self) -> int:
        """规则通过时为命中数，否则为 0。"""
        return self.matched if self.passed else 0


@dataclass(frozen=True)
class NavResult:
    status: NavStatus
    scene_id: Optional[str] = None
    handler: str = DEFAULT_HANDLER

    @classmethod
    def success(cls) -> "NavResult":
        return cls(NavStatus.SUCCESS)

    @classmethod
    def failed(cls) -> "NavResult":
        return cls(NavStatus.FAILED)

    @classmethod
    def handover(cls, scene_id: str, handler: str = DEFAULT_HANDLER) -> "NavResult":
        return cls(NavStatus.HANDOVER, scene_id, handler)

    def __str__(self) -> str:
        if self.status is NavStatus.HANDOVER:
            return f"Handover({self.scene_id})"
        return self.status.value.capitalize()


__all__ = ["TextReader", "ColorSampler", "MatchScore", "NavResult"]
