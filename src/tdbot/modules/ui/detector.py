from __future__ import annotations

from ...core.logger import logger
from ..vision.utils import color_match
from .registry import SceneDef
from .types import ColorSampler, MatchScore, TextReader


class SceneMatcher:
    def __init__(self, text_reader: TextReader, color_sampler: ColorSampler) -> None:
        self.text_reader = text_reader
        self.color_sampler = color_sampler
        self._log = logger.bind(module="SceneMatcher")

    def score(self, scene: SceneDef) -> MatchScore:
        """Score the live screen against the scene's anchors.

        Every anchor is checked (one OCR read or pixel grab each), so a call is
        expensive; callers poll at a fixed interval instead of spinning.
        """
        matched = 0
        total = 0
        for anchor in scene.texts:
            total += 1
            text = self.text_reader(anchor.rect)
            if anchor.val in text:
                matched += 1
            else:
                self._log.trace(f"[{scene.id}] 文字锚点未命中 {anchor.rect}: 期望 {anchor.val!r}, 实际 {text!r}")
        for anchor in scene.colors:
            total += 1
            actual = self.color_sampler(anchor.pos)
            if actual is not None and color_match(actual, anchor.rgb, anchor.tolerance):
                matched += 1
        return MatchScore(matched=matched, total=total, logic=scene.logic)

    def match_value(self, scene: SceneDef) -> int:
        # 无锚点场景不参与识别，也不产生屏幕 I/O
        if scene.is_virtual:
            return 0
        return self.score(scene).value


__all__ = ["SceneMatcher"]
