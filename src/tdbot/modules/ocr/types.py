"""OCR 识别结果。"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple


@dataclass
class OcrBox:
    text: str
    confidence: float
    # 四点多边形，截图内坐标
    box: List[Tuple[int, int]] = field(default_factory=list)


@dataclass
class OcrResult:
    boxes: List[OcrBox] = field(default_factory=list)

    @classmethod
    def from_paddle(cls, page: Mapping[str, Any], min_confidence: float = 0.0) -> "OcrResult":
        """由 PaddleOCR 3.x predict() 的单页结果构建，低置信度条目丢弃。"""
        boxes: List[OcrBox] = []
        for text, score, poly in zip(page["rec_texts"], page["rec_scores"], page["rec_polys"]):
            if score < min_confidence:
                continue
            boxes.append(OcrBox(str(text), float(score), [(int(p[0]), int(p[1])) for p in poly]))
        return cls(boxes)

    @property
    def text(self) -> str:
        return " ".join(b.text for b in self.boxes)

    @property
    def compact_text(self) -> str:
        """去掉全部空白的拼接文本；OCR 常在中文字符间插入空格，锚点与波次都按此匹配。"""
        return "".join("".join(b.text.split()) for b in self.boxes)

    def find(self, keyword: str) -> Optional[OcrBox]:
        return next((b for b in self.boxes if keyword in b.text), None)


__all__ = ["OcrBox", "OcrResult"]
