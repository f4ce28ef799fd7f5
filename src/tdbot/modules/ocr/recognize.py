"""核心 OCR 识别函数。"""
from __future__ import annotations

from typing import Optional, Sequence

from ...core.config import settings
from ...core.logger import logger
from ..vision.screen import grab_area
from ..vision.utils import ImageLike, load_image
from .engine import acquire_ocr
from .types import OcrResult


def ocr(
    image: ImageLike,
    *,
    min_confidence: float = 0.5,
) -> OcrResult:
    """对图像执行 OCR 识别。

    Args:
        image: 图像来源（路径 / bytes / np.ndarray）
        min_confidence: 最低置信度阈值，低于此值的结果将被过滤

    Returns:
        OcrResult，坐标为输入图像坐标
    """
    engine, lock = acquire_ocr()
    img = load_image(image)

    # PaddleOCR 3.x: predict() 接受 BGR ndarray，返回 OCRResult 列表
    with lock:
        results = engine.predict(img)

    if not results:
        return OcrResult()
    return OcrResult.from_paddle(results[0], min_confidence)


class ScreenTextReader:
    """TextReader 实现：截取屏幕矩形并识别，失败返回空串。"""

    def __init__(self, min_confidence: Optional[float] = None) -> None:
        self.min_confidence = (
            settings.ocr_min_confidence if min_confidence is None else min_confidence
        )
        self._log = logger.bind(module="TextReader")

    def __call__(self, rect: Sequence[int]) -> str:
        img = grab_area(rect)
        if img is None:
            return ""
        try:
            return ocr(img, min_confidence=self.min_confidence).compact_text
        except Exception as e:
            self._log.debug(f"OCR 失败 {tuple(rect)}: {e}")
            return ""


__all__ = ["ocr", "ScreenTextReader"]
