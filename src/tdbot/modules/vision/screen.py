"""
屏幕截图与取色（mss）

截图失败统一返回 None，由调用方按"无信息"处理。
"""
from __future__ import annotations

import threading
from typing import Optional, Sequence

import numpy as np
from loguru import logger

from .utils import Rect, Rgb, bgra_to_bgr, pixel_rgb, rect_to_region

_log = logger.bind(module="Screen")

# mss 实例与创建线程绑定，按线程缓存
_local = threading.local()


def _get_mss():
    sct = getattr(_local, "sct", None)
    if sct is None:
        import mss  # noqa: delay import

        sct = mss.mss()
        _local.sct = sct
    return sct


def grab_area(rect: Sequence[int]) -> Optional[np.ndarray]:
    """截取屏幕矩形 (x1, y1, x2, y2)，返回 BGR ndarray。"""
    try:
        shot = _get_mss().grab(rect_to_region(rect))
    except Exception as e:
        _log.debug(f"截图失败 {tuple(rect)}: {e}")
        return None
    raw = np.asarray(shot)
    if raw.size == 0:
        return None
    return bgra_to_bgr(raw)


def grab_screen() -> Optional[np.ndarray]:
    """截取主显示器整屏。"""
    try:
        sct = _get_mss()
        monitor = sct.monitors[1] if len(sct.monitors) > 1 else sct.monitors[0]
        shot = sct.grab(monitor)
    except Exception as e:
        _log.warning(f"整屏截图失败: {e}")
        return None
    return bgra_to_bgr(np.asarray(shot))


class ScreenColorSampler:
    """ColorSampler 实现：单像素截图取色。"""

    def __call__(self, point: Sequence[int]) -> Optional[Rgb]:
        x, y = int(point[0]), int(point[1])
        img = grab_area((x, y, x + 1, y + 1))
        if img is None:
            return None
        try:
            return pixel_rgb(img, 0, 0)
        except IndexError:
            return None


__all__ = ["Rect", "grab_area", "grab_screen", "ScreenColorSampler"]
