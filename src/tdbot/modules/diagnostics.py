"""
自检工具：单独验证输入、截图、OCR、滚轮是否可用
"""
from __future__ import annotations

import time
from typing import Sequence

import cv2  # type: ignore

from ..core.constants import DiagnosticMode
from ..core.logger import logger
from .input.actuator import InputActuator
from .ui.types import TextReader
from .vision.screen import grab_screen

_log = logger.bind(module="Diagnostics")

OCR_TEST_RECT = (100, 100, 500, 200)
SCREENSHOT_PATH = "debug_screenshot.png"


def run_input_test(actuator: InputActuator) -> None:
    _log.info("测试鼠标与键盘...")
    x, y = 500, 500
    for px, py in ((x, y), (x + 300, y), (x + 300, y + 300), (x, y + 300), (x, y)):
        actuator.move_to(px, py, 0.5)
    actuator.click(True, False, 0)
    time.sleep(0.5)
    for ch in "hello 123":
        actuator.key_click("space" if ch == " " else ch)
        time.sleep(0.2)
    _log.info("输入测试完成")


def run_screen_test(path: str = SCREENSHOT_PATH) -> bool:
    _log.info("测试屏幕截图...")
    start = time.monotonic()
    img = grab_screen()
    if img is None:
        _log.error("截图失败")
        return False
    h, w = img.shape[:2]
    cv2.imwrite(path, img)
    _log.info(f"截图成功 {w}x{h}，已保存至 {path} (耗时 {int((time.monotonic() - start) * 1000)}ms)")
    return True


def run_ocr_test(reader: TextReader, rect: Sequence[int] = OCR_TEST_RECT) -> str:
    _log.info(f"测试 OCR，识别区域: {tuple(rect)}")
    start = time.monotonic()
    text = reader(rect)
    _log.info(f"耗时 {int((time.monotonic() - start) * 1000)}ms，识别结果: [{text}]")
    if not text:
        _log.warning("识别结果为空，请确认该区域有文字")
    return text


def run_scroll_test(actuator: InputActuator) -> None:
    _log.info("测试滚轮: 向下 5 格")
    actuator.scroll(-5)
    time.sleep(2.0)
    _log.info("测试滚轮: 向上 5 格")
    actuator.scroll(5)


def run_diagnostic(mode: DiagnosticMode, actuator: InputActuator, reader: TextReader) -> None:
    if mode is DiagnosticMode.INPUT:
        run_input_test(actuator)
    elif mode is DiagnosticMode.SCREEN:
        run_screen_test()
    elif mode is DiagnosticMode.OCR:
        run_ocr_test(reader)
    elif mode is DiagnosticMode.SCROLL:
        run_scroll_test(actuator)


__all__ = [
    "run_input_test",
    "run_screen_test",
    "run_ocr_test",
    "run_scroll_test",
    "run_diagnostic",
]
