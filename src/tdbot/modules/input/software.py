"""
软件模拟输入（pyautogui）

串口硬件驱动不可用时的替代方案，直接向桌面注入鼠标键盘事件。
"""
from __future__ import annotations

import random
import time
from typing import List

from loguru import logger

from .keys import key_name


class SoftwareActuator:
    def __init__(self, jitter_px: int = 2) -> None:
        import pyautogui  # noqa: delay import，无桌面环境时不影响核心模块

        pyautogui.FAILSAFE = False
        pyautogui.PAUSE = 0
        self._gui = pyautogui
        self._jitter = jitter_px
        self._pressed: List[str] = []
        self._log = logger.bind(module="SoftwareActuator")
        self._log.info("软件模拟输入已就绪")

    def move_to(self, x: int, y: int, duration: float) -> None:
        j = self._jitter
        tx = x + random.randint(-j, j)
        ty = y + random.randint(-j, j)
        self._gui.moveTo(tx, ty, duration=max(0.0, duration), tween=self._gui.easeInOutCubic)

    def click(self, left: bool = True, right: bool = False, hold_ms: int = 0) -> None:
        button = "right" if right and not left else "left"
        hold = hold_ms / 1000.0 if hold_ms > 0 else random.uniform(0.03, 0.075)
        self._gui.mouseDown(button=button)
        time.sleep(hold)
        self._gui.mouseUp(button=button)

    def double_click(self, left: bool = True, right: bool = False) -> None:
        self.click(left, right)
        time.sleep(random.uniform(0.05, 0.09))
        self.click(left, right)

    def key_down(self, code: int) -> None:
        name = key_name(code)
        if name is None:
            self._log.warning(f"无法映射键码 0x{code:02X}")
            return
        self._gui.keyDown(name)
        self._pressed.append(name)

    def key_up(self) -> None:
        while self._pressed:
            self._gui.keyUp(self._pressed.pop())

    def key_click(self, key: str) -> None:
        self.key_hold(key, 40)

    def key_hold(self, key: str, ms: int) -> None:
        name = "esc" if key == "\x1b" else ("space" if key == " " else key.lower())
        self._gui.keyDown(name)
        time.sleep(max(ms, 0) / 1000.0)
        self._gui.keyUp(name)

    def scroll(self, delta: int) -> None:
        self._gui.scroll(delta)
        time.sleep(0.1)

    def heartbeat(self) -> None:
        return None


__all__ = ["SoftwareActuator"]
