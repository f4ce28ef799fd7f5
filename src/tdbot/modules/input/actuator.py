"""
输入执行器协议与通用实现

- InputActuator: 核心模块依赖的输入能力协议（鼠标移动/点击/按键/滚轮）
- NullActuator: 无设备时的空实现，所有调用仅记录日志
- GuardedActuator: 加锁包装，设备异常一律吞掉，保证主流程不中断
"""
from __future__ import annotations

import threading
from typing import Protocol

from loguru import logger

from .keys import key_code


class InputActuator(Protocol):
    def move_to(self, x: int, y: int, duration: float) -> None:
        """移动鼠标到屏幕绝对坐标，duration 为移动耗时（秒）。"""
        ...

    def click(self, left: bool = True, right: bool = False, hold_ms: int = 0) -> None:
        ...

    def double_click(self, left: bool = True, right: bool = False) -> None:
        ...

    def key_down(self, code: int) -> None:
        """按下 HID 键码对应的按键。"""
        ...

    def key_up(self) -> None:
        """释放当前按下的所有按键。"""
        ...

    def key_click(self, key: str) -> None:
        ...

    def key_hold(self, key: str, ms: int) -> None:
        ...

    def scroll(self, delta: int) -> None:
        ...

    def heartbeat(self) -> None:
        ...


class NullActuator:
    """无设备空实现。"""

    def __init__(self) -> None:
        self._log = logger.bind(module="NullActuator")

    def move_to(self, x: int, y: int, duration: float) -> None:
        self._log.debug(f"[空驱动] move_to({x}, {y}, {duration:.2f})")

    def click(self, left: bool = True, right: bool = False, hold_ms: int = 0) -> None:
        self._log.debug(f"[空驱动] click(left={left}, right={right})")

    def double_click(self, left: bool = True, right: bool = False) -> None:
        self._log.debug(f"[空驱动] double_click(left={left}, right={right})")

    def key_down(self, code: int) -> None:
        self._log.debug(f"[空驱动] key_down(0x{code:02X})")

    def key_up(self) -> None:
        self._log.debug("[空驱动] key_up()")

    def key_click(self, key: str) -> None:
        self._log.debug(f"[空驱动] key_click({key!r})")

    def key_hold(self, key: str, ms: int) -> None:
        self._log.debug(f"[空驱动] key_hold({key!r}, {ms})")

    def scroll(self, delta: int) -> None:
        self._log.debug(f"[空驱动] scroll({delta})")

    def heartbeat(self) -> None:
        return None


class GuardedActuator:
    """互斥锁 + 异常吞没包装。

    每个离散动作独立加锁，心跳线程可以在动作之间穿插执行。
    """

    def __init__(self, inner: InputActuator, lock: threading.Lock | None = None) -> None:
        self.inner = inner
        self.lock = lock or threading.Lock()
        self._log = logger.bind(module="GuardedActuator")
        self._error_count = 0

    @property
    def error_count(self) -> int:
        return self._error_count

    def _call(self, name: str, *args) -> None:
        with self.lock:
            try:
                getattr(self.inner, name)(*args)
            except Exception as e:
                self._error_count += 1
                if self._error_count == 1:
                    self._log.warning(f"输入设备调用失败，后续将静默降级: {name}: {e}")
                else:
                    self._log.debug(f"输入设备调用失败: {name}: {e}")

    def move_to(self, x: int, y: int, duration: float) -> None:
        self._call("move_to", int(x), int(y), duration)

    def click(self, left: bool = True, right: bool = False, hold_ms: int = 0) -> None:
        self._call("click", left, right, hold_ms)

    def double_click(self, left: bool = True, right: bool = False) -> None:
        self._call("double_click", left, right)

    def key_down(self, code: int) -> None:
        self._call("key_down", code)

    def key_up(self) -> None:
        self._call("key_up")

    def key_click(self, key: str) -> None:
        if key_code(key) is None:
            self._log.warning(f"未知按键，忽略: {key!r}")
            return
        self._call("key_click", key)

    def key_hold(self, key: str, ms: int) -> None:
        if key_code(key) is None:
            self._log.warning(f"未知按键，忽略: {key!r}")
            return
        self._call("key_hold", key, int(ms))

    def scroll(self, delta: int) -> None:
        self._call("scroll", int(delta))

    def heartbeat(self) -> None:
        self._call("heartbeat")


__all__ = ["InputActuator", "NullActuator", "GuardedActuator"]
