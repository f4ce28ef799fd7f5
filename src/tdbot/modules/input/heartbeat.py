"""输入设备保活线程。"""
from __future__ import annotations

import threading

from loguru import logger

from .actuator import InputActuator


class HeartbeatThread(threading.Thread):
    """以固定低频率向输入设备发送心跳，独立于主流程。"""

    def __init__(self, actuator: InputActuator, interval_sec: float = 1.0) -> None:
        super().__init__(name="input-heartbeat", daemon=True)
        self.actuator = actuator
        self.interval_sec = interval_sec
        self._stop_event = threading.Event()
        self.beats = 0

    def run(self) -> None:
        logger.bind(module="Heartbeat").debug(f"心跳线程启动，间隔 {self.interval_sec}s")
        while not self._stop_event.is_set():
            self.actuator.heartbeat()
            self.beats += 1
            self._stop_event.wait(self.interval_sec)

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)


__all__ = ["HeartbeatThread"]
