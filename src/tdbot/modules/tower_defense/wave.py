"""
波次识别与跳变校验

两种读取方式：
- HUD 小字："波次12"，规则简单
- 辅助浮层（按住 aux 键显示）："12 ... 波"，OCR 噪声多，规则更宽松

校验规则：只接受 last + 1，且距上次确认至少 cooldown 秒（首次确认除外），
防止 OCR 误读导致跳波或连续误触发。
"""
from __future__ import annotations

import re
import time
from typing import Optional, Sequence

from ...core.config import settings
from ...core.logger import logger
from ..input.actuator import InputActuator
from ..input.keys import key_code
from ..ui.types import TextReader
from .types import ExecutionState


class WaveMonitor:
    def __init__(
        self,
        text_reader: TextReader,
        actuator: InputActuator,
        state: ExecutionState,
        *,
        hud_pattern: Optional[str] = None,
        overlay_pattern: Optional[str] = None,
        aux_key: Optional[str] = None,
        aux_settle_ms: Optional[int] = None,
        cooldown_sec: Optional[float] = None,
    ) -> None:
        self.text_reader = text_reader
        self.actuator = actuator
        self.state = state
        self.hud_re = re.compile(hud_pattern or settings.hud_wave_pattern)
        self.overlay_re = re.compile(overlay_pattern or settings.overlay_wave_pattern)
        self.aux_key = aux_key or settings.aux_overlay_key
        self.aux_settle_ms = settings.aux_overlay_settle_ms if aux_settle_ms is None else aux_settle_ms
        self.cooldown_sec = settings.wave_cooldown_sec if cooldown_sec is None else cooldown_sec
        self._log = logger.bind(module="WaveMonitor")

    def parse_wave(self, text: str, use_auxiliary_overlay: bool = False) -> Optional[int]:
        if not text:
            return None
        pattern = self.overlay_re if use_auxiliary_overlay else self.hud_re
        m = pattern.search(text)
        if not m:
            return None
        try:
            return int(m.group(1))
        except (IndexError, ValueError):
            return None

    def _read_overlay(self, rect: Sequence[int]) -> str:
        code = key_code(self.aux_key)
        if code is None:
            self._log.warning(f"辅助浮层按键无效: {self.aux_key!r}")
            return ""
        self.actuator.key_down(code)
        time.sleep(self.aux_settle_ms / 1000.0)
        try:
            text = self.text_reader(rect)
        finally:
            self.actuator.key_up()
        # 按住 aux 键会关闭默认浮层，再按一次恢复
        self.actuator.key_click(self.aux_key)
        return text

    def read_wave(self, rect: Sequence[int], use_auxiliary_overlay: bool = False) -> Optional[int]:
        """读取当前波次；OCR 为空或无法解析时返回 None。"""
        if use_auxiliary_overlay:
            text = self._read_overlay(rect)
        else:
            text = self.text_reader(rect)
        wave = self.parse_wave(text, use_auxiliary_overlay)
        self._log.trace(f"波次 OCR: {text!r} -> {wave}")
        return wave

    def validate_transition(self, detected: int) -> bool:
        now = time.monotonic()
        last = self.state.last_confirmed_wave
        elapsed = now - self.state.last_wave_change_time

        is_next_wave = detected == last + 1
        is_long_enough = last == 0 or elapsed >= self.cooldown_sec
        if not (is_next_wave and is_long_enough):
            self._log.debug(f"忽略波次跳变: {last} -> {detected} (间隔 {elapsed:.1f}s)")
            return False

        self._log.info(f"确认进入新波次: {last} -> {detected}")
        self.state.last_confirmed_wave = detected
        self.state.last_wave_change_time = now
        return True

    def mark_combat_started(self) -> None:
        self.state.last_wave_change_time = time.monotonic()

    def wait_for_combat(
        self,
        rect: Sequence[int],
        use_auxiliary_overlay: bool = False,
        timeout_sec: Optional[float] = None,
        poll_sec: float = 1.0,
    ) -> Optional[int]:
        """轮询直到读到大于 0 的波次，超时返回 None。"""
        timeout = settings.combat_wait_timeout_sec if timeout_sec is None else timeout_sec
        start = time.monotonic()
        self._log.info("等待进入战斗关卡（监控波次中）...")
        while time.monotonic() - start < timeout:
            wave = self.read_wave(rect, use_auxiliary_overlay)
            if wave is not None and wave > 0:
                self._log.info(f"检测到战斗已开始，当前波次: {wave}")
                self.mark_combat_started()
                return wave
            time.sleep(poll_sec)
        self._log.warning(f"等待战斗开始超时 ({timeout:.0f}s)")
        return None


__all__ = ["WaveMonitor"]
