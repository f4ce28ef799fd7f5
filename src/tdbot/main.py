"""
主程序入口

导航到目标场景 → 移交关卡执行器 → 结束后重新开始；导航失败时按 ESC 复位并退避重试。
"""
from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, List, Optional

from .core.config import settings
from .core.constants import DEFAULT_HANDLER, DiagnosticMode, NavStatus
from .core.errors import ConfigError
from .core.logger import logger, setup_logger
from .modules.input.actuator import GuardedActuator, InputActuator, NullActuator
from .modules.input.heartbeat import HeartbeatThread
from .modules.ui.detector import SceneMatcher
from .modules.ui.loader import load_scene_map
from .modules.ui.manager import NavigationEngine
from .modules.ui.types import NavResult

_log = logger.bind(module="Main")


def create_actuator(port: str) -> InputActuator:
    """SOFT -> 软件模拟；NULL -> 空驱动；其他端口 -> 硬件驱动（未内置），回退软件模拟。"""
    name = (port or "").strip().upper()
    if name == "NULL":
        return NullActuator()
    if name != "SOFT":
        _log.warning(f"未内置串口硬件驱动 ({port})，尝试回退到软件模拟模式")
    try:
        from .modules.input.software import SoftwareActuator

        return SoftwareActuator()
    except Exception as e:
        _log.warning(f"无法初始化软件模拟输入 ({e})，使用空驱动继续运行")
        return NullActuator()


def reset_ui(actuator: InputActuator) -> None:
    """导航失败后的复位：连按 ESC，再按空格关闭残留对话框。"""
    for _ in range(max(1, settings.reset_escape_repeat)):
        actuator.key_hold("esc", 100)
        time.sleep(0.1)
    actuator.key_hold("space", 100)


def run_cycle(
    engine: NavigationEngine,
    actuator: InputActuator,
    target: str,
    level_runner: Callable[[str], bool],
) -> NavResult:
    """主循环的一轮：导航并根据结果分派，包含退避等待。"""
    _log.info(f"[主控] 正在导航至: {target}...")
    result = engine.navigate(target)

    if result.status is NavStatus.HANDOVER:
        handler = result.handler
        if handler != DEFAULT_HANDLER:
            _log.warning(f"[路由] 未实现的处理器 '{handler}'，按塔防模块处理")
        _log.info(f"[路由] 启动塔防模块: [{result.scene_id}]")
        try:
            finished = level_runner(result.scene_id)
        except Exception:
            _log.exception("关卡执行异常")
            finished = False
        _log.info(f"本局任务结束 ({'完成' if finished else '中断'})，{settings.handover_backoff_sec:.0f} 秒后重新开始循环")
        time.sleep(settings.handover_backoff_sec)
    elif result.status is NavStatus.FAILED:
        _log.warning("[主控] 导航失败，执行复位操作 (ESC)...")
        reset_ui(actuator)
        time.sleep(settings.failed_backoff_sec)
    else:
        _log.info("[主控] 已到达目标界面，等待重置...")
        time.sleep(settings.handover_backoff_sec)
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tdbot", description="塔防自动化控制")
    parser.add_argument("-p", "--port", default="COM3", help="输入设备端口；SOFT=软件模拟，NULL=空驱动")
    parser.add_argument("-t", "--target", default="空间站普通", help="目标场景 id")
    parser.add_argument(
        "--test",
        choices=[m.value for m in DiagnosticMode],
        default=None,
        help="自检模式",
    )
    parser.add_argument("--ui-map", default=None, help="场景图配置文件路径")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger()

    _log.info("=" * 40)
    _log.info(f"塔防自动化控制中心 | 端口: {args.port}")
    _log.info(f"模式: 测试 ({args.test})" if args.test else f"目标: {args.target}")
    _log.info("=" * 40)

    # 屏幕与 OCR 后端延迟到首次使用时加载
    from .modules.ocr.recognize import ScreenTextReader
    from .modules.vision.screen import ScreenColorSampler
    from .modules.diagnostics import run_diagnostic
    from .modules.tower_defense.app import TowerDefenseApp

    actuator = GuardedActuator(create_actuator(args.port))
    heartbeat = HeartbeatThread(actuator, settings.heartbeat_interval_sec)
    heartbeat.start()
    reader = ScreenTextReader()

    try:
        if args.test:
            _log.info(f"{settings.startup_delay_sec:.0f} 秒后开始执行 [{args.test}] 测试...")
            time.sleep(settings.startup_delay_sec)
            run_diagnostic(DiagnosticMode(args.test), actuator, reader)
            return 0

        try:
            registry = load_scene_map(args.ui_map or settings.ui_map_path)
        except ConfigError as e:
            _log.error(f"场景图加载失败: {e}")
            return 2

        engine = NavigationEngine(registry, SceneMatcher(reader, ScreenColorSampler()), actuator)

        def level_runner(scene_id: str) -> bool:
            return TowerDefenseApp(actuator, reader).run(scene_id)

        _log.info(f"引擎就绪，{settings.startup_delay_sec:.0f} 秒后开始自动化循环...")
        time.sleep(settings.startup_delay_sec)
        while True:
            run_cycle(engine, actuator, args.target, level_runner)
    except KeyboardInterrupt:
        _log.info("收到中断信号，退出")
        return 0
    finally:
        heartbeat.stop(timeout=2.0)


if __name__ == "__main__":
    sys.exit(main())
