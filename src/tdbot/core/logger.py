"""
日志配置模块
"""
import sys
from pathlib import Path

from loguru import logger

from .config import settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]}:{function}:{line} - {message}"

_configured = False


def setup_logger(force: bool = False):
    """配置日志系统

    重复调用不会重复挂载 sink；force=True 时按当前 settings 重建。
    """
    global _configured
    if _configured and not force:
        return logger

    # 移除默认处理器
    logger.remove()
    logger.configure(extra={"module": "tdbot"})

    log_dir = Path(settings.log_path)
    log_dir.mkdir(parents=True, exist_ok=True)

    # 控制台输出（无控制台的窗口化进程 stdout 为 None）
    console_missing = False
    if settings.log_console_enabled:
        if sys.stdout is not None:
            logger.add(sys.stdout, level=settings.log_level, format=_CONSOLE_FORMAT)
        else:
            console_missing = True

    # 文件输出 - 运行日志
    logger.add(
        log_dir / "run_{time:YYYY-MM-DD}.log",
        level=settings.log_level,
        format=_FILE_FORMAT,
        rotation="00:00",  # 每天午夜轮转
        retention=f"{settings.log_retention_days} days",
        encoding="utf-8",
    )

    # 错误日志单独记录
    logger.add(
        log_dir / "error_{time:YYYY-MM-DD}.log",
        level="ERROR",
        format=_FILE_FORMAT,
        rotation="00:00",
        retention=f"{settings.log_retention_days * 2} days",
        encoding="utf-8",
    )

    _configured = True
    if console_missing:
        logger.warning("未检测到可用控制台输出流，仅写入文件日志")
    return logger


__all__ = ["logger", "setup_logger"]
