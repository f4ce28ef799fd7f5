"""PaddleOCR 引擎管理（懒加载 + 线程安全）。"""
from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Tuple

from ...core.config import settings
from ...core.logger import logger

_log = logger.bind(module="OcrEngine")

_ocr_instance = None
_ocr_lock = threading.Lock()
# 推理锁：PaddleOCR predict() 非线程安全
_ocr_infer_lock = threading.Lock()


def _prepare_model_env() -> None:
    """在导入 PaddleOCR 之前设置模型目录，防止自动下载。"""
    model_dir = str(Path(settings.ocr_model_dir).resolve())
    os.environ.setdefault("PADDLEX_HOME", model_dir)
    os.environ.setdefault("PPOCR_HOME", model_dir)
    os.environ.setdefault("PADDLE_PDX_DISABLE_MODEL_SOURCE_CHECK", "True")


def get_ocr_engine():
    """获取 PaddleOCR 单例。

    首次调用时初始化引擎（约 3-5 秒），后续调用直接返回缓存实例。
    线程安全（双检锁）。
    """
    global _ocr_instance
    if _ocr_instance is not None:
        return _ocr_instance

    with _ocr_lock:
        if _ocr_instance is not None:
            return _ocr_instance

        _prepare_model_env()
        _log.info("正在初始化 PaddleOCR (lang={})...", settings.paddle_ocr_lang)
        try:
            from paddleocr import PaddleOCR  # noqa: delay import
        except ImportError as e:
            _log.error(f"PaddleOCR 导入失败，请检查依赖: {e}")
            raise

        _ocr_instance = PaddleOCR(
            use_textline_orientation=False,
            use_doc_orientation_classify=False,
            use_doc_unwarping=False,
            lang=settings.paddle_ocr_lang,
            device="cpu",
        )
        _log.info("PaddleOCR 初始化完成")
        return _ocr_instance


def acquire_ocr() -> Tuple[object, threading.Lock]:
    """获取 (engine, lock) 对。"""
    return get_ocr_engine(), _ocr_infer_lock


__all__ = ["get_ocr_engine", "acquire_ocr"]
