from .types import OcrBox, OcrResult
from .recognize import ocr, ScreenTextReader
from .engine import get_ocr_engine

__all__ = [
    "OcrBox",
    "OcrResult",
    "ocr",
    "ScreenTextReader",
    "get_ocr_engine",
]
