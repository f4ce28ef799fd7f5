"""
Vision utilities: image conversion, rect helpers and color comparison.
"""
from __future__ import annotations

from typing import Sequence, Tuple, Union
import os

import numpy as np
import cv2  # type: ignore


ImageLike = Union[str, bytes, np.ndarray]
Rgb = Tuple[int, int, int]
# 屏幕矩形 (x1, y1, x2, y2)
Rect = Tuple[int, int, int, int]


def load_image(img: ImageLike) -> np.ndarray:
    """Load an image into a BGR numpy array.

    - str: treated as a file path and loaded via cv2.imread
    - bytes: decoded via cv2.imdecode
    - np.ndarray: returned as-is (assumed BGR or single-channel)
    """
    if isinstance(img, np.ndarray):
        return img
    if isinstance(img, (bytes, bytearray)):
        arr = np.frombuffer(img, dtype=np.uint8)
        mat = cv2.imdecode(arr, cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError("Failed to decode image bytes")
        return mat
    if isinstance(img, str):
        if not os.path.isfile(img):
            raise FileNotFoundError(f"Image file not found: {img}")
        mat = cv2.imread(img, cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError(f"Failed to load image from path: {img}")
        return mat
    raise TypeError(f"Unsupported image type: {type(img)}")


def bgra_to_bgr(raw: np.ndarray) -> np.ndarray:
    """Drop the alpha channel of a BGRA screen grab (no-op for 3-channel)."""
    if raw.ndim == 3 and raw.shape[2] == 4:
        return cv2.cvtColor(raw, cv2.COLOR_BGRA2BGR)
    return raw


def rect_to_region(rect: Sequence[int]) -> dict:
    """Convert (x1, y1, x2, y2) to an mss region; width/height are at least 1."""
    x1, y1, x2, y2 = (int(v) for v in rect)
    return {
        "left": x1,
        "top": y1,
        "width": max(x2 - x1, 1),
        "height": max(y2 - y1, 1),
    }


def pixel_rgb(img: np.ndarray, x: int, y: int) -> Rgb:
    """Return pixel color at (x, y) of a BGR image as an RGB tuple.

    Raises IndexError if out of bounds.
    """
    h, w = img.shape[:2]
    if not (0 <= x < w and 0 <= y < h):
        raise IndexError(f"Pixel ({x},{y}) is out of bounds for image {w}x{h}")
    if img.ndim == 2:
        v = int(img[y, x])
        return (v, v, v)
    b, g, r = img[y, x][:3]
    return int(r), int(g), int(b)


def parse_hex_color(value: str) -> Rgb:
    """'#RRGGBB' / 'RRGGBB' -> (r, g, b)."""
    text = value.strip().lstrip("#")
    if len(text) != 6:
        raise ValueError(f"Invalid hex color: {value!r}")
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError as e:
        raise ValueError(f"Invalid hex color: {value!r}") from e


def color_distance(actual: Rgb, expected: Rgb) -> int:
    """Sum of per-channel absolute differences."""
    return sum(abs(int(a) - int(e)) for a, e in zip(actual, expected))


def color_match(actual: Rgb, expected: Rgb, tolerance: int) -> bool:
    """Colors match when the summed channel difference is within 3 x tolerance."""
    return color_distance(actual, expected) <= tolerance * 3


__all__ = [
    "ImageLike",
    "Rgb",
    "Rect",
    "load_image",
    "bgra_to_bgr",
    "rect_to_region",
    "pixel_rgb",
    "parse_hex_color",
    "color_distance",
    "color_match",
]
