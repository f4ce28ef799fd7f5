"""键名与 HID 键码映射。"""
from __future__ import annotations

from typing import Dict, Optional

_NAMED_KEYS: Dict[str, int] = {
    "enter": 0x28,
    "esc": 0x29,
    "escape": 0x29,
    "backspace": 0x2A,
    "tab": 0x2B,
    "space": 0x2C,
    " ": 0x2C,
    "\x1b": 0x29,
}


def key_code(key: str) -> Optional[int]:
    """把键名（单字符或命名键）转换为 HID 键码，未知键返回 None。

    a-z -> 0x04..0x1D，1-9 -> 0x1E..0x26，0 -> 0x27。
    """
    if not key:
        return None
    name = key.lower()
    if name in _NAMED_KEYS:
        return _NAMED_KEYS[name]
    if len(name) != 1:
        return None
    if "a" <= name <= "z":
        return ord(name) - ord("a") + 0x04
    if "1" <= name <= "9":
        return ord(name) - ord("1") + 0x1E
    if name == "0":
        return 0x27
    return None


def key_name(code: int) -> Optional[str]:
    """HID 键码反查键名（软件驱动需要键名）。"""
    if 0x04 <= code <= 0x1D:
        return chr(code - 0x04 + ord("a"))
    if 0x1E <= code <= 0x26:
        return chr(code - 0x1E + ord("1"))
    if code == 0x27:
        return "0"
    for name, value in _NAMED_KEYS.items():
        if value == code and len(name) > 1:
            return name
    return None


__all__ = ["key_code", "key_name"]
