"""
异常定义
"""


class ConfigError(ValueError):
    """配置文件缺失或格式错误"""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


__all__ = ["ConfigError"]
