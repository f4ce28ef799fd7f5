"""
常量和枚举定义
"""
from enum import Enum, IntEnum


class MatchLogic(str, Enum):
    """场景识别规则"""
    AND = "and"  # 全部锚点命中
    OR = "or"  # 任一锚点命中

    @classmethod
    def parse(cls, value: str | None) -> "MatchLogic":
        # 未填写或无法识别时按 AND 处理
        if value and value.strip().lower() == "or":
            return cls.OR
        return cls.AND


class NavStatus(str, Enum):
    """导航结果"""
    SUCCESS = "success"
    HANDOVER = "handover"
    FAILED = "failed"


class TaskKind(IntEnum):
    """布防任务类型，数值即同排序下的优先级"""
    DEMOLISH = 0
    BUILD = 1
    UPGRADE = 2


class CameraEdge(str, Enum):
    """镜头对齐边界"""
    TOP = "top"
    BOTTOM = "bottom"


class MapRegion(str, Enum):
    """地图纵向分区"""
    UPPER = "upper"
    LOWER = "lower"


class DiagnosticMode(str, Enum):
    """自检模式"""
    INPUT = "input"
    SCREEN = "screen"
    OCR = "ocr"
    SCROLL = "scroll"


# 默认的场景跳转处理器
DEFAULT_HANDLER = "td"

# 关卡文件命名
TERRAIN_FILE_SUFFIX = "地图.json"
STRATEGY_FILE_SUFFIX = "策略.json"
