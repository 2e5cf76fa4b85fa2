"""常量模块。

集中管理收缩任务使用的系统常量。

主要常量：
- ErrorCategory / ErrorSeverity / ErrorMessages: 错误分类与文案
- ShrinkMethod: DBCC SHRINKFILE 收缩方式
- FileType: 文件类型选择器
- OutcomeStatus: 单个处理单元的结果状态
"""

from .shrink_constants import (
    FRAGMENTATION_MIN_VERSION_MAJOR,
    SHRINK_ADVISORY_NOTE,
    FileType,
    OutcomeStatus,
    ShrinkMethod,
)
from .system_constants import ErrorCategory, ErrorMessages, ErrorSeverity, LogLevel

__all__ = [
    "FRAGMENTATION_MIN_VERSION_MAJOR",
    "SHRINK_ADVISORY_NOTE",
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "FileType",
    "LogLevel",
    "OutcomeStatus",
    "ShrinkMethod",
]
