"""WhaleShrink - 系统常量定义

统一管理错误分类、严重度和错误文案.
"""

from enum import Enum


class LogLevel(Enum):
    """日志级别枚举."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    NETWORK = "network"
    DATABASE = "database"
    SYSTEM = "system"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorMessages:
    """错误消息常量."""

    # 通用错误
    INTERNAL_ERROR = "内部错误"
    VALIDATION_ERROR = "参数验证失败"

    # 配置错误
    SELECTION_REQUIRED = "必须指定 databases、exclude_databases 或 all_user_databases 之一"

    # 连接错误
    DATABASE_CONNECTION_ERROR = "数据库连接失败"

    # 收缩错误
    SIZING_ERROR = "读取文件大小失败"
    SHRINK_EXECUTION_ERROR = "文件收缩执行失败"
    FRAGMENTATION_QUERY_ERROR = "索引碎片查询失败"
