"""WhaleShrink - 统一异常定义(Shared Kernel).

说明:
- 本模块只负责定义异常类型与语义字段,不包含输出/CLI 细节.
- 跳过(快照库、空闲空间已达标的文件)属于结果状态而非异常,不在此定义.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from whaleshrink.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity


@dataclass(frozen=True, slots=True)
class ExceptionMetadata:
    """异常的元信息."""

    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str


class AppError(Exception):
    """统一的基础业务异常.

    Args:
        message: 自定义错误文案,若为空则根据 ``message_key`` 推导.
        message_key: 自定义消息键.
        extra: 结构化日志附加字段.
        severity: 错误严重度.
        category: 错误分类.
    """

    metadata = ExceptionMetadata(
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        message_key: str | None = None,
        extra: dict[str, Any] | None = None,
        severity: ErrorSeverity | None = None,
        category: ErrorCategory | None = None,
    ) -> None:
        """初始化基础业务异常.

        Args:
            message: 直接使用的错误提示,缺省时会根据 message_key 推导.
            message_key: 覆盖默认 message_key 的可选值.
            extra: 结构化日志附加字段.
            severity: 错误严重度.
            category: 错误分类.
        """
        self.message_key = message_key or self.metadata.default_message_key
        self.message = message or getattr(ErrorMessages, self.message_key, ErrorMessages.INTERNAL_ERROR)
        self.extra = dict(extra or {})
        self.severity = severity or self.metadata.severity
        self.category = category or self.metadata.category
        super().__init__(self.message)

    @property
    def recoverable(self) -> bool:
        """表示该异常是否可恢复(批处理可继续)."""

        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)


class ValidationError(AppError):
    """表示调用参数验证失败."""

    metadata = ExceptionMetadata(
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        default_message_key="VALIDATION_ERROR",
    )


class ConfigurationError(AppError):
    """表示整次调用的配置不完整,在连接任何服务器之前抛出."""

    metadata = ExceptionMetadata(
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        default_message_key="SELECTION_REQUIRED",
    )


class ServerConnectionError(AppError):
    """表示无法连接或登录某台服务器,仅影响该服务器."""

    metadata = ExceptionMetadata(
        category=ErrorCategory.NETWORK,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="DATABASE_CONNECTION_ERROR",
    )


class SizingError(AppError):
    """表示读取文件大小/已用空间失败,仅影响该文件."""

    metadata = ExceptionMetadata(
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="SIZING_ERROR",
    )


class ShrinkExecutionError(AppError):
    """表示 DBCC SHRINKFILE 执行失败,仅影响该文件,已完成的步骤不回滚."""

    metadata = ExceptionMetadata(
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="SHRINK_EXECUTION_ERROR",
    )


class FragmentationQueryError(AppError):
    """表示索引碎片聚合查询失败."""

    metadata = ExceptionMetadata(
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.LOW,
        default_message_key="FRAGMENTATION_QUERY_ERROR",
    )


__all__ = [
    "AppError",
    "ConfigurationError",
    "FragmentationQueryError",
    "ServerConnectionError",
    "ShrinkExecutionError",
    "SizingError",
    "ValidationError",
]
