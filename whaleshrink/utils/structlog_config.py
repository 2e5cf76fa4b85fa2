"""WhaleShrink 的结构化日志配置与辅助函数."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, cast

import structlog

from whaleshrink.settings import APP_NAME, APP_VERSION

if TYPE_CHECKING:
    from structlog.typing import BindableLogger, EventDict, Processor


class StructlogConfig:
    """structlog 配置核心类.

    负责配置 structlog 的处理器链与日志级别.命令行进程只需要配置一次,
    重复调用 `configure` 只会调整日志级别.

    Attributes:
        configured: 是否已配置标志.
        level: 当前生效的日志级别.

    Example:
        >>> structlog_config.configure(level="DEBUG")
        >>> logger = get_logger("shrink")

    """

    def __init__(self) -> None:
        self.configured = False
        self.level = logging.INFO

    def configure(self, level: str | int | None = None) -> None:
        """初始化 structlog 处理器(幂等).

        Args:
            level: 日志级别名称或数值,可选.

        Returns:
            None.

        """
        if level is not None:
            self.level = getattr(logging, level.upper(), logging.INFO) if isinstance(level, str) else level
            logging.getLogger().setLevel(self.level)

        if self.configured:
            return

        logging.basicConfig(format="%(message)s", stream=sys.stderr, level=self.level)
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            self._add_global_context,
            self._get_renderer(),
        ]
        structlog.configure(
            processors=cast("list[Processor]", processors),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        self.configured = True

    @staticmethod
    def _add_global_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """附加应用名称、版本等全局上下文.

        Args:
            logger: 当前 logger.
            method_name: 日志方法.
            event_dict: 事件字典.

        Returns:
            更新后的事件字典.

        """
        event_dict["app_name"] = APP_NAME
        event_dict["app_version"] = APP_VERSION
        event_dict["logger_name"] = getattr(_logger, "name", "unknown")
        return event_dict

    @staticmethod
    def _get_renderer() -> Processor:
        """根据终端能力返回渲染器.

        Returns:
            structlog renderer: 终端下使用彩色控制台输出,否则输出 JSON.

        """
        if sys.stderr.isatty():
            return structlog.dev.ConsoleRenderer(colors=True)
        return structlog.processors.JSONRenderer(ensure_ascii=False)


structlog_config = StructlogConfig()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器.

    Args:
        name: 日志记录器名称,通常使用模块名.

    Returns:
        绑定的 structlog 日志记录器实例.

    Example:
        >>> logger = get_logger('shrink')
        >>> logger.info('shrink_file_completed', database='db1')

    """
    structlog_config.configure()
    return structlog.get_logger(name)


def configure_logging(level: str | None = None) -> None:
    """按配置的日志级别初始化日志系统.

    Args:
        level: 日志级别名称,例如 'INFO'.

    Returns:
        None.

    """
    structlog_config.configure(level=level)


def get_system_logger() -> structlog.stdlib.BoundLogger:
    """返回系统级 logger."""
    return get_logger("system")


def get_db_logger() -> structlog.stdlib.BoundLogger:
    """返回数据库操作 logger."""
    return get_logger("database")


def get_task_logger() -> structlog.stdlib.BoundLogger:
    """返回收缩任务 logger."""
    return get_logger("task")


__all__ = [
    "configure_logging",
    "get_db_logger",
    "get_logger",
    "get_system_logger",
    "get_task_logger",
    "structlog_config",
]
