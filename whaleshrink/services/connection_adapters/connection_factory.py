"""SQL Server 连接工厂,为编排器提供已连接的服务器句柄."""

from __future__ import annotations

from typing import TYPE_CHECKING

from whaleshrink.core.exceptions import ServerConnectionError
from whaleshrink.services.connection_adapters.sqlserver_adapter import (
    SQLSERVER_CONNECTION_EXCEPTIONS,
    SQLServerConnection,
)
from whaleshrink.services.connection_adapters.sqlserver_handles import SQLServerServerHandle
from whaleshrink.settings import Settings

if TYPE_CHECKING:
    from whaleshrink.schemas import ServerTarget, ShrinkOptions


def connect_sqlserver(
    target: ServerTarget,
    options: ShrinkOptions,
    settings: Settings | None = None,
) -> SQLServerServerHandle:
    """建立连接并返回服务器句柄.

    语句超时取自调用参数 ``statement_timeout_minutes``, 0 表示不限制
    (收缩可能合法地运行很长时间).

    Args:
        target: 服务器目标.
        options: 调用参数.
        settings: 运行时设置,缺省时从环境变量加载.

    Returns:
        SQLServerServerHandle: 已连接的服务器句柄.

    Raises:
        ServerConnectionError: 连接、登录或读取版本失败.

    """
    resolved_settings = settings or Settings.load()
    connection = SQLServerConnection(
        target,
        resolved_settings,
        statement_timeout_seconds=options.statement_timeout_seconds,
    )
    try:
        connection.connect()
        return SQLServerServerHandle(connection, target)
    except SQLSERVER_CONNECTION_EXCEPTIONS as exc:
        connection.disconnect()
        raise ServerConnectionError(
            f"无法连接服务器 {target.sql_instance}: {exc}",
            extra={"server": target.sql_instance},
        ) from exc
