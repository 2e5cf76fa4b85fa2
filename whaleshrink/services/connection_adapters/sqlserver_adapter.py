"""SQL Server 数据库连接适配器."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, TypeAlias

import pymssql

from whaleshrink.utils.structlog_config import get_db_logger

if TYPE_CHECKING:
    from whaleshrink.schemas import ServerTarget
    from whaleshrink.settings import Settings

QueryParams: TypeAlias = Sequence[Any] | Mapping[str, Any] | None
QueryResultRow: TypeAlias = Sequence[Any]
QueryResult: TypeAlias = list[QueryResultRow]


class ConnectionAdapterError(RuntimeError):
    """数据库连接适配器异常."""


SQLSERVER_CONNECTION_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionAdapterError,
    ConnectionError,
    TimeoutError,
    OSError,
    pymssql.Error,
)


class SQLServerConnection:
    """SQL Server 数据库连接(pymssql).

    Attributes:
        target: 服务器目标.
        connection: pymssql 连接对象.
        is_connected: 是否已连接.

    """

    def __init__(
        self,
        target: ServerTarget,
        settings: Settings,
        *,
        statement_timeout_seconds: int = 0,
    ) -> None:
        """初始化 SQL Server 连接适配器.

        Args:
            target: 服务器目标.
            settings: 运行时设置(凭据、登录超时、TDS 版本).
            statement_timeout_seconds: 语句超时(秒), 0 表示不限制.

        """
        self.target = target
        self.settings = settings
        self.statement_timeout_seconds = statement_timeout_seconds
        self.db_logger = get_db_logger()
        self.connection: Any = None
        self.is_connected = False

    def connect(self) -> None:
        """建立 SQL Server 连接.

        Raises:
            ConnectionAdapterError: 连接或登录失败.

        """
        connect_kwargs: dict[str, Any] = {
            "server": self.target.server_address,
            "user": self.settings.sqlserver_username,
            "password": self.settings.sqlserver_password,
            "database": self.settings.sqlserver_database,
            "timeout": self.statement_timeout_seconds,
            "login_timeout": self.settings.sqlserver_login_timeout_seconds,
            "tds_version": self.settings.sqlserver_tds_version,
            "autocommit": True,
        }
        if self.target.port is not None:
            connect_kwargs["port"] = self.target.port
        elif not self.target.instance:
            connect_kwargs["port"] = self.settings.sqlserver_default_port

        try:
            self.connection = pymssql.connect(**connect_kwargs)
        except SQLSERVER_CONNECTION_EXCEPTIONS as exc:
            self.db_logger.exception(
                "sqlserver_connection_failed",
                server=self.target.sql_instance,
                username=self.settings.sqlserver_username,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            msg = f"SQL Server连接失败: {self.target.sql_instance}: {exc}"
            raise ConnectionAdapterError(msg) from exc

        self.is_connected = True

    def disconnect(self) -> None:
        """断开 SQL Server 连接并清理状态."""
        if self.connection:
            try:
                self.connection.close()
            except SQLSERVER_CONNECTION_EXCEPTIONS as exc:
                self.db_logger.warning(
                    "sqlserver_disconnect_error",
                    server=self.target.sql_instance,
                    error=str(exc),
                )
            finally:
                self.connection = None
                self.is_connected = False

    def execute_query(self, query: str, params: QueryParams = None) -> QueryResult:
        """执行 SQL 查询并返回 `fetchall` 结果.

        Args:
            query: SQL 语句.
            params: 查询参数.

        Returns:
            QueryResult: `fetchall` 的结果.

        """
        cursor = self._cursor()
        try:
            cursor.execute(query, self._bind(params))
            rows = cursor.fetchall()
            return list(rows)
        finally:
            cursor.close()

    def execute_non_query(self, statement: str, params: QueryParams = None) -> None:
        """执行不返回结果集的语句(DBCC 等).

        Args:
            statement: SQL 语句.
            params: 语句参数.

        """
        cursor = self._cursor()
        try:
            cursor.execute(statement, self._bind(params))
        finally:
            cursor.close()

    def get_version(self) -> str | None:
        """查询 SQL Server 产品版本号,例如 '15.0.2000.5'."""
        result = self.execute_query("SELECT CAST(SERVERPROPERTY('ProductVersion') AS NVARCHAR(128))")
        if result and result[0]:
            return result[0][0]
        return None

    def _cursor(self) -> Any:
        if not self.is_connected:
            msg = "无法建立数据库连接"
            raise ConnectionAdapterError(msg)
        return self.connection.cursor()

    @staticmethod
    def _bind(params: QueryParams) -> Sequence[Any] | Mapping[str, Any] | None:
        if params is None:
            return None
        return params if isinstance(params, Mapping) else tuple(params)
