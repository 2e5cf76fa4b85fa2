"""SQL Server 连接适配器与句柄实现."""

from .connection_factory import connect_sqlserver
from .sqlserver_adapter import ConnectionAdapterError, SQLServerConnection
from .sqlserver_handles import SQLServerDatabaseHandle, SQLServerFileHandle, SQLServerServerHandle

__all__ = [
    "ConnectionAdapterError",
    "SQLServerConnection",
    "SQLServerDatabaseHandle",
    "SQLServerFileHandle",
    "SQLServerServerHandle",
    "connect_sqlserver",
]
