"""服务器/数据库/文件句柄协议.

编排层只依赖这些协议,具体的 SQL Server 实现见
`whaleshrink.services.connection_adapters.sqlserver_handles`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from whaleshrink.core.types.shrink import FragmentationSample, StorageFileSnapshot


class StorageFileHandle(Protocol):
    """单个数据/日志文件."""

    name: str
    file_type: str

    def refresh(self) -> StorageFileSnapshot:
        """协议方法: 从服务器重新读取大小与已用空间."""
        ...

    def shrink_to(self, target_mb: int, method: str) -> None:
        """协议方法: 收缩到目标大小(MB),失败时抛出异常."""
        ...


class DatabaseHandle(Protocol):
    """单个数据库."""

    name: str
    is_snapshot: bool
    is_accessible: bool
    is_system: bool

    def data_files(self) -> Sequence[StorageFileHandle]:
        """协议方法: 列出数据文件."""
        ...

    def log_files(self) -> Sequence[StorageFileHandle]:
        """协议方法: 列出日志文件."""
        ...

    def update_usage(self) -> None:
        """协议方法: 修正页/行计数(DBCC UPDATEUSAGE)."""
        ...


class ServerHandle(Protocol):
    """已连接的服务器."""

    name: str
    computer_name: str
    instance_name: str
    version_major: int

    def list_databases(self) -> Sequence[DatabaseHandle]:
        """协议方法: 列出数据库."""
        ...

    def run_scalar_aggregate_query(self, sql: str, database_name: str) -> FragmentationSample | None:
        """协议方法: 在指定数据库上下文执行单行聚合查询."""
        ...

    def close(self) -> None:
        """协议方法: 释放连接."""
        ...
