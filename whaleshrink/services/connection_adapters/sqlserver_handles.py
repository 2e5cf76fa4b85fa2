"""SQL Server 服务器/数据库/文件句柄实现.

句柄只负责下发 SQL, 不缓存远端状态: 文件大小每次都通过 `refresh` 重新读取.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from whaleshrink.constants import FileType, ShrinkMethod
from whaleshrink.core.types import FragmentationSample, StorageFileSnapshot
from whaleshrink.services.connection_adapters.sqlserver_adapter import ConnectionAdapterError
from whaleshrink.utils.structlog_config import get_db_logger
from whaleshrink.utils.version_parser import parse_major_version

if TYPE_CHECKING:
    from whaleshrink.schemas import ServerTarget
    from whaleshrink.services.connection_adapters.sqlserver_adapter import SQLServerConnection

# sys.database_files.size 以 8KB 页为单位
KB_PER_PAGE = 8

DATABASES_QUERY = """
    SELECT
        name,
        CASE WHEN database_id <= 4 THEN 1 ELSE 0 END AS is_system,
        CASE WHEN source_database_id IS NOT NULL THEN 1 ELSE 0 END AS is_snapshot,
        CASE WHEN state_desc = 'ONLINE' AND HAS_DBACCESS(name) = 1 THEN 1 ELSE 0 END AS is_accessible
    FROM sys.databases
    WHERE name IS NOT NULL
    ORDER BY name
"""

FILES_QUERY = """
    SELECT
        name,
        type_desc
    FROM sys.database_files
    WHERE type_desc IN ('ROWS', 'LOG')
    ORDER BY file_id
"""

FILE_SIZE_QUERY = f"""
    SELECT
        CAST(size AS BIGINT) * {KB_PER_PAGE} AS size_kb,
        CAST(FILEPROPERTY(name, 'SpaceUsed') AS BIGINT) * {KB_PER_PAGE} AS used_kb
    FROM sys.database_files
    WHERE name = %s
"""


def quote_identifier(name: str) -> str:
    """将名称包装为 [name] 形式的标识符."""
    return "[" + name.replace("]", "]]") + "]"


def quote_literal(value: str) -> str:
    """将字符串包装为 N'...' 形式的字面量."""
    return "N'" + value.replace("'", "''") + "'"


def build_shrinkfile_statement(file_name: str, target_mb: int, method: str) -> str:
    """生成 DBCC SHRINKFILE 语句.

    Args:
        file_name: 逻辑文件名.
        target_mb: 目标大小(MB).
        method: 收缩方式,见 `ShrinkMethod`.

    Returns:
        str: DBCC SHRINKFILE 语句. EmptyFile 不带目标大小.

    Example:
        >>> build_shrinkfile_statement("db_log", 200, "NoTruncate")
        "DBCC SHRINKFILE (N'db_log', 200, NOTRUNCATE)"

    """
    if method not in ShrinkMethod.DBCC_OPTIONS:
        msg = f"不支持的收缩方式: {method}"
        raise ValueError(msg)
    option = ShrinkMethod.DBCC_OPTIONS[method]
    file_literal = quote_literal(file_name)
    if method == ShrinkMethod.EMPTY_FILE:
        return f"DBCC SHRINKFILE ({file_literal}, {option})"
    if option:
        return f"DBCC SHRINKFILE ({file_literal}, {int(target_mb)}, {option})"
    return f"DBCC SHRINKFILE ({file_literal}, {int(target_mb)})"


class SQLServerFileHandle:
    """单个数据库文件."""

    def __init__(self, database: SQLServerDatabaseHandle, name: str, file_type: str) -> None:
        self.database = database
        self.name = name
        self.file_type = file_type

    def refresh(self) -> StorageFileSnapshot:
        """重新读取文件大小与已用空间(KB)."""
        connection = self.database.use()
        rows = connection.execute_query(FILE_SIZE_QUERY, (self.name,))
        if not rows:
            msg = f"数据库 {self.database.name} 中未找到文件 {self.name}"
            raise LookupError(msg)
        size_kb, used_kb = rows[0][0], rows[0][1]
        if size_kb is None or used_kb is None:
            msg = f"文件 {self.name} 的大小信息不可读"
            raise ValueError(msg)
        return StorageFileSnapshot(
            name=self.name,
            file_type=self.file_type,
            size_kb=float(size_kb),
            used_kb=float(used_kb),
        )

    def shrink_to(self, target_mb: int, method: str) -> None:
        """执行 DBCC SHRINKFILE,失败时由驱动抛出异常."""
        connection = self.database.use()
        connection.execute_non_query(build_shrinkfile_statement(self.name, target_mb, method))


class SQLServerDatabaseHandle:
    """单个数据库."""

    def __init__(
        self,
        server: SQLServerServerHandle,
        name: str,
        *,
        is_system: bool,
        is_snapshot: bool,
        is_accessible: bool,
    ) -> None:
        self.server = server
        self.name = name
        self.is_system = is_system
        self.is_snapshot = is_snapshot
        self.is_accessible = is_accessible

    def use(self) -> SQLServerConnection:
        """切换连接的数据库上下文并返回连接."""
        connection = self.server.connection
        connection.execute_non_query(f"USE {quote_identifier(self.name)}")
        return connection

    def _files(self, file_type: str) -> list[SQLServerFileHandle]:
        rows = self.use().execute_query(FILES_QUERY)
        files: list[SQLServerFileHandle] = []
        for row in rows:
            mapped = FileType.TYPE_DESC_MAPPING.get(str(row[1]).upper())
            if mapped == file_type:
                files.append(SQLServerFileHandle(self, str(row[0]), mapped))
        return files

    def data_files(self) -> list[SQLServerFileHandle]:
        return self._files(FileType.DATA)

    def log_files(self) -> list[SQLServerFileHandle]:
        return self._files(FileType.LOG)

    def update_usage(self) -> None:
        """执行 DBCC UPDATEUSAGE(0),修正目录视图中的页/行计数."""
        self.use().execute_non_query("DBCC UPDATEUSAGE(0) WITH NO_INFOMSGS")


class SQLServerServerHandle:
    """已连接的 SQL Server 实例."""

    def __init__(self, connection: SQLServerConnection, target: ServerTarget) -> None:
        self.connection = connection
        self.target = target
        self.name = target.sql_instance
        self.computer_name = target.computer_name
        self.instance_name = target.instance_name
        self.version_major = parse_major_version(connection.get_version())
        self.logger = get_db_logger()

    def list_databases(self) -> list[SQLServerDatabaseHandle]:
        rows = self.connection.execute_query(DATABASES_QUERY)
        databases: list[SQLServerDatabaseHandle] = []
        for row in rows:
            name = str(row[0]).strip() if row and row[0] is not None else ""
            if not name:
                continue
            databases.append(
                SQLServerDatabaseHandle(
                    self,
                    name,
                    is_system=bool(row[1]),
                    is_snapshot=bool(row[2]),
                    is_accessible=bool(row[3]),
                ),
            )
        self.logger.info("sqlserver_list_databases_success", server=self.name, database_count=len(databases))
        return databases

    def run_scalar_aggregate_query(self, sql: str, database_name: str) -> FragmentationSample | None:
        """在指定数据库上下文执行单行聚合查询(database_id, avg, max)."""
        self.connection.execute_non_query(f"USE {quote_identifier(database_name)}")
        rows = self.connection.execute_query(sql)
        if not rows:
            return None
        row = rows[0]
        if len(row) < 3 or row[1] is None or row[2] is None:
            return None
        return FragmentationSample(
            avg_fragmentation_percent=float(row[1]),
            max_fragmentation_percent=float(row[2]),
        )

    def close(self) -> None:
        try:
            self.connection.disconnect()
        except ConnectionAdapterError as exc:
            self.logger.warning("sqlserver_close_error", server=self.name, error=str(exc))
