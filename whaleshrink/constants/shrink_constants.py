"""收缩任务常量.

定义收缩方式、文件类型与结果状态,避免魔法字符串.
"""

from __future__ import annotations

from typing import ClassVar


class ShrinkMethod:
    """DBCC SHRINKFILE 收缩方式常量."""

    DEFAULT = "Default"
    EMPTY_FILE = "EmptyFile"
    NO_TRUNCATE = "NoTruncate"
    TRUNCATE_ONLY = "TruncateOnly"

    ALL: ClassVar[tuple[str, ...]] = (DEFAULT, EMPTY_FILE, NO_TRUNCATE, TRUNCATE_ONLY)

    # DBCC SHRINKFILE 的附加选项, Default 不附加任何选项
    DBCC_OPTIONS: ClassVar[dict[str, str | None]] = {
        DEFAULT: None,
        EMPTY_FILE: "EMPTYFILE",
        NO_TRUNCATE: "NOTRUNCATE",
        TRUNCATE_ONLY: "TRUNCATEONLY",
    }


class FileType:
    """文件类型选择器常量."""

    ALL_FILES = "All"
    DATA = "Data"
    LOG = "Log"

    ALL: ClassVar[tuple[str, ...]] = (ALL_FILES, DATA, LOG)

    # sys.database_files.type_desc 到文件类型的映射
    TYPE_DESC_MAPPING: ClassVar[dict[str, str]] = {
        "ROWS": DATA,
        "LOG": LOG,
    }


class OutcomeStatus:
    """单个处理单元(文件/数据库)的结果状态."""

    SHRUNK = "shrunk"  # 收缩完成
    FAILED = "failed"  # 失败
    SKIPPED = "skipped"  # 跳过
    PLANNED = "planned"  # 仅预览(what-if)

    ALL: ClassVar[tuple[str, ...]] = (SHRUNK, FAILED, SKIPPED, PLANNED)

    ERROR: ClassVar[tuple[str, ...]] = (FAILED,)


# SQL Server 2000 (主版本 8) 及以下不支持 sys.dm_db_index_physical_stats
FRAGMENTATION_MIN_VERSION_MAJOR = 9

SHRINK_ADVISORY_NOTE = (
    "数据库收缩可能导致严重的索引碎片并影响性能,"
    "建议随后执行 ALTER INDEX ... REORGANIZE 或重建索引."
)
