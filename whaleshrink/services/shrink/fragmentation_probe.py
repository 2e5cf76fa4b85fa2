"""索引碎片采集."""

from __future__ import annotations

from typing import TYPE_CHECKING

from whaleshrink.constants import FRAGMENTATION_MIN_VERSION_MAJOR
from whaleshrink.core.exceptions import FragmentationQueryError
from whaleshrink.utils.structlog_config import get_db_logger

if TYPE_CHECKING:
    from whaleshrink.core.types import FragmentationSample, ServerHandle

# 单条聚合查询, 按数据库分组, 仅统计超过 100 页且存在碎片的索引
FRAGMENTATION_QUERY = """
    SELECT
        indexstats.database_id,
        AVG(indexstats.avg_fragmentation_in_percent) AS avg_fragmentation_in_percent,
        MAX(indexstats.avg_fragmentation_in_percent) AS max_fragmentation_in_percent
    FROM sys.dm_db_index_physical_stats(DB_ID(), NULL, NULL, NULL, NULL) AS indexstats
    WHERE indexstats.avg_fragmentation_in_percent > 0
        AND indexstats.page_count > 100
    GROUP BY indexstats.database_id
"""


class FragmentationProbe:
    """在收缩前后采集数据库的平均/最大索引碎片.

    Attributes:
        logger: 数据库日志记录器.

    Example:
        >>> probe = FragmentationProbe()
        >>> if probe.is_supported(server):
        ...     sample = probe.measure(server, "mydb")

    """

    def __init__(self) -> None:
        self.logger = get_db_logger()

    @staticmethod
    def is_supported(server: ServerHandle) -> bool:
        """判断服务器版本是否支持 sys.dm_db_index_physical_stats."""
        return server.version_major >= FRAGMENTATION_MIN_VERSION_MAJOR

    def measure(self, server: ServerHandle, database_name: str) -> FragmentationSample | None:
        """采集指定数据库当前的索引碎片.

        Args:
            server: 已连接的服务器.
            database_name: 数据库名称.

        Returns:
            FragmentationSample | None: 无满足条件的索引时返回 None.

        Raises:
            FragmentationQueryError: 查询失败.

        """
        try:
            sample = server.run_scalar_aggregate_query(FRAGMENTATION_QUERY, database_name)
        except Exception as exc:  # noqa: BLE001
            raise FragmentationQueryError(
                extra={"server": server.name, "database": database_name, "error": str(exc)},
            ) from exc

        self.logger.debug(
            "fragmentation_measured",
            server=server.name,
            database=database_name,
            avg_fragmentation=sample.avg_fragmentation_percent if sample else None,
            max_fragmentation=sample.max_fragmentation_percent if sample else None,
        )
        return sample
