"""WhaleShrink - SQL Server 存储文件逐步收缩工具.

按期望空闲百分比计算每个数据/日志文件的目标大小,按步长逐步收缩,
并输出收缩前后的大小与索引碎片.
"""

from whaleshrink.settings import APP_VERSION

__version__ = APP_VERSION
