"""SQL Server 版本解析工具
使用正则表达式提取主版本号.
"""

import re

# 版本提取正则表达式
VERSION_PATTERNS = [
    r"Microsoft SQL Server \d+\s+\([^)]+\)\s+\([^)]+\)\s+-\s+(\d+)\.\d+\.\d+\.\d+",  # 14.0.3465.1
    r"(\d+)\.\d+\.\d+\.\d+",  # 14.0.3465.1
    r"^(\d+)\.\d+",  # 14.0
]


def parse_major_version(version_string: str | None) -> int:
    """从 @@VERSION 或 SERVERPROPERTY('ProductVersion') 中提取主版本号.

    Args:
        version_string: 原始版本字符串.

    Returns:
        主版本号,无法识别时返回 0.

    Example:
        >>> parse_major_version('Microsoft SQL Server 2017 (RTM-CU31) (KB5016884) - 14.0.3456.2 (X64)')
        14

    """
    if not version_string:
        return 0
    for pattern in VERSION_PATTERNS:
        match = re.search(pattern, version_string, re.IGNORECASE)
        if match:
            return int(match.group(1))
    return 0
