"""统一时间处理工具模块."""

from datetime import UTC, datetime, timedelta


class TimeUtils:
    """统一时间处理工具类.

    收缩结果的开始/结束时间统一使用带时区的 UTC 时间.
    """

    @staticmethod
    def now() -> datetime:
        """获取当前 UTC 时间.

        Returns:
            带 UTC 时区信息的当前时间.

        """
        return datetime.now(UTC)

    @staticmethod
    def format_elapsed(elapsed: timedelta) -> str:
        """将耗时格式化为 HH:MM:SS.

        Args:
            elapsed: 耗时.

        Returns:
            形如 '01:02:03' 的字符串,超过一天时小时数继续累加.

        """
        total_seconds = max(int(elapsed.total_seconds()), 0)
        hours, remainder = divmod(total_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


time_utils = TimeUtils()
