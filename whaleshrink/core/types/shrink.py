"""文件收缩相关类型定义."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from whaleshrink.constants import OutcomeStatus

if TYPE_CHECKING:
    from whaleshrink.core.exceptions import AppError

KB_PER_MB = 1024


@dataclass(frozen=True, slots=True)
class StorageFileSnapshot:
    """某一时刻从服务器读取的文件大小快照(单位 KB).

    快照不会随远端状态自动更新,每次收缩后必须重新读取.
    """

    name: str
    file_type: str
    size_kb: float
    used_kb: float

    @property
    def size_mb(self) -> float:
        return self.size_kb / KB_PER_MB

    @property
    def used_mb(self) -> float:
        return self.used_kb / KB_PER_MB

    @property
    def available_mb(self) -> float:
        return (self.size_kb - self.used_kb) / KB_PER_MB


@dataclass(frozen=True, slots=True)
class FragmentationSample:
    """单个数据库在某一时刻的索引碎片聚合值(百分比).

    未采集时整体为 None,不存在只有一半字段的样本.
    """

    avg_fragmentation_percent: float
    max_fragmentation_percent: float


@dataclass(frozen=True, slots=True)
class ShrinkExecutionReport:
    """单个文件逐步收缩的执行报告."""

    success: bool
    start: datetime
    end: datetime
    final_snapshot: StorageFileSnapshot
    completed_steps: tuple[int, ...]
    error: AppError | None = None

    @property
    def elapsed(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class ShrinkResult:
    """单个文件的收缩结果记录,创建后不可变."""

    computer_name: str
    instance_name: str
    sql_instance: str
    database: str
    file: str
    file_type: str
    start: datetime
    end: datetime
    success: bool
    initial_size_mb: float
    initial_used_mb: float
    initial_available_mb: float
    target_available_mb: int
    final_available_mb: float
    final_size_mb: float
    initial_fragmentation: FragmentationSample | None
    final_fragmentation: FragmentationSample | None
    planned_steps: tuple[int, ...]
    completed_steps: tuple[int, ...]
    notes: str | None = None
    error_message: str | None = None

    @property
    def elapsed(self) -> timedelta:
        return self.end - self.start

    def to_dict(self, *, include_fragmentation: bool = True) -> dict[str, Any]:
        """转换为输出字典.

        Args:
            include_fragmentation: 为 False 时省略全部碎片字段(排除索引统计时使用).

        Returns:
            dict[str, Any]: 可直接序列化为 JSON 的字典,大小统一保留两位小数(MB).

        """
        payload: dict[str, Any] = {
            "computer_name": self.computer_name,
            "instance_name": self.instance_name,
            "sql_instance": self.sql_instance,
            "database": self.database,
            "file": self.file,
            "file_type": self.file_type,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "elapsed_seconds": round(self.elapsed.total_seconds(), 3),
            "success": self.success,
            "initial_size_mb": round(self.initial_size_mb, 2),
            "initial_used_mb": round(self.initial_used_mb, 2),
            "initial_available_mb": round(self.initial_available_mb, 2),
            "target_available_mb": self.target_available_mb,
            "final_available_mb": round(self.final_available_mb, 2),
            "final_size_mb": round(self.final_size_mb, 2),
            "planned_steps": list(self.planned_steps),
            "completed_steps": list(self.completed_steps),
            "notes": self.notes,
            "error": self.error_message,
        }
        if include_fragmentation:
            initial = self.initial_fragmentation
            final = self.final_fragmentation
            payload["initial_average_fragmentation"] = initial.avg_fragmentation_percent if initial else None
            payload["final_average_fragmentation"] = final.avg_fragmentation_percent if final else None
            payload["initial_top_fragmentation"] = initial.max_fragmentation_percent if initial else None
            payload["final_top_fragmentation"] = final.max_fragmentation_percent if final else None
        return payload


@dataclass(frozen=True, slots=True)
class ShrinkOutcome:
    """批处理流中的一条记录,对应一个文件或一个被整体跳过/失败的数据库."""

    status: str
    server: str
    database: str
    file: str | None = None
    reason: str | None = None
    plan: tuple[int, ...] = field(default_factory=tuple)
    result: ShrinkResult | None = None

    @property
    def is_failure(self) -> bool:
        return self.status in OutcomeStatus.ERROR

    def to_dict(self, *, include_fragmentation: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "server": self.server,
            "database": self.database,
            "file": self.file,
            "reason": self.reason,
            "plan": list(self.plan),
        }
        if self.result is not None:
            payload["result"] = self.result.to_dict(include_fragmentation=include_fragmentation)
        return payload
