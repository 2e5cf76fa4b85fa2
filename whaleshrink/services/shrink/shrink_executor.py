"""单个文件的逐步收缩执行器."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from whaleshrink.core.exceptions import AppError, ShrinkExecutionError
from whaleshrink.core.types import ShrinkExecutionReport
from whaleshrink.utils.structlog_config import get_task_logger
from whaleshrink.utils.time_utils import time_utils

if TYPE_CHECKING:
    from whaleshrink.core.types import StorageFileHandle, StorageFileSnapshot


class ShrinkExecutor:
    """按计划逐步调用 DBCC SHRINKFILE 并在每步之后刷新文件大小.

    同一文件上的收缩由存储引擎串行化,这里也严格按顺序同步执行.
    第一次失败即终止剩余步骤; 收缩不可回滚, 已完成的步骤保留并如实报告.

    Attributes:
        logger: 任务日志记录器.

    """

    def __init__(self) -> None:
        self.logger = get_task_logger()

    def execute(
        self,
        file: StorageFileHandle,
        plan: Sequence[int],
        shrink_method: str,
        initial_snapshot: StorageFileSnapshot,
        *,
        context: dict[str, str] | None = None,
    ) -> ShrinkExecutionReport:
        """执行收缩计划.

        Args:
            file: 待收缩文件.
            plan: 目标大小序列(MB).
            shrink_method: 收缩方式.
            initial_snapshot: 收缩前读取的快照,计划为空或首步失败时作为最终快照.
            context: 日志附加字段(服务器/数据库).

        Returns:
            ShrinkExecutionReport: 成功标志、起止时间、最终快照与已完成步骤.
            异常不会向外传播,失败信息保存在 ``error`` 字段.

        """
        log_context = dict(context or {})
        snapshot = initial_snapshot
        completed: list[int] = []
        error: AppError | None = None

        start = time_utils.now()
        for index, target_mb in enumerate(plan, start=1):
            self.logger.info(
                "shrink_step_started",
                file=file.name,
                step=index,
                step_count=len(plan),
                target_mb=target_mb,
                shrink_method=shrink_method,
                **log_context,
            )
            try:
                file.shrink_to(target_mb, shrink_method)
            except Exception as exc:  # noqa: BLE001
                error = ShrinkExecutionError(
                    f"文件 {file.name} 收缩到 {target_mb} MB 失败: {exc}",
                    extra={"file": file.name, "step": index, "target_mb": target_mb, **log_context},
                )
                self.logger.exception(
                    "shrink_step_failed",
                    file=file.name,
                    step=index,
                    target_mb=target_mb,
                    error=str(exc),
                    error_type=type(exc).__name__,
                    **log_context,
                )
                break
            completed.append(target_mb)

            try:
                snapshot = file.refresh()
            except Exception as exc:  # noqa: BLE001
                error = ShrinkExecutionError(
                    f"文件 {file.name} 收缩后刷新大小失败: {exc}",
                    extra={"file": file.name, "step": index, **log_context},
                )
                self.logger.exception(
                    "shrink_refresh_failed",
                    file=file.name,
                    step=index,
                    error=str(exc),
                    **log_context,
                )
                break

            self.logger.info(
                "shrink_step_completed",
                file=file.name,
                step=index,
                size_mb=round(snapshot.size_mb, 2),
                available_mb=round(snapshot.available_mb, 2),
                **log_context,
            )
        end = time_utils.now()

        return ShrinkExecutionReport(
            success=error is None,
            start=start,
            end=end,
            final_snapshot=snapshot,
            completed_steps=tuple(completed),
            error=error,
        )
