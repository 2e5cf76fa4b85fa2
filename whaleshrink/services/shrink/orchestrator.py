"""收缩批处理编排器.

遍历顺序: 服务器 -> 数据库 -> 文件. 每个文件的状态流转为
``资格判断 -> [跳过 | 采集碎片(前) -> 收缩 -> 采集碎片(后) -> 输出结果]``.
服务器、数据库、文件级别的失败互相隔离, 只有配置错误会终止整个调用.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING

from whaleshrink.constants import SHRINK_ADVISORY_NOTE, FileType, OutcomeStatus, ShrinkMethod
from whaleshrink.core.exceptions import FragmentationQueryError, ServerConnectionError, SizingError
from whaleshrink.core.types import ShrinkOutcome, ShrinkResult
from whaleshrink.services.shrink import size_calculator, step_planner
from whaleshrink.services.shrink.database_filters import missing_databases, select_databases
from whaleshrink.services.shrink.fragmentation_probe import FragmentationProbe
from whaleshrink.services.shrink.shrink_executor import ShrinkExecutor
from whaleshrink.utils.structlog_config import get_task_logger

if TYPE_CHECKING:
    from whaleshrink.core.types import (
        DatabaseHandle,
        FragmentationSample,
        ServerHandle,
        ShrinkExecutionReport,
        StorageFileHandle,
        StorageFileSnapshot,
    )
    from whaleshrink.schemas import ServerTarget, ShrinkOptions

ServerConnector = Callable[["ServerTarget", "ShrinkOptions"], "ServerHandle"]


class ShrinkOrchestrator:
    """收缩批处理编排器.

    Attributes:
        options: 本次调用参数.
        failed_servers: 连接或枚举失败的服务器列表(不产生结果记录).
        logger: 任务日志记录器.

    Example:
        >>> orchestrator = ShrinkOrchestrator(options, connect_sqlserver)
        >>> for outcome in orchestrator.run(targets):
        ...     print(outcome.status, outcome.file)

    """

    def __init__(
        self,
        options: ShrinkOptions,
        connector: ServerConnector,
        *,
        probe: FragmentationProbe | None = None,
        executor: ShrinkExecutor | None = None,
        notes: str | None = None,
    ) -> None:
        self.options = options
        self.logger = get_task_logger()
        self.failed_servers: list[str] = []
        self._connector = connector
        self._probe = probe or FragmentationProbe()
        self._executor = executor or ShrinkExecutor()
        self._notes = notes or SHRINK_ADVISORY_NOTE

    def run(self, targets: Iterable[ServerTarget]) -> Iterator[ShrinkOutcome]:
        """按遍历顺序流式产出每个文件(或被整体跳过的数据库)的结果.

        Args:
            targets: 待处理的服务器列表.

        Yields:
            ShrinkOutcome: 每完成一个处理单元立即产出.

        Raises:
            ConfigurationError: 未指定数据库选择方式,在连接任何服务器之前抛出.

        """
        self.options.require_selection()
        target_list = list(targets)
        self.failed_servers = []

        for target in target_list:
            server = self._connect(target)
            if server is None:
                continue
            try:
                yield from self._process_server(target, server)
            finally:
                server.close()

    def _connect(self, target: ServerTarget) -> ServerHandle | None:
        try:
            server = self._connector(target, self.options)
        except Exception as exc:  # noqa: BLE001
            error = exc if isinstance(exc, ServerConnectionError) else ServerConnectionError(str(exc))
            self.failed_servers.append(target.sql_instance)
            self.logger.error(
                "shrink_server_connection_failed",
                server=target.sql_instance,
                error=error.message,
                error_type=type(exc).__name__,
            )
            return None

        self.logger.info(
            "shrink_server_connected",
            server=target.sql_instance,
            version_major=server.version_major,
        )
        return server

    def _process_server(self, target: ServerTarget, server: ServerHandle) -> Iterator[ShrinkOutcome]:
        try:
            databases = list(server.list_databases())
        except Exception as exc:  # noqa: BLE001
            self.failed_servers.append(target.sql_instance)
            self.logger.error(
                "shrink_list_databases_failed",
                server=target.sql_instance,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return

        missing = missing_databases(databases, self.options)
        if missing:
            self.logger.warning("shrink_databases_missing", server=target.sql_instance, missing=missing)

        selected, excluded = select_databases(databases, self.options)
        self.logger.info(
            "shrink_databases_selected",
            server=target.sql_instance,
            selected=[database.name for database in selected],
            excluded_count=len(excluded),
        )

        for database in selected:
            if database.is_snapshot:
                self.logger.warning(
                    "shrink_skip_snapshot_database",
                    server=target.sql_instance,
                    database=database.name,
                )
                yield ShrinkOutcome(
                    status=OutcomeStatus.SKIPPED,
                    server=target.sql_instance,
                    database=database.name,
                    reason="数据库快照不能收缩",
                )
                continue
            if not database.is_accessible:
                self.logger.warning(
                    "shrink_skip_inaccessible_database",
                    server=target.sql_instance,
                    database=database.name,
                )
                yield ShrinkOutcome(
                    status=OutcomeStatus.SKIPPED,
                    server=target.sql_instance,
                    database=database.name,
                    reason="数据库不可访问",
                )
                continue
            yield from self._process_database(target, server, database)

    def _process_database(
        self,
        target: ServerTarget,
        server: ServerHandle,
        database: DatabaseHandle,
    ) -> Iterator[ShrinkOutcome]:
        try:
            if not self.options.exclude_update_usage and not self.options.what_if:
                database.update_usage()
            files: list[StorageFileHandle] = []
            if self.options.includes_data_files:
                files.extend(database.data_files())
            if self.options.includes_log_files:
                files.extend(database.log_files())
        except Exception as exc:  # noqa: BLE001
            self.logger.error(
                "shrink_database_prepare_failed",
                server=target.sql_instance,
                database=database.name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            yield ShrinkOutcome(
                status=OutcomeStatus.FAILED,
                server=target.sql_instance,
                database=database.name,
                reason=f"读取数据库文件失败: {exc}",
            )
            return

        for file in files:
            yield self._process_file(target, server, database, file)

    def _process_file(
        self,
        target: ServerTarget,
        server: ServerHandle,
        database: DatabaseHandle,
        file: StorageFileHandle,
    ) -> ShrinkOutcome:
        context = {"server": target.sql_instance, "database": database.name}
        try:
            initial = file.refresh()
        except Exception as exc:  # noqa: BLE001
            error = SizingError(f"读取文件 {file.name} 大小失败: {exc}", extra={"file": file.name, **context})
            self.logger.error("shrink_sizing_failed", file=file.name, error=error.message, **context)
            return ShrinkOutcome(
                status=OutcomeStatus.FAILED,
                server=target.sql_instance,
                database=database.name,
                file=file.name,
                reason=error.message,
            )

        desired = size_calculator.compute(initial.size_mb, initial.used_mb, self.options.percent_free_space)
        if initial.available_mb <= desired.desired_free_space:
            self.logger.info(
                "shrink_skip_file_within_target",
                file=file.name,
                available_mb=round(initial.available_mb, 2),
                desired_free_mb=desired.desired_free_space,
                **context,
            )
            return ShrinkOutcome(
                status=OutcomeStatus.SKIPPED,
                server=target.sql_instance,
                database=database.name,
                file=file.name,
                reason=(
                    f"当前空闲空间 {initial.available_mb:.2f} MB "
                    f"不大于期望空闲空间 {desired.desired_free_space} MB"
                ),
            )

        # EMPTYFILE 不带目标大小, 分步只会重复同一条语句
        step_size = None if self.options.shrink_method == ShrinkMethod.EMPTY_FILE else self.options.step_size_mb
        steps = tuple(step_planner.plan(initial.size_mb, desired.desired_total_size, step_size))
        if not steps:
            self.logger.info(
                "shrink_skip_file_no_reduction",
                file=file.name,
                size_mb=round(initial.size_mb, 2),
                desired_size_mb=desired.desired_total_size,
                **context,
            )
            return ShrinkOutcome(
                status=OutcomeStatus.SKIPPED,
                server=target.sql_instance,
                database=database.name,
                file=file.name,
                reason=f"文件大小已不大于期望大小 {desired.desired_total_size} MB",
            )

        if self.options.what_if:
            self.logger.info("shrink_what_if", file=file.name, plan=list(steps), **context)
            return ShrinkOutcome(
                status=OutcomeStatus.PLANNED,
                server=target.sql_instance,
                database=database.name,
                file=file.name,
                reason=f"预计收缩到 {desired.desired_total_size} MB",
                plan=steps,
            )

        before: FragmentationSample | None = None
        if self._should_collect_fragmentation(server):
            before = self._measure_fragmentation(server, database, context)

        report = self._executor.execute(
            file,
            steps,
            self.options.shrink_method,
            initial,
            context=context,
        )

        after = None
        # 仅收缩日志文件时不采集收缩后的碎片
        if before is not None and report.success and self.options.file_type != FileType.LOG:
            after = self._measure_fragmentation(server, database, context)

        result = self._build_result(
            target,
            database,
            file,
            initial,
            report.final_snapshot,
            desired.desired_free_space,
            before=before,
            after=after,
            steps=steps,
            report=report,
        )
        self.logger.info(
            "shrink_file_completed" if report.success else "shrink_file_failed",
            file=file.name,
            success=report.success,
            completed_steps=len(report.completed_steps),
            planned_steps=len(steps),
            final_size_mb=round(result.final_size_mb, 2),
            elapsed_seconds=round(report.elapsed.total_seconds(), 3),
            **context,
        )
        return ShrinkOutcome(
            status=OutcomeStatus.SHRUNK if report.success else OutcomeStatus.FAILED,
            server=target.sql_instance,
            database=database.name,
            file=file.name,
            reason=report.error.message if report.error else None,
            plan=steps,
            result=result,
        )

    def _should_collect_fragmentation(self, server: ServerHandle) -> bool:
        if self.options.exclude_index_stats:
            return False
        return self._probe.is_supported(server)

    def _measure_fragmentation(
        self,
        server: ServerHandle,
        database: DatabaseHandle,
        context: dict[str, str],
    ) -> FragmentationSample | None:
        try:
            return self._probe.measure(server, database.name)
        except FragmentationQueryError as exc:
            self.logger.warning(
                "shrink_fragmentation_unavailable",
                error=exc.extra.get("error", exc.message),
                **context,
            )
            return None

    def _build_result(
        self,
        target: ServerTarget,
        database: DatabaseHandle,
        file: StorageFileHandle,
        initial: StorageFileSnapshot,
        final: StorageFileSnapshot,
        desired_free_space: int,
        *,
        before: FragmentationSample | None,
        after: FragmentationSample | None,
        steps: tuple[int, ...],
        report: ShrinkExecutionReport,
    ) -> ShrinkResult:
        return ShrinkResult(
            computer_name=target.computer_name,
            instance_name=target.instance_name,
            sql_instance=target.sql_instance,
            database=database.name,
            file=file.name,
            file_type=file.file_type,
            start=report.start,
            end=report.end,
            success=report.success,
            initial_size_mb=initial.size_mb,
            initial_used_mb=initial.used_mb,
            initial_available_mb=initial.available_mb,
            target_available_mb=desired_free_space,
            final_available_mb=final.available_mb,
            final_size_mb=final.size_mb,
            initial_fragmentation=before,
            final_fragmentation=after,
            planned_steps=steps,
            completed_steps=report.completed_steps,
            notes=self._notes if report.success else None,
            error_message=report.error.message if report.error else None,
        )
