"""WhaleShrink 命令行入口.

示例:
    whaleshrink --server sql01 --server sql02,1533 --all-user-databases \\
        --percent-free-space 10 --step-size-mb 1024 --what-if
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from functools import partial
from typing import TYPE_CHECKING, Any

from whaleshrink.constants import FileType, OutcomeStatus, ShrinkMethod
from whaleshrink.core.exceptions import ConfigurationError, ValidationError
from whaleshrink.schemas import ShrinkOptions, parse_server_target, validate_or_raise
from whaleshrink.services.connection_adapters import connect_sqlserver
from whaleshrink.services.shrink import ShrinkOrchestrator
from whaleshrink.settings import Settings
from whaleshrink.utils.structlog_config import configure_logging, get_system_logger
from whaleshrink.utils.time_utils import time_utils

if TYPE_CHECKING:
    from whaleshrink.core.types import ShrinkOutcome

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIGURATION_ERROR = 2

TABLE_COLUMNS = ("status", "server", "database", "file", "size", "elapsed", "detail")


def _echo(message: str = "") -> None:
    """向 stdout 输出一行文本,替代 print 避免 Ruff T201."""
    sys.stdout.write(f"{message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whaleshrink",
        description="按期望空闲百分比逐步收缩 SQL Server 数据/日志文件.",
    )
    parser.add_argument("--server", action="append", required=True, help="服务器, 可重复指定(host[\\实例][,端口])")
    parser.add_argument("--database", action="append", default=[], help="只处理指定数据库, 可重复指定")
    parser.add_argument("--exclude-database", action="append", default=[], help="排除指定数据库, 可重复指定")
    parser.add_argument("--all-user-databases", action="store_true", help="处理全部用户数据库(排除系统库)")
    parser.add_argument("--percent-free-space", type=int, default=0, help="期望空闲百分比 0-99(默认 0)")
    parser.add_argument(
        "--shrink-method",
        default=ShrinkMethod.DEFAULT,
        help=f"收缩方式: {', '.join(ShrinkMethod.ALL)}(默认 {ShrinkMethod.DEFAULT})",
    )
    parser.add_argument(
        "--file-type",
        default=None,
        help=f"文件类型: {', '.join(FileType.ALL)}(默认 {FileType.ALL_FILES})",
    )
    parser.add_argument("--step-size-mb", type=int, default=None, help="单步最大收缩量(MB)")
    parser.add_argument("--statement-timeout", type=int, default=0, help="语句超时(分钟), 0 表示不限制")
    parser.add_argument("--exclude-index-stats", action="store_true", help="不采集收缩前后的索引碎片")
    parser.add_argument("--exclude-update-usage", action="store_true", help="收缩前不执行 DBCC UPDATEUSAGE")
    parser.add_argument("--logs-only", action="store_true", help="已弃用, 等同于 --file-type Log")
    parser.add_argument("--what-if", action="store_true", help="只输出收缩计划, 不执行收缩")
    parser.add_argument("--output", choices=("table", "json"), default="table", help="输出格式(默认 table)")
    return parser


def _options_payload(args: argparse.Namespace) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "percent_free_space": args.percent_free_space,
        "shrink_method": args.shrink_method,
        "step_size_mb": args.step_size_mb,
        "statement_timeout_minutes": args.statement_timeout,
        "exclude_index_stats": args.exclude_index_stats,
        "exclude_update_usage": args.exclude_update_usage,
        "what_if": args.what_if,
        "databases": args.database,
        "exclude_databases": args.exclude_database,
        "all_user_databases": args.all_user_databases,
    }
    if args.file_type is not None:
        payload["file_type"] = args.file_type
    if args.logs_only:
        payload["logs_only"] = True
    return payload


def _format_row(outcome: ShrinkOutcome) -> str:
    result = outcome.result
    size = ""
    elapsed = ""
    if result is not None:
        size = f"{result.initial_size_mb:.0f}->{result.final_size_mb:.0f} MB"
        elapsed = time_utils.format_elapsed(result.elapsed)
    elif outcome.plan:
        size = "->".join(str(step) for step in outcome.plan) + " MB"
    cells = (
        outcome.status,
        outcome.server,
        outcome.database,
        outcome.file or "-",
        size or "-",
        elapsed or "-",
        outcome.reason or "",
    )
    return "\t".join(cells)


def main(argv: Sequence[str] | None = None) -> int:
    """命令行主函数.

    Returns:
        int: 退出码. 0 全部成功/跳过, 1 存在失败的文件或服务器, 2 配置错误.

    """
    args = _build_parser().parse_args(argv)
    logger = get_system_logger()

    try:
        settings = Settings.load()
    except ValueError as exc:
        _echo(f"配置错误: {exc}")
        return EXIT_CONFIGURATION_ERROR
    configure_logging(settings.log_level)

    try:
        options = validate_or_raise(ShrinkOptions, _options_payload(args))
        options.require_selection()
        targets = [parse_server_target(raw) for raw in args.server]
    except (ValidationError, ConfigurationError) as exc:
        logger.error("shrink_invalid_arguments", error=exc.message, **exc.extra)
        _echo(f"参数错误: {exc.message}")
        return EXIT_CONFIGURATION_ERROR

    orchestrator = ShrinkOrchestrator(
        options,
        partial(connect_sqlserver, settings=settings),
        notes=settings.shrink_notes,
    )

    include_fragmentation = not options.exclude_index_stats
    counts = dict.fromkeys(OutcomeStatus.ALL, 0)
    if args.output == "table":
        _echo("\t".join(TABLE_COLUMNS))
    for outcome in orchestrator.run(targets):
        counts[outcome.status] += 1
        if args.output == "json":
            _echo(json.dumps(outcome.to_dict(include_fragmentation=include_fragmentation), ensure_ascii=False))
        else:
            _echo(_format_row(outcome))

    logger.info(
        "shrink_batch_completed",
        failed_servers=orchestrator.failed_servers,
        **counts,
    )
    if counts[OutcomeStatus.FAILED] or orchestrator.failed_servers:
        return EXIT_FAILURES
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
