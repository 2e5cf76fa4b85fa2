"""收缩任务使用的数据库选择工具."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from whaleshrink.core.types import DatabaseHandle
    from whaleshrink.schemas import ShrinkOptions


def _lower_set(names: Iterable[str]) -> set[str]:
    return {name.lower() for name in names}


def should_select_database(database: DatabaseHandle, options: ShrinkOptions) -> tuple[bool, str | None]:
    """判断数据库是否在本次选择范围内.

    规则(按顺序):
    - 指定 all_user_databases 时排除系统库;
    - 指定 databases 时只保留列表中的库(忽略大小写);
    - 指定 exclude_databases 时剔除列表中的库.

    Args:
        database: 数据库句柄.
        options: 调用参数.

    Returns:
        tuple[bool, str | None]: (是否选中, 未选中原因).

    """
    name_lower = database.name.lower()
    if options.all_user_databases and database.is_system:
        return False, "system_database"
    if options.databases and name_lower not in _lower_set(options.databases):
        return False, "not_in_databases"
    if options.exclude_databases and name_lower in _lower_set(options.exclude_databases):
        return False, "exclude_database"
    return True, None


def select_databases(
    databases: Sequence[DatabaseHandle],
    options: ShrinkOptions,
) -> tuple[list[DatabaseHandle], list[str]]:
    """过滤数据库列表,返回选中的句柄与被排除的名称.

    Args:
        databases: 服务器上的全部数据库.
        options: 调用参数.

    Returns:
        tuple[list[DatabaseHandle], list[str]]: (选中的数据库, 被排除的数据库名称).

    """
    selected: list[DatabaseHandle] = []
    excluded: list[str] = []
    for database in databases:
        is_selected, _ = should_select_database(database, options)
        if is_selected:
            selected.append(database)
        else:
            excluded.append(database.name)
    return selected, excluded


def missing_databases(databases: Sequence[DatabaseHandle], options: ShrinkOptions) -> list[str]:
    """返回 databases 中指定但服务器上不存在的库名."""
    if not options.databases:
        return []
    present = _lower_set(database.name for database in databases)
    return sorted(name for name in options.databases if name.lower() not in present)
