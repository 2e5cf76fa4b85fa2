"""目标大小计算."""

from __future__ import annotations

import math
from typing import NamedTuple

PERCENT_BASE = 100


class DesiredSize(NamedTuple):
    """期望的空闲空间与文件总大小(MB)."""

    desired_free_space: int
    desired_total_size: int


def compute(current_size: float, used_space: float, percent_free: int) -> DesiredSize:
    """根据已用空间与空闲百分比计算期望的文件大小.

    期望空闲空间按"已用空间"而非"当前文件大小"计算:
    ``desired_free = ceil((1 + percent_free / 100) * used)``,
    期望总大小为 ``ceil(used) + desired_free``,因此总是不小于已用空间.
    结果向上取整到整 MB,避免截断导致收缩过度.

    Args:
        current_size: 当前分配大小(MB),仅用于保持调用签名一致.
        used_space: 已用空间(MB).
        percent_free: 期望空闲百分比(0-99),由参数层保证取值范围.

    Returns:
        DesiredSize: (期望空闲空间, 期望总大小).

    Example:
        >>> compute(1000, 100, 50)
        DesiredSize(desired_free_space=150, desired_total_size=250)

    """
    del current_size
    used = max(used_space, 0)
    desired_free_space = math.ceil((1 + percent_free / PERCENT_BASE) * used)
    desired_total_size = math.ceil(used) + desired_free_space
    return DesiredSize(desired_free_space, desired_total_size)
