"""逐步收缩计划."""

from __future__ import annotations

import math


def plan(start_size: float, desired_size: int, step_size: int | None = None) -> list[int]:
    """生成逐步收缩的目标大小序列(MB).

    - 未指定步长, 或总收缩量不超过步长: 一步收缩到目标大小.
    - 否则共 ``ceil((start - desired) / step)`` 步, 第 i 步目标为 ``start - step * i``,
      且不会低于 ``desired_size``; 最后一步恰好等于 ``desired_size``.
    - ``start_size <= desired_size`` 时返回空列表,调用方应已通过资格判断排除该情况.

    Args:
        start_size: 当前文件大小(MB).
        desired_size: 期望文件大小(MB).
        step_size: 单步最大收缩量(MB),可选.

    Returns:
        list[int]: 严格递减的目标大小序列.

    Example:
        >>> plan(1000, 200, 300)
        [700, 400, 200]

    """
    reduction = start_size - desired_size
    if reduction <= 0:
        return []
    if not step_size or reduction <= step_size:
        return [desired_size]

    step_count = math.ceil(reduction / step_size)
    steps: list[int] = []
    for index in range(1, step_count + 1):
        # 非整数的起始大小向上取整,保证单步收缩量不超过步长
        target = math.ceil(start_size - step_size * index)
        steps.append(max(target, desired_size))
    steps[-1] = desired_size
    return steps
