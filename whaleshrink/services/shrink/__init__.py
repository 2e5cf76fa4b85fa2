"""存储文件收缩服务.

组成(由底向上):
- size_calculator: 目标大小计算(纯函数)
- step_planner: 逐步收缩计划(纯函数)
- fragmentation_probe: 收缩前后的索引碎片采集
- shrink_executor: 单文件逐步收缩
- orchestrator: 服务器 -> 数据库 -> 文件的批处理编排
"""

from .fragmentation_probe import FragmentationProbe
from .orchestrator import ShrinkOrchestrator
from .shrink_executor import ShrinkExecutor

__all__ = ["FragmentationProbe", "ShrinkExecutor", "ShrinkOrchestrator"]
