"""核心领域类型."""

from .handles import DatabaseHandle, ServerHandle, StorageFileHandle
from .shrink import (
    FragmentationSample,
    ShrinkExecutionReport,
    ShrinkOutcome,
    ShrinkResult,
    StorageFileSnapshot,
)

__all__ = [
    "DatabaseHandle",
    "FragmentationSample",
    "ServerHandle",
    "ShrinkExecutionReport",
    "ShrinkOutcome",
    "ShrinkResult",
    "StorageFileSnapshot",
    "StorageFileHandle",
]
