"""收缩调用参数 schema.

目标:
- 将百分比范围、收缩方式、文件类型等取值校验下沉到 schema 单入口.
- 已弃用参数通过带版本号的兼容映射表在规范化阶段一次性转换,核心逻辑不感知旧参数.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator, model_validator

from whaleshrink.constants import FileType, ShrinkMethod
from whaleshrink.core.exceptions import ConfigurationError
from whaleshrink.schemas.base import OptionsSchema
from whaleshrink.utils.structlog_config import get_system_logger

MIN_PERCENT_FREE_SPACE = 0
MAX_PERCENT_FREE_SPACE = 99
SECONDS_PER_MINUTE = 60

# 旧参数名 -> (新参数名, 旧参数为真时写入的值, 弃用起始版本)
LEGACY_OPTION_ALIASES: dict[str, tuple[str, object, str]] = {
    "logs_only": ("file_type", FileType.LOG, "1.0.0"),
}


def _match_choice(value: Any, choices: tuple[str, ...], *, field: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field} 必须为字符串")  # noqa: TRY004
    cleaned = value.strip().replace("_", "").replace("-", "").lower()
    for choice in choices:
        if choice.lower() == cleaned:
            return choice
    raise ValueError(f"{field} 仅支持: {', '.join(choices)}")


def _normalize_names(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    names: list[str] = []
    for item in value:
        text = str(item).strip()
        if text and text not in names:
            names.append(text)
    return tuple(names)


class ShrinkOptions(OptionsSchema):
    """单次收缩调用的参数集合."""

    percent_free_space: int = Field(default=0, ge=MIN_PERCENT_FREE_SPACE, le=MAX_PERCENT_FREE_SPACE)
    shrink_method: str = ShrinkMethod.DEFAULT
    file_type: str = FileType.ALL_FILES
    step_size_mb: int | None = Field(default=None, gt=0)
    statement_timeout_minutes: int = Field(default=0, ge=0)
    exclude_index_stats: bool = False
    exclude_update_usage: bool = False
    what_if: bool = False

    databases: tuple[str, ...] = ()
    exclude_databases: tuple[str, ...] = ()
    all_user_databases: bool = False

    @model_validator(mode="before")
    @classmethod
    def _apply_legacy_aliases(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        if not any(alias in data for alias in LEGACY_OPTION_ALIASES):
            return data

        mutable = dict(data)
        for alias, (target, mapped_value, since) in LEGACY_OPTION_ALIASES.items():
            if alias not in mutable:
                continue
            enabled = mutable.pop(alias)
            if not enabled:
                continue
            get_system_logger().warning(
                "deprecated_option_used",
                option=alias,
                replacement=target,
                value=mapped_value,
                deprecated_since=since,
            )
            mutable[target] = mapped_value
        return mutable

    @field_validator("shrink_method", mode="before")
    @classmethod
    def _parse_shrink_method(cls, value: Any) -> str:
        if value is None:
            return ShrinkMethod.DEFAULT
        return _match_choice(value, ShrinkMethod.ALL, field="shrink_method")

    @field_validator("file_type", mode="before")
    @classmethod
    def _parse_file_type(cls, value: Any) -> str:
        if value is None:
            return FileType.ALL_FILES
        return _match_choice(value, FileType.ALL, field="file_type")

    @field_validator("databases", "exclude_databases", mode="before")
    @classmethod
    def _parse_names(cls, value: Any) -> tuple[str, ...]:
        return _normalize_names(value)

    @field_validator("step_size_mb", mode="before")
    @classmethod
    def _parse_step_size(cls, value: Any) -> Any:
        if value in (None, "", 0, "0"):
            return None
        return value

    @property
    def statement_timeout_seconds(self) -> int:
        """语句超时(秒),0 表示不限制."""
        return self.statement_timeout_minutes * SECONDS_PER_MINUTE

    @property
    def includes_data_files(self) -> bool:
        return self.file_type in (FileType.ALL_FILES, FileType.DATA)

    @property
    def includes_log_files(self) -> bool:
        return self.file_type in (FileType.ALL_FILES, FileType.LOG)

    def require_selection(self) -> None:
        """确认已指定数据库选择方式.

        Raises:
            ConfigurationError: databases、exclude_databases、all_user_databases 均未指定.

        """
        if not self.databases and not self.exclude_databases and not self.all_user_databases:
            raise ConfigurationError()
