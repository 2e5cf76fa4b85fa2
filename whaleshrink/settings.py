"""WhaleShrink - 统一配置读取与校验.

目标:
- 将环境变量读取、默认值、校验集中到单一入口,避免散落在各模块中重复解析.
- 命令行只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- 单次调用的收缩参数(百分比、收缩方式等)由 `whaleshrink.schemas.shrink_options` 负责校验.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from whaleshrink.constants import LogLevel

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

APP_NAME = "WhaleShrink"
APP_VERSION = "1.0.0"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SQLSERVER_PORT = 1433
DEFAULT_SQLSERVER_LOGIN_TIMEOUT_SECONDS = 20
DEFAULT_SQLSERVER_TDS_VERSION = "7.2"
DEFAULT_SQLSERVER_DATABASE = "master"

_VALID_LOG_LEVELS = {level.value for level in LogLevel}
_MAX_PORT = 65535


class Settings(BaseSettings):
    """应用运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    app_name: str = Field(default=APP_NAME, validation_alias="APP_NAME")
    app_version: str = APP_VERSION

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")

    sqlserver_username: str = Field(default="", validation_alias="SQLSERVER_USERNAME")
    sqlserver_password: str = Field(default="", validation_alias="SQLSERVER_PASSWORD")
    sqlserver_default_port: int = Field(default=DEFAULT_SQLSERVER_PORT, validation_alias="SQLSERVER_DEFAULT_PORT")
    sqlserver_login_timeout_seconds: int = Field(
        default=DEFAULT_SQLSERVER_LOGIN_TIMEOUT_SECONDS,
        validation_alias="SQLSERVER_LOGIN_TIMEOUT",
    )
    sqlserver_tds_version: str = Field(
        default=DEFAULT_SQLSERVER_TDS_VERSION,
        validation_alias="SQLSERVER_TDS_VERSION",
    )
    sqlserver_database: str = Field(default=DEFAULT_SQLSERVER_DATABASE, validation_alias="SQLSERVER_DATABASE")

    shrink_notes: str | None = Field(default=None, validation_alias="SHRINK_NOTES")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("shrink_notes", mode="before")
    @classmethod
    def _strip_blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @model_validator(mode="after")
    def _validate(self) -> Settings:
        """执行跨字段校验,统一抛出可读的 ValueError."""
        errors: list[str] = []
        checks: list[tuple[str, bool]] = [
            ("LOG_LEVEL 仅支持 DEBUG/INFO/WARNING/ERROR/CRITICAL", self.log_level not in _VALID_LOG_LEVELS),
            (
                f"SQLSERVER_DEFAULT_PORT 必须为 1-{_MAX_PORT} 的整数",
                self.sqlserver_default_port < 1 or self.sqlserver_default_port > _MAX_PORT,
            ),
            ("SQLSERVER_LOGIN_TIMEOUT 必须为正整数(秒)", self.sqlserver_login_timeout_seconds <= 0),
            ("SQLSERVER_DATABASE 不能为空", not self.sqlserver_database),
        ]
        for message, condition in checks:
            if condition:
                errors.append(message)

        if errors:
            joined = "; ".join(errors)
            raise ValueError(f"配置校验失败: {joined}")
        return self

    @classmethod
    def load(cls) -> Settings:
        """加载 `.env`(如存在)后从环境变量构造 Settings."""
        if DOTENV_PATH.exists():
            load_dotenv(DOTENV_PATH, override=False)
        return cls()
