"""服务器目标解析.

支持的写法:
- ``host``
- ``host,port`` / ``host:port``
- ``host\\INSTANCE``(命名实例, 端口由 SQL Browser 解析)
- ``host\\INSTANCE,port``
"""

from __future__ import annotations

from pydantic import Field, StrictStr

from whaleshrink.core.exceptions import ValidationError
from whaleshrink.schemas.base import OptionsSchema

DEFAULT_INSTANCE_NAME = "MSSQLSERVER"
MIN_ALLOWED_PORT = 1
MAX_ALLOWED_PORT = 65535


class ServerTarget(OptionsSchema):
    """单个待处理的 SQL Server 实例."""

    host: StrictStr = Field(min_length=1)
    port: int | None = Field(default=None, ge=MIN_ALLOWED_PORT, le=MAX_ALLOWED_PORT)
    instance: StrictStr | None = None

    @property
    def computer_name(self) -> str:
        return self.host

    @property
    def instance_name(self) -> str:
        return self.instance or DEFAULT_INSTANCE_NAME

    @property
    def sql_instance(self) -> str:
        """展示用的实例名,与输入写法保持一致."""
        name = f"{self.host}\\{self.instance}" if self.instance else self.host
        if self.port is not None:
            return f"{name},{self.port}"
        return name

    @property
    def server_address(self) -> str:
        """pymssql 的 server 参数(命名实例需带实例名)."""
        return f"{self.host}\\{self.instance}" if self.instance else self.host


def _parse_port(raw: str, *, source: str) -> int:
    try:
        port = int(raw.strip(), 10)
    except ValueError as exc:
        raise ValidationError(f"服务器端口必须是整数: {source}") from exc
    if port < MIN_ALLOWED_PORT or port > MAX_ALLOWED_PORT:
        raise ValidationError(f"服务器端口超出范围: {source}")
    return port


def parse_server_target(raw: str) -> ServerTarget:
    """解析命令行传入的服务器字符串.

    Args:
        raw: 服务器字符串.

    Returns:
        ServerTarget: 解析结果.

    Raises:
        ValidationError: 格式非法.

    Example:
        >>> parse_server_target("sql01\\\\PROD,1533").sql_instance
        'sql01\\\\PROD,1533'

    """
    text = (raw or "").strip()
    if not text:
        raise ValidationError("服务器不能为空")

    port: int | None = None
    if "," in text:
        text, port_text = text.rsplit(",", 1)
        port = _parse_port(port_text, source=raw)
    elif text.count(":") == 1:
        text, port_text = text.split(":", 1)
        port = _parse_port(port_text, source=raw)

    instance: str | None = None
    if "\\" in text:
        text, instance = text.split("\\", 1)
        instance = instance.strip() or None

    host = text.strip()
    if not host:
        raise ValidationError(f"服务器主机名不能为空: {raw}")
    return ServerTarget(host=host, port=port, instance=instance)
