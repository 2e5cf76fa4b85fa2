"""Schema 基础设施."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class OptionsSchema(BaseModel):
    """调用参数的基础 schema.

    约定:
    - 默认拒绝未知字段,避免"拼错参数却被静默忽略"的隐患.
    - 解析后不可变,一次调用中各文件共享同一份参数.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
