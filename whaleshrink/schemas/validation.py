"""Schema 校验与错误映射."""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from whaleshrink.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_or_raise(model: type[ModelT], payload: object) -> ModelT:
    """执行 schema 校验并抛出项目的 ValidationError.

    Args:
        model: pydantic model.
        payload: 待校验的 payload(通常来自命令行参数).

    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        message, field = _extract_first_error(exc)
        raise ValidationError(message, extra={"field": field}) from None


def _extract_first_error(exc: PydanticValidationError) -> tuple[str, str | None]:
    errors = exc.errors()
    if not errors:
        return "参数校验失败", None

    first = errors[0]
    field = None
    loc = first.get("loc")
    if isinstance(loc, tuple) and loc and isinstance(loc[0], str):
        field = loc[0]

    ctx = first.get("ctx")
    if isinstance(ctx, dict) and isinstance(ctx.get("error"), BaseException):
        return str(ctx["error"]), field

    msg = first.get("msg")
    if isinstance(msg, str) and msg.strip():
        return msg, field

    return "参数校验失败", field
