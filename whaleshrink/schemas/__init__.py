"""调用参数 schema."""

from .server_targets import ServerTarget, parse_server_target
from .shrink_options import ShrinkOptions
from .validation import validate_or_raise

__all__ = ["ServerTarget", "ShrinkOptions", "parse_server_target", "validate_or_raise"]
