import pytest

from whaleshrink.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity
from whaleshrink.core.exceptions import (
    AppError,
    ConfigurationError,
    FragmentationQueryError,
    ServerConnectionError,
    ShrinkExecutionError,
    SizingError,
    ValidationError,
)


@pytest.mark.unit
def test_default_message_comes_from_message_key() -> None:
    error = ConfigurationError()

    assert error.message == ErrorMessages.SELECTION_REQUIRED
    assert error.category == ErrorCategory.CONFIGURATION
    assert error.recoverable is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "error_cls",
    [ValidationError, ServerConnectionError, SizingError, ShrinkExecutionError, FragmentationQueryError],
)
def test_per_unit_errors_are_recoverable(error_cls: type[AppError]) -> None:
    error = error_cls("boom", extra={"server": "sql01"})

    assert isinstance(error, AppError)
    assert error.recoverable is True
    assert str(error) == "boom"
    assert error.extra == {"server": "sql01"}


@pytest.mark.unit
def test_severity_can_be_overridden() -> None:
    error = SizingError(severity=ErrorSeverity.CRITICAL)

    assert error.message == ErrorMessages.SIZING_ERROR
    assert error.recoverable is False
