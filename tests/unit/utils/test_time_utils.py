from datetime import UTC, timedelta

import pytest

from whaleshrink.utils.time_utils import time_utils


@pytest.mark.unit
def test_now_is_timezone_aware_utc() -> None:
    assert time_utils.now().tzinfo is UTC


@pytest.mark.unit
@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [
        (timedelta(0), "00:00:00"),
        (timedelta(seconds=3723.9), "01:02:03"),
        (timedelta(days=1, minutes=5), "24:05:00"),
        (timedelta(seconds=-5), "00:00:00"),
    ],
)
def test_format_elapsed(elapsed: timedelta, expected: str) -> None:
    assert time_utils.format_elapsed(elapsed) == expected
