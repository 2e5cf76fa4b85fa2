from __future__ import annotations

import pytest

from whaleshrink.core.exceptions import ValidationError
from whaleshrink.schemas import parse_server_target


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "host", "port", "instance", "sql_instance"),
    [
        ("sql01", "sql01", None, None, "sql01"),
        (" sql01,1533 ", "sql01", 1533, None, "sql01,1533"),
        ("sql01:1533", "sql01", 1533, None, "sql01,1533"),
        ("sql01\\PROD", "sql01", None, "PROD", "sql01\\PROD"),
        ("sql01\\PROD,1533", "sql01", 1533, "PROD", "sql01\\PROD,1533"),
    ],
)
def test_parse_server_target(raw: str, host: str, port: int | None, instance: str | None, sql_instance: str) -> None:
    target = parse_server_target(raw)

    assert target.host == host
    assert target.port == port
    assert target.instance == instance
    assert target.sql_instance == sql_instance


@pytest.mark.unit
def test_default_instance_name() -> None:
    target = parse_server_target("sql01")

    assert target.computer_name == "sql01"
    assert target.instance_name == "MSSQLSERVER"
    assert target.server_address == "sql01"


@pytest.mark.unit
def test_named_instance_server_address() -> None:
    target = parse_server_target("sql01\\PROD,1533")

    assert target.instance_name == "PROD"
    assert target.server_address == "sql01\\PROD"


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["", "   ", "sql01,abc", "sql01,70000", ",1433", "\\PROD"])
def test_invalid_server_target_is_rejected(raw: str) -> None:
    with pytest.raises(ValidationError):
        parse_server_target(raw)
