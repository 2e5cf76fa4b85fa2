from __future__ import annotations

from typing import Any

import pymssql
import pytest

from whaleshrink.core.exceptions import ServerConnectionError
from whaleshrink.schemas import ShrinkOptions, parse_server_target
from whaleshrink.services.connection_adapters import connect_sqlserver
from whaleshrink.services.connection_adapters import sqlserver_adapter
from whaleshrink.settings import Settings


class _DummyCursor:
    def __init__(self) -> None:
        self.executed: list[str] = []

    def execute(self, query: str, params: object = None) -> None:
        self.executed.append(query)

    def fetchall(self) -> list[tuple[str]]:
        return [("16.0.1000.6",)]

    def close(self) -> None:
        return None


class _DummyPymssqlConnection:
    def __init__(self) -> None:
        self.closed = False

    def cursor(self) -> _DummyCursor:
        return _DummyCursor()

    def close(self) -> None:
        self.closed = True


@pytest.mark.unit
def test_connect_sqlserver_passes_settings_and_statement_timeout(monkeypatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_connect(**kwargs: Any) -> _DummyPymssqlConnection:
        captured.update(kwargs)
        return _DummyPymssqlConnection()

    monkeypatch.setattr(sqlserver_adapter.pymssql, "connect", _fake_connect)
    monkeypatch.setenv("SQLSERVER_USERNAME", "shrinker")
    monkeypatch.setenv("SQLSERVER_PASSWORD", "secret")

    server = connect_sqlserver(
        parse_server_target("sql01"),
        ShrinkOptions(all_user_databases=True, statement_timeout_minutes=5),
        Settings.load(),
    )

    assert server.version_major == 16
    assert captured["server"] == "sql01"
    assert captured["port"] == 1433
    assert captured["user"] == "shrinker"
    assert captured["timeout"] == 300
    assert captured["autocommit"] is True


@pytest.mark.unit
def test_connect_sqlserver_named_instance_without_port_uses_browser(monkeypatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_connect(**kwargs: Any) -> _DummyPymssqlConnection:
        captured.update(kwargs)
        return _DummyPymssqlConnection()

    monkeypatch.setattr(sqlserver_adapter.pymssql, "connect", _fake_connect)

    connect_sqlserver(parse_server_target("sql01\\PROD"), ShrinkOptions(all_user_databases=True), Settings.load())

    assert captured["server"] == "sql01\\PROD"
    assert "port" not in captured
    assert captured["timeout"] == 0


@pytest.mark.unit
def test_connect_sqlserver_wraps_driver_errors(monkeypatch) -> None:
    def _fake_connect(**_kwargs: Any) -> object:
        raise pymssql.OperationalError("login failed")

    monkeypatch.setattr(sqlserver_adapter.pymssql, "connect", _fake_connect)

    with pytest.raises(ServerConnectionError) as exc_info:
        connect_sqlserver(parse_server_target("sql01,1533"), ShrinkOptions(all_user_databases=True), Settings.load())

    assert exc_info.value.extra == {"server": "sql01,1533"}
    assert "login failed" in exc_info.value.message
