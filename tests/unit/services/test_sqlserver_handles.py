from __future__ import annotations

from typing import Any

import pytest

from whaleshrink.constants import FileType, ShrinkMethod
from whaleshrink.core.types import FragmentationSample
from whaleshrink.schemas import parse_server_target
from whaleshrink.services.connection_adapters.sqlserver_adapter import ConnectionAdapterError
from whaleshrink.services.connection_adapters.sqlserver_handles import (
    FILE_SIZE_QUERY,
    FILES_QUERY,
    SQLServerServerHandle,
    build_shrinkfile_statement,
    quote_identifier,
)


class _DummyConnection:
    """按 SQL 前缀返回预置结果的伪连接."""

    def __init__(self, results: dict[str, list[tuple[Any, ...]]], *, version: str | None = "15.0.2000.5") -> None:
        self.results = results
        self.version = version
        self.statements: list[str] = []
        self.queries: list[tuple[str, object]] = []
        self.disconnect_error: Exception | None = None

    def execute_query(self, query: str, params: object = None) -> list[tuple[Any, ...]]:
        self.queries.append((query, params))
        for key, rows in self.results.items():
            if key in query:
                return rows
        return []

    def execute_non_query(self, statement: str, params: object = None) -> None:
        self.statements.append(statement)

    def get_version(self) -> str | None:
        return self.version

    def disconnect(self) -> None:
        if self.disconnect_error is not None:
            raise self.disconnect_error


def _server(connection: _DummyConnection) -> SQLServerServerHandle:
    return SQLServerServerHandle(connection, parse_server_target("sql01\\PROD"))  # type: ignore[arg-type]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("method", "expected"),
    [
        (ShrinkMethod.DEFAULT, "DBCC SHRINKFILE (N'db_data', 200)"),
        (ShrinkMethod.NO_TRUNCATE, "DBCC SHRINKFILE (N'db_data', 200, NOTRUNCATE)"),
        (ShrinkMethod.TRUNCATE_ONLY, "DBCC SHRINKFILE (N'db_data', 200, TRUNCATEONLY)"),
        (ShrinkMethod.EMPTY_FILE, "DBCC SHRINKFILE (N'db_data', EMPTYFILE)"),
    ],
)
def test_build_shrinkfile_statement(method: str, expected: str) -> None:
    assert build_shrinkfile_statement("db_data", 200, method) == expected


@pytest.mark.unit
def test_build_shrinkfile_statement_escapes_quotes_and_rejects_unknown_method() -> None:
    assert build_shrinkfile_statement("o'brien", 10, ShrinkMethod.DEFAULT) == "DBCC SHRINKFILE (N'o''brien', 10)"
    with pytest.raises(ValueError, match="不支持的收缩方式"):
        build_shrinkfile_statement("db_data", 10, "Compact")


@pytest.mark.unit
def test_quote_identifier_escapes_brackets() -> None:
    assert quote_identifier("weird]name") == "[weird]]name]"


@pytest.mark.unit
def test_server_handle_reads_version_and_lists_databases() -> None:
    connection = _DummyConnection(
        {
            "FROM sys.databases": [
                ("master", 1, 0, 1),
                ("app", 0, 0, 1),
                ("app_snapshot", 0, 1, 1),
                ("offline_db", 0, 0, 0),
                (None, 0, 0, 1),
            ],
        },
    )
    server = _server(connection)

    databases = server.list_databases()

    assert server.version_major == 15
    assert server.name == "sql01\\PROD"
    assert server.instance_name == "PROD"
    assert [database.name for database in databases] == ["master", "app", "app_snapshot", "offline_db"]
    assert databases[0].is_system is True
    assert databases[2].is_snapshot is True
    assert databases[3].is_accessible is False


@pytest.mark.unit
def test_database_handle_splits_files_by_type_and_shrinks() -> None:
    connection = _DummyConnection(
        {
            FILES_QUERY: [("app_data", "ROWS"), ("app_log", "LOG"), ("app_data2", "ROWS")],
            FILE_SIZE_QUERY: [(1024000, 102400)],
            "FROM sys.databases": [("app", 0, 0, 1)],
        },
    )
    database = _server(connection).list_databases()[0]

    data_files = database.data_files()
    log_files = database.log_files()
    snapshot = data_files[0].refresh()
    data_files[0].shrink_to(200, ShrinkMethod.NO_TRUNCATE)
    database.update_usage()

    assert [file.name for file in data_files] == ["app_data", "app_data2"]
    assert [(file.name, file.file_type) for file in log_files] == [("app_log", FileType.LOG)]
    assert snapshot.size_mb == 1000
    assert snapshot.used_mb == 100
    assert "USE [app]" in connection.statements
    assert "DBCC SHRINKFILE (N'app_data', 200, NOTRUNCATE)" in connection.statements
    assert connection.statements[-1] == "DBCC UPDATEUSAGE(0) WITH NO_INFOMSGS"
    assert (FILE_SIZE_QUERY, ("app_data",)) in connection.queries


@pytest.mark.unit
def test_file_refresh_raises_when_file_disappears() -> None:
    connection = _DummyConnection({FILES_QUERY: [("app_data", "ROWS")], "FROM sys.databases": [("app", 0, 0, 1)]})
    file = _server(connection).list_databases()[0].data_files()[0]

    with pytest.raises(LookupError):
        file.refresh()


@pytest.mark.unit
def test_scalar_aggregate_query_maps_row_to_sample() -> None:
    connection = _DummyConnection({"dm_db_index_physical_stats": [(5, 12.5, 90.0)]})
    server = _server(connection)

    sample = server.run_scalar_aggregate_query("SELECT ... dm_db_index_physical_stats ...", "app")

    assert sample == FragmentationSample(12.5, 90.0)
    assert connection.statements == ["USE [app]"]
    assert server.run_scalar_aggregate_query("SELECT 1", "app") is None


@pytest.mark.unit
def test_unknown_version_disables_version_gated_features() -> None:
    assert _server(_DummyConnection({}, version=None)).version_major == 0


@pytest.mark.unit
def test_close_logs_disconnect_errors() -> None:
    connection = _DummyConnection({})
    connection.disconnect_error = ConnectionAdapterError("gone")

    _server(connection).close()
