# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供隔离环境变量与伪造的服务器/数据库/文件句柄.
"""

from __future__ import annotations

import pytest

from whaleshrink.constants import FileType
from whaleshrink.core.types import FragmentationSample, StorageFileSnapshot

KB_PER_MB = 1024


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    目标:
    - unit tests 不依赖真实 SQL Server
    - 避免开发者本机环境变量影响测试稳定性
    """
    for name in (
        "SQLSERVER_USERNAME",
        "SQLSERVER_PASSWORD",
        "SQLSERVER_DEFAULT_PORT",
        "SQLSERVER_LOGIN_TIMEOUT",
        "SQLSERVER_TDS_VERSION",
        "SQLSERVER_DATABASE",
        "SHRINK_NOTES",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")


class DummyFile:
    """内存中的文件句柄, shrink_to 会直接修改大小."""

    def __init__(
        self,
        name: str,
        size_mb: float,
        used_mb: float,
        *,
        file_type: str = FileType.DATA,
        fail_on_call: int | None = None,
        refresh_error: Exception | None = None,
    ) -> None:
        self.name = name
        self.file_type = file_type
        self.size_kb = size_mb * KB_PER_MB
        self.used_kb = used_mb * KB_PER_MB
        self.fail_on_call = fail_on_call
        self.refresh_error = refresh_error
        self.shrink_calls: list[tuple[int, str]] = []
        self.refresh_count = 0

    def refresh(self) -> StorageFileSnapshot:
        self.refresh_count += 1
        if self.refresh_error is not None:
            raise self.refresh_error
        return StorageFileSnapshot(self.name, self.file_type, self.size_kb, self.used_kb)

    def shrink_to(self, target_mb: int, method: str) -> None:
        self.shrink_calls.append((target_mb, method))
        if self.fail_on_call == len(self.shrink_calls):
            raise RuntimeError("shrink boom")
        self.size_kb = max(target_mb * KB_PER_MB, self.used_kb)


class DummyDatabase:
    def __init__(
        self,
        name: str,
        files: list[DummyFile] | None = None,
        *,
        is_snapshot: bool = False,
        is_accessible: bool = True,
        is_system: bool = False,
        files_error: Exception | None = None,
    ) -> None:
        self.name = name
        self.files = files or []
        self.is_snapshot = is_snapshot
        self.is_accessible = is_accessible
        self.is_system = is_system
        self.files_error = files_error
        self.update_usage_calls = 0
        self.files_listed = 0

    def _files(self, file_type: str) -> list[DummyFile]:
        self.files_listed += 1
        if self.files_error is not None:
            raise self.files_error
        return [file for file in self.files if file.file_type == file_type]

    def data_files(self) -> list[DummyFile]:
        return self._files(FileType.DATA)

    def log_files(self) -> list[DummyFile]:
        return self._files(FileType.LOG)

    def update_usage(self) -> None:
        self.update_usage_calls += 1


class DummyServer:
    def __init__(
        self,
        name: str,
        databases: list[DummyDatabase],
        *,
        version_major: int = 15,
        fragmentation: list[FragmentationSample | None] | None = None,
    ) -> None:
        self.name = name
        self.computer_name = name
        self.instance_name = "MSSQLSERVER"
        self.version_major = version_major
        self.databases = databases
        self.fragmentation = list(fragmentation or [])
        self.queries: list[str] = []
        self.closed = False

    def list_databases(self) -> list[DummyDatabase]:
        return self.databases

    def run_scalar_aggregate_query(self, sql: str, database_name: str) -> FragmentationSample | None:
        self.queries.append(database_name)
        if self.fragmentation:
            return self.fragmentation.pop(0)
        return None

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def dummy_file():
    return DummyFile


@pytest.fixture
def dummy_database():
    return DummyDatabase


@pytest.fixture
def dummy_server():
    return DummyServer
