"""Shared fakes and fixtures for the logferry test suite."""

import asyncio

import pytest

from logferry.errors import ConnectivityProbeError, StorageError
from logferry.models import (
    BufferedLog,
    CellularGeneration,
    ConnectivitySnapshot,
    LogEntry,
    Medium,
    SendResult,
)
from logferry.store import BufferStore, FileKeyValueStore

WIFI = ConnectivitySnapshot(True, Medium.WIFI)
CELL_3G = ConnectivitySnapshot(True, Medium.CELLULAR, CellularGeneration.G3)
CELL_4G = ConnectivitySnapshot(True, Medium.CELLULAR, CellularGeneration.G4)
OFFLINE = ConnectivitySnapshot(False, Medium.NONE)


class FakeStatusSource:
    """Returns a preset snapshot, or raises when ``fail`` is set."""

    def __init__(self, snapshot: ConnectivitySnapshot = WIFI):
        self.snapshot = snapshot
        self.fail = False
        self.probes = 0

    async def probe(self) -> ConnectivitySnapshot:
        self.probes += 1
        if self.fail:
            raise ConnectivityProbeError("status source unreachable")
        return self.snapshot


class RecordingSink:
    """Records every send; ``ok`` decides the reported result."""

    def __init__(self, ok: bool = True):
        self.ok = ok
        self.single: list[LogEntry] = []
        self.batches: list[BufferedLog] = []
        self.during_send = None

    async def send_one(self, entry: LogEntry) -> SendResult:
        self.single.append(entry)
        return SendResult(ok=self.ok, error=None if self.ok else "sink down")

    async def send_batch(self, buffer: BufferedLog) -> SendResult:
        self.batches.append(buffer)
        if self.during_send is not None:
            await self.during_send()
        return SendResult(ok=self.ok, error=None if self.ok else "sink down")


class MemoryKeyValueStore:
    """In-memory backend with switchable failures per operation."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.fail_get = False
        self.fail_set = False
        self.fail_remove = False

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(0)
        if self.fail_get:
            raise StorageError("read failed")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.sleep(0)
        if self.fail_set:
            raise StorageError("write failed")
        self.data[key] = value

    async def remove(self, key: str) -> None:
        await asyncio.sleep(0)
        if self.fail_remove:
            raise StorageError("remove failed")
        self.data.pop(key, None)


@pytest.fixture
def memory_backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def memory_store(memory_backend) -> BufferStore:
    return BufferStore(memory_backend, "logger")


@pytest.fixture
def file_store(tmp_path) -> BufferStore:
    return BufferStore(FileKeyValueStore(str(tmp_path / "buffer")), "logger")


@pytest.fixture
def two_entry_buffer() -> BufferedLog:
    return BufferedLog((
        ("2024-01-15T08:23:45.000001Z", "warning - A - extra data : null"),
        ("2024-01-15T08:23:46.000002Z", 'error - B - extra data : {"x":1}'),
    ))
