"""Shared pytest fixtures."""
from __future__ import annotations

from concurrent.futures import Future
from pathlib import Path

import pytest

from plantsync.services.firebase_service import RemoteStore
from plantsync.storage.local_db import LocalDatabase
from plantsync.sync.progress import ProgressReporter


class FakeRemoteStore(RemoteStore):
    """In-memory remote store answering reads immediately on the caller's thread."""

    def __init__(self, data=None):
        self.data: dict[str, dict] = data or {}
        self.writes: list[tuple[str, dict]] = []
        self.failing_reads: set[str] = set()
        self.silent_reads: set[str] = set()
        self.rejected_writes: set[str] = set()  # future fails
        self.raising_writes: set[str] = set()  # write() itself raises

    def write(self, path, fields):
        if path in self.raising_writes:
            raise RuntimeError(f"client offline: {path}")
        self.writes.append((path, dict(fields)))
        future = Future()
        if path in self.rejected_writes:
            future.set_exception(RuntimeError("Permission denied"))
            return future
        collection, child_id = path.rsplit("/", 1)
        self.data.setdefault(collection, {})[child_id] = dict(fields)
        future.set_result(None)
        return future

    def read_children_once(self, path, on_data, on_error):
        if path in self.silent_reads:
            return
        if path in self.failing_reads:
            on_error(RuntimeError("Permission denied"))
            return
        on_data(list(self.data.get(path, {}).items()))


class RecordingReporter(ProgressReporter):
    """Keeps every callback in arrival order."""

    def __init__(self):
        self.events: list[tuple] = []

    def on_progress(self, table, current, total):
        self.events.append(("progress", table, current, total))

    def on_table_complete(self, table, success_count, error_count):
        self.events.append(("table_complete", table, success_count, error_count))

    def on_error(self, table, message):
        self.events.append(("error", table, message))

    def on_complete(self, total_success, total_errors):
        self.events.append(("complete", total_success, total_errors))

    def of(self, kind: str) -> list[tuple]:
        return [event for event in self.events if event[0] == kind]


@pytest.fixture
def db(tmp_path: Path) -> LocalDatabase:
    return LocalDatabase(str(tmp_path / "plants.db"))


@pytest.fixture
def other_db(tmp_path: Path) -> LocalDatabase:
    return LocalDatabase(str(tmp_path / "other" / "plants.db"))


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()
