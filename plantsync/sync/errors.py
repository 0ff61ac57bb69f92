"""Sync engine exceptions"""


class SyncError(Exception):
    """Base class for synchronization failures."""


class RecordDecodeError(SyncError, ValueError):
    """A remote child could not be converted into a local record."""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"field '{field}' ({value!r}): {reason}")


class RemoteReadError(SyncError):
    """The remote store cancelled or failed a snapshot read."""


class RemoteReadTimeout(SyncError):
    """A snapshot read did not complete within the timeout."""

    def __init__(self, path: str, timeout: float):
        self.path = path
        self.timeout = timeout
        super().__init__(f"Remote read of '{path}' timed out after {timeout:g}s")


class LocalWriteError(SyncError):
    """The local store reported that an insert or update did not apply."""
