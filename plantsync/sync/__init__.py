"""Bidirectional sync engine between the local store and the remote store"""

from .catalog import CATALOG, TableSpec, get_spec, ordered_specs
from .codec import RecordCodec
from .errors import SyncError, RecordDecodeError, RemoteReadError, RemoteReadTimeout, LocalWriteError
from .export_session import ExportSession
from .import_session import ImportSession
from .orchestrator import TransferOrchestrator
from .progress import ProgressReporter, LoggingProgressReporter, CompositeProgressReporter
from .results import TableResult, TransferResult

__all__ = [
    'CATALOG',
    'TableSpec',
    'get_spec',
    'ordered_specs',
    'RecordCodec',
    'SyncError',
    'RecordDecodeError',
    'RemoteReadError',
    'RemoteReadTimeout',
    'LocalWriteError',
    'ExportSession',
    'ImportSession',
    'TransferOrchestrator',
    'ProgressReporter',
    'LoggingProgressReporter',
    'CompositeProgressReporter',
    'TableResult',
    'TransferResult',
]
