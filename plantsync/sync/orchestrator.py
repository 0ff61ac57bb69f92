"""
Transfer Orchestrator - runs export or import across every table in
dependency order (users, plants, then sensor_data and alerts).
"""

import logging
import threading
import time
from typing import Callable, Optional

from .. import config
from ..services.firebase_service import RemoteStore
from ..storage.local_db import LocalDatabase
from .catalog import get_spec, ordered_specs
from .codec import RecordCodec
from .export_session import ExportSession
from .identity import IdMap
from .import_session import ImportSession, SnapshotWaiter
from .progress import LoggingProgressReporter, ProgressReporter, SafeReporter
from .repositories import build_repositories
from .results import TableResult, TransferResult

logger = logging.getLogger(__name__)


class TransferOrchestrator:
    """
    Full-catalog transfers between the local store and the remote store.

    - Tables are processed in ascending rank so foreign-key targets go first.
    - A failing table is reported and skipped; earlier tables are not rolled back.
    - Export pauses between tables so the remote store does not receive four
      bulk writes back to back. Import needs no pause, each table already
      blocks on its own snapshot read.
    - At most one run per direction at a time is the caller's responsibility.
    """

    def __init__(
        self,
        db: LocalDatabase,
        remote: RemoteStore,
        reporter: Optional[ProgressReporter] = None,
        export_pause_seconds: float = config.EXPORT_TABLE_PAUSE_SECONDS,
        read_timeout: float = config.REMOTE_READ_TIMEOUT_SECONDS,
        confirm_writes: bool = config.EXPORT_CONFIRM_WRITES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.db = db
        self.remote = remote
        self.repositories = build_repositories(db)
        self.reporter = reporter or LoggingProgressReporter()
        self.export_pause_seconds = export_pause_seconds
        self.read_timeout = read_timeout
        self._sleep = sleep
        self._notify = SafeReporter(self.reporter)

        codec = RecordCodec()
        self.export_session = ExportSession(
            self.repositories,
            remote,
            reporter=self.reporter,
            codec=codec,
            confirm_writes=confirm_writes,
            ack_timeout=read_timeout,
        )
        self.import_session = ImportSession(
            self.repositories,
            remote,
            reporter=self.reporter,
            codec=codec,
            timeout=read_timeout,
        )

    # =========================================================================
    # FULL RUNS
    # =========================================================================

    def export_all(self) -> TransferResult:
        """Export every table synchronously, in dependency order."""
        logger.info("Starting full export to remote store")
        result = TransferResult(direction="export")
        specs = ordered_specs()

        for position, spec in enumerate(specs):
            result.add(self.export_session.export_table(spec.kind))
            if position < len(specs) - 1 and self.export_pause_seconds > 0:
                self._sleep(self.export_pause_seconds)

        return self._finish(result)

    def import_all(self) -> TransferResult:
        """Import every table synchronously, in dependency order."""
        logger.info("Starting full import from remote store")
        result = TransferResult(direction="import")
        id_map = IdMap()

        for spec in ordered_specs():
            result.add(self.import_session.import_table(spec.kind, id_map))

        return self._finish(result)

    def _finish(self, result: TransferResult) -> TransferResult:
        self._notify.complete(result.total_success, result.total_errors)
        logger.info(
            f"Full {result.direction} finished: {result.total_success} records, "
            f"{result.total_errors} errors"
        )
        return result

    def run_full_export(self) -> threading.Thread:
        """Start export_all on a dedicated background thread."""
        return self._start(self.export_all, "plantsync-export")

    def run_full_import(self) -> threading.Thread:
        """Start import_all on a dedicated background thread."""
        return self._start(self.import_all, "plantsync-import")

    # =========================================================================
    # SINGLE TABLES
    # =========================================================================

    def export_table(self, kind) -> TableResult:
        return self.export_session.export_table(kind)

    def import_table(self, kind) -> TableResult:
        return self.import_session.import_table(kind)

    def export_table_async(self, kind) -> threading.Thread:
        return self._start(lambda: self.export_table(kind), f"plantsync-export-{get_spec(kind).local_table}")

    def import_table_async(self, kind) -> threading.Thread:
        return self._start(lambda: self.import_table(kind), f"plantsync-import-{get_spec(kind).local_table}")

    def _start(self, target: Callable, name: str) -> threading.Thread:
        def _run():
            try:
                target()
            except Exception as e:
                logger.error(f"{name} aborted: {e}", exc_info=True)

        thread = threading.Thread(target=_run, name=name, daemon=True)
        thread.start()
        return thread

    # =========================================================================
    # SUMMARIES
    # =========================================================================

    def get_local_table_counts(self) -> dict[str, int]:
        """Row count per local table; a table that cannot be read counts 0."""
        counts = {}
        for spec in ordered_specs():
            try:
                counts[spec.local_table] = self.repositories[spec.kind].count()
            except Exception as e:
                logger.error(f"Error counting {spec.local_table}: {e}")
                counts[spec.local_table] = 0
        return counts

    def get_remote_table_counts(
        self, callback: Callable[[dict[str, int]], None]
    ) -> threading.Thread:
        """Count children of every remote path and hand the result to callback.

        All paths are read concurrently; a failed or timed out read counts 0.
        The callback runs on a background thread.
        """
        waiters = {}
        for spec in ordered_specs():
            waiter = SnapshotWaiter(spec.remote_path)
            self.remote.read_children_once(spec.remote_path, waiter.on_data, waiter.on_error)
            waiters[spec.local_table] = waiter

        def _collect():
            deadline = time.monotonic() + self.read_timeout
            counts = {}
            for table, waiter in waiters.items():
                try:
                    remaining = max(deadline - time.monotonic(), 0)
                    counts[table] = len(waiter.wait(remaining))
                except Exception as e:
                    logger.warning(f"Could not count remote {table}: {e}")
                    counts[table] = 0
            callback(counts)

        return self._start(_collect, "plantsync-remote-counts")
