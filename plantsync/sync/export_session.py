"""
Export Session - copies local SQLite rows to the remote store.
Each row is written to <remote_path>/<local id>, replacing whatever is there.
"""

import logging
import sqlite3
from typing import Optional

from ..services.firebase_service import RemoteStore
from ..storage.models import EntityKind, EXPORT_PROGRESS_INTERVAL, REMOTE_READ_TIMEOUT_SECONDS
from .catalog import TableSpec, get_spec
from .codec import RecordCodec
from .progress import ProgressReporter, SafeReporter
from .repositories import TableRepository
from .results import TableResult

logger = logging.getLogger(__name__)


class ExportSession:
    """
    Local -> remote transfer of one table at a time.

    Write contract:
    - By default a record counts as successful once its write is issued;
      the remote acknowledgement is never awaited.
    - With confirm_writes=True each write is awaited (up to ack_timeout) and
      a failed or unacknowledged write counts as a record error.
    """

    def __init__(
        self,
        repositories: dict[EntityKind, TableRepository],
        remote: RemoteStore,
        reporter: Optional[ProgressReporter] = None,
        codec: Optional[RecordCodec] = None,
        confirm_writes: bool = False,
        ack_timeout: float = REMOTE_READ_TIMEOUT_SECONDS,
        progress_interval: int = EXPORT_PROGRESS_INTERVAL,
    ):
        self.repositories = repositories
        self.remote = remote
        self.reporter = SafeReporter(reporter)
        self.codec = codec or RecordCodec()
        self.confirm_writes = confirm_writes
        self.ack_timeout = ack_timeout
        self.progress_interval = progress_interval

    def export_table(self, kind) -> TableResult:
        """Export every local row of a table.

        Record and table failures are reported and counted, never raised.
        Raises ValueError only for an unknown kind.
        """
        spec = get_spec(kind)
        table = spec.local_table
        repo = self.repositories[spec.kind]
        result = TableResult(table)

        logger.info(f"Exporting table: {table}")

        try:
            total = repo.count()
            logger.info(f"{table}: {total} rows found")

            if total == 0:
                self.reporter.table_complete(table, 0, 0)
                return result

            for index, row in enumerate(repo.iter_rows(), start=1):
                try:
                    self._export_row(spec, row)
                    result.success_count += 1
                except Exception as e:
                    result.error_count += 1
                    logger.error(f"Error exporting row of {table}: {e}")
                    self.reporter.error(table, f"Record error: {e}")

                if index % self.progress_interval == 0:
                    self.reporter.progress(table, index, total)

        except Exception as e:
            logger.error(f"Could not read table {table}: {e}", exc_info=True)
            self.reporter.error(table, f"Could not read table: {e}")
            return result.fail()

        self.reporter.table_complete(table, result.success_count, result.error_count)
        logger.info(
            f"{table} exported: {result.success_count} ok, {result.error_count} errors"
        )
        return result

    def _export_row(self, spec: TableSpec, row: sqlite3.Row) -> None:
        fields = self.codec.encode_row(row)
        row_id = fields.get("id")
        if row_id is None:
            raise ValueError(f"{spec.local_table} row has no primary key")

        path = spec.remote_child_path(str(row_id))
        future = self.remote.write(path, fields)

        if self.confirm_writes:
            # Raises the write's own error, or TimeoutError when unacknowledged
            future.result(timeout=self.ack_timeout)
