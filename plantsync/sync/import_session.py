"""
Import Session - pulls a remote path into the local SQLite store.

The remote read is push-based; SnapshotWaiter turns it into a blocking call
with a timeout so import_table() is synchronous for its caller.
"""

import logging
import threading
from concurrent.futures import Future, InvalidStateError
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Optional

from pydantic import BaseModel

from ..services.firebase_service import Children, RemoteStore
from ..storage.models import EntityKind, REMOTE_READ_TIMEOUT_SECONDS
from .catalog import TableSpec, get_spec
from .codec import RecordCodec
from .errors import LocalWriteError, RemoteReadError, RemoteReadTimeout
from .identity import IdMap
from .progress import ProgressReporter, SafeReporter
from .repositories import TableRepository
from .results import TableResult

logger = logging.getLogger(__name__)


class SnapshotWaiter:
    """Single-fire bridge from on_data/on_error callbacks to a blocking wait.

    Whichever callback arrives first settles the wait; later callbacks, and any
    callback arriving after a timeout, are ignored.
    """

    def __init__(self, path: str):
        self.path = path
        self._future: Future = Future()
        self._lock = threading.Lock()

    def _settle(self, setter, value) -> None:
        with self._lock:
            if self._future.done():
                logger.debug(f"Ignoring late answer for {self.path}")
                return
            try:
                setter(value)
            except InvalidStateError:
                pass

    def on_data(self, children: Children) -> None:
        self._settle(self._future.set_result, children)

    def on_error(self, error: Exception) -> None:
        if not isinstance(error, RemoteReadError):
            error = RemoteReadError(str(error))
        self._settle(self._future.set_exception, error)

    def wait(self, timeout: float) -> Children:
        """Block until answered. Raises RemoteReadError or RemoteReadTimeout."""
        try:
            return self._future.result(timeout=timeout)
        except FuturesTimeoutError:
            with self._lock:
                self._future.cancel()
            raise RemoteReadTimeout(self.path, timeout) from None


class ImportSession:
    """
    Remote -> local transfer of one table at a time.

    Matching rules:
    - Tables with a natural key (users by email, plants by id) are upserted:
      insert when no local row matches, update in place otherwise.
    - Append-only tables (sensor_data, alerts) always insert, so importing
      the same snapshot twice duplicates them.
    """

    def __init__(
        self,
        repositories: dict[EntityKind, TableRepository],
        remote: RemoteStore,
        reporter: Optional[ProgressReporter] = None,
        codec: Optional[RecordCodec] = None,
        timeout: float = REMOTE_READ_TIMEOUT_SECONDS,
    ):
        self.repositories = repositories
        self.remote = remote
        self.reporter = SafeReporter(reporter)
        self.codec = codec or RecordCodec()
        self.timeout = timeout

    def fetch_children(self, spec: TableSpec) -> Children:
        """One-shot snapshot of a remote path, blocking up to the timeout."""
        waiter = SnapshotWaiter(spec.remote_path)
        self.remote.read_children_once(spec.remote_path, waiter.on_data, waiter.on_error)
        return waiter.wait(self.timeout)

    def import_table(self, kind, id_map: Optional[IdMap] = None) -> TableResult:
        """Import every child of a remote path.

        Record, read and timeout failures are reported and counted, never raised.
        Raises ValueError only for an unknown kind.
        """
        spec = get_spec(kind)
        table = spec.local_table
        id_map = id_map if id_map is not None else IdMap()
        result = TableResult(table)

        logger.info(f"Importing table: {table}")

        try:
            children = self.fetch_children(spec)
        except RemoteReadTimeout as e:
            logger.warning(str(e))
            self.reporter.error(table, str(e))
            return result.fail(timed_out=True)
        except Exception as e:
            logger.error(f"Error reading {spec.remote_path} from remote store: {e}")
            self.reporter.error(table, f"Remote read failed: {e}")
            return result.fail()

        total = len(children)
        logger.info(f"{table}: {total} records found remotely")

        for index, (child_id, fields) in enumerate(children, start=1):
            try:
                record = self.codec.decode(spec.kind, fields)
                self._store(spec, record, id_map)
                result.success_count += 1
            except Exception as e:
                result.error_count += 1
                logger.error(f"Error importing {table}/{child_id}: {e}")
                self.reporter.error(table, f"Record error: {e}")

            if index % spec.import_progress_interval == 0:
                self.reporter.progress(table, index, total)

        self.reporter.table_complete(table, result.success_count, result.error_count)
        logger.info(
            f"{table} imported: {result.success_count} ok, {result.error_count} errors"
        )
        return result

    def _store(self, spec: TableSpec, record: BaseModel, id_map: IdMap) -> None:
        repo = self.repositories[spec.kind]

        if spec.foreign_key is not None:
            attribute, parent_kind = spec.foreign_key
            parent_id = id_map.resolve(parent_kind, getattr(record, attribute))
            record = record.model_copy(update={attribute: parent_id})

        if spec.append_only:
            if not repo.insert(record):
                raise LocalWriteError(f"insert into {spec.local_table} returned no id")
            return

        remote_id = record.id
        key = spec.natural_key(record)
        existing = repo.get_by_natural_key(key) if key else None

        if existing is None:
            local_id = repo.insert(record)
            if not local_id:
                raise LocalWriteError(f"insert into {spec.local_table} returned no id")
            logger.debug(f"{spec.local_table}: inserted {key!r} as {local_id}")
        else:
            local_id = existing.id
            updated = repo.update_by_key(record.model_copy(update={"id": local_id}))
            if updated < 1:
                raise LocalWriteError(f"update of {spec.local_table} id {local_id} matched no row")
            logger.debug(f"{spec.local_table}: updated {key!r} (id {local_id})")

        id_map.record(spec.kind, remote_id, local_id)
