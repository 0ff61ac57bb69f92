"""Firebase service - remote store adapters used by the sync engine"""

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

import firebase_admin
from firebase_admin import credentials, db, firestore
from google.cloud.firestore import Client as FirestoreClient

from .. import config

logger = logging.getLogger(__name__)

Children = list[tuple[str, Any]]


def normalize_children(snapshot: Any) -> Children:
    """Turn a path snapshot into (child_id, value) pairs.

    The Realtime Database hands back a list instead of a dict when every key
    is a small integer; missing indexes come back as None and are skipped.
    """
    if snapshot is None:
        return []
    if isinstance(snapshot, dict):
        return [(str(key), value) for key, value in snapshot.items()]
    if isinstance(snapshot, list):
        return [(str(index), value) for index, value in enumerate(snapshot) if value is not None]
    raise TypeError(f"Unexpected snapshot type: {type(snapshot).__name__}")


class RemoteStore:
    """Push-based remote store contract.

    write() is fire-and-forget: it returns a Future the caller may ignore.
    read_children_once() answers exactly once, through on_data or on_error,
    on a background thread.
    """

    def write(self, path: str, fields: dict) -> Future:
        raise NotImplementedError

    def read_children_once(
        self,
        path: str,
        on_data: Callable[[Children], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class _ExecutorStore(RemoteStore):
    """Runs blocking SDK calls on worker pools so callers never wait on them.

    Reads get their own pool: a snapshot read must not queue behind the
    fire-and-forget writes of a bulk export.
    """

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="remote-write")
        self._read_executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="remote-read")

    def _set(self, path: str, fields: dict) -> None:
        raise NotImplementedError

    def _get_children(self, path: str) -> Children:
        raise NotImplementedError

    def write(self, path, fields):
        future = self._executor.submit(self._set, path, fields)
        future.add_done_callback(lambda f: self._log_write_result(path, f))
        return future

    def _log_write_result(self, path: str, future: Future):
        error = future.exception()
        if error is not None:
            logger.error(f"Remote write to {path} failed: {error}")

    def read_children_once(self, path, on_data, on_error):
        def _read():
            try:
                children = self._get_children(path)
            except Exception as e:
                logger.error(f"Remote read of {path} failed: {e}")
                on_error(e)
                return
            on_data(children)

        self._read_executor.submit(_read)

    def close(self):
        self._executor.shutdown(wait=False)
        self._read_executor.shutdown(wait=False)


class FirebaseRemoteStore(_ExecutorStore):
    """Firebase Realtime Database, addressed by slash-separated paths."""

    def __init__(self, reference: Optional[db.Reference] = None, max_workers: int = 4):
        super().__init__(max_workers)
        self.db = reference or db.reference()

    def _set(self, path, fields):
        self.db.child(path).set(fields)
        logger.debug(f"Wrote {path}")

    def _get_children(self, path):
        return normalize_children(self.db.child(path).get())


class FirestoreRemoteStore(_ExecutorStore):
    """Firestore backend: 'users/7' is document '7' of collection 'users'."""

    def __init__(self, client: Optional[FirestoreClient] = None, max_workers: int = 4):
        super().__init__(max_workers)
        self.firestore_db = client or firestore.client()

    def _set(self, path, fields):
        collection_path, doc_id = path.rsplit("/", 1)
        self.firestore_db.collection(collection_path).document(doc_id).set(fields)
        logger.debug(f"Wrote {path}")

    def _get_children(self, path):
        return [(doc.id, doc.to_dict()) for doc in self.firestore_db.collection(path).stream()]


def _resolve_credentials_path(cred_path: str) -> str:
    if not os.path.exists(cred_path):
        if not os.path.isabs(cred_path):
            abs_path = os.path.expanduser(f"~/{cred_path}")
            if os.path.exists(abs_path):
                return abs_path
            raise FileNotFoundError(f"Firebase credentials not found at {cred_path} or {abs_path}")
        raise FileNotFoundError(f"Firebase credentials not found at {cred_path}")

    if not os.access(cred_path, os.R_OK):
        raise PermissionError(f"No read permission for Firebase credentials at {cred_path}")
    return cred_path


def connect_remote_store(backend: str = None) -> RemoteStore:
    """Initialize Firebase and return the configured remote store."""
    backend = (backend or config.REMOTE_BACKEND).lower()
    if backend not in ("realtime", "firestore"):
        raise ValueError(f"Unknown remote backend: {backend}")

    try:
        if not firebase_admin._apps:
            cred_path = _resolve_credentials_path(config.FIREBASE_CREDENTIALS_PATH)
            logger.info(f"Loading Firebase credentials from: {cred_path}")

            options = {}
            if config.FIREBASE_DATABASE_URL:
                options["databaseURL"] = config.FIREBASE_DATABASE_URL
            if config.FIREBASE_PROJECT_ID:
                options["projectId"] = config.FIREBASE_PROJECT_ID

            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred, options)

        store = FirebaseRemoteStore() if backend == "realtime" else FirestoreRemoteStore()
        logger.info(f"Connected to Firebase ({backend})")
        return store

    except Exception as e:
        logger.error(f"Failed to connect to Firebase: {e}", exc_info=True)
        raise
