"""Per-run correlation between remote ids and local ids."""

import logging
import threading
from typing import Optional

from ..storage.models import EntityKind

logger = logging.getLogger(__name__)


class IdMap:
    """Remote id -> local id, per entity kind.

    Filled while importing a table and consulted when importing the tables that
    reference it, so foreign keys follow the local id space. Lives for a single
    run only; the engine keeps no state between runs.
    """

    def __init__(self):
        self._ids: dict[EntityKind, dict[int, int]] = {}
        self._lock = threading.Lock()

    def record(self, kind: EntityKind, remote_id: int, local_id: int) -> None:
        if remote_id <= 0 or local_id <= 0:
            return
        with self._lock:
            self._ids.setdefault(EntityKind(kind), {})[remote_id] = local_id

    def local_id(self, kind: EntityKind, remote_id: int) -> Optional[int]:
        with self._lock:
            return self._ids.get(EntityKind(kind), {}).get(remote_id)

    def resolve(self, kind: EntityKind, remote_id: int) -> int:
        """Local id for remote_id, or remote_id unchanged when unmapped."""
        local = self.local_id(kind, remote_id)
        if local is not None and local != remote_id:
            logger.debug(f"Remapped {EntityKind(kind).value} id {remote_id} -> {local}")
        return remote_id if local is None else local

    def __len__(self):
        with self._lock:
            return sum(len(ids) for ids in self._ids.values())
