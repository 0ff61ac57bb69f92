"""Static catalog of the synchronized tables, in dependency order."""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..storage.models import (
    EntityKind,
    IMPORT_PROGRESS_INTERVAL_KEYED,
    IMPORT_PROGRESS_INTERVAL_EVENTS,
)


@dataclass(frozen=True)
class TableSpec:
    """Where a table lives in each tier and how its rows are matched on import."""
    kind: EntityKind
    local_table: str
    remote_path: str
    rank: int  # foreign-key targets have lower rank
    natural_key: Optional[Callable[[Any], Any]] = None  # None: append-only
    foreign_key: Optional[tuple[str, EntityKind]] = None  # (record attribute, parent kind)
    import_progress_interval: int = IMPORT_PROGRESS_INTERVAL_KEYED

    @property
    def append_only(self) -> bool:
        return self.natural_key is None

    def remote_child_path(self, child_id) -> str:
        return f"{self.remote_path}/{child_id}"


CATALOG: tuple[TableSpec, ...] = (
    TableSpec(
        kind=EntityKind.USERS,
        local_table="users",
        remote_path="users",
        rank=0,
        natural_key=lambda user: user.email,
    ),
    TableSpec(
        kind=EntityKind.PLANTS,
        local_table="plants",
        remote_path="plants",
        rank=1,
        natural_key=lambda plant: plant.id,
        foreign_key=("user_id", EntityKind.USERS),
    ),
    TableSpec(
        kind=EntityKind.SENSOR_DATA,
        local_table="sensor_data",
        remote_path="sensor_data",
        rank=2,
        foreign_key=("plant_id", EntityKind.PLANTS),
        import_progress_interval=IMPORT_PROGRESS_INTERVAL_EVENTS,
    ),
    TableSpec(
        kind=EntityKind.ALERTS,
        local_table="alerts",
        remote_path="alerts",
        rank=2,
        foreign_key=("plant_id", EntityKind.PLANTS),
        import_progress_interval=IMPORT_PROGRESS_INTERVAL_EVENTS,
    ),
)


def get_spec(kind) -> TableSpec:
    """Look up a table spec by kind or by its table name."""
    kind = EntityKind(kind)
    for spec in CATALOG:
        if spec.kind is kind:
            return spec
    raise KeyError(kind)


def ordered_specs() -> list[TableSpec]:
    """Catalog entries in ascending dependency rank (stable)."""
    return sorted(CATALOG, key=lambda spec: spec.rank)
