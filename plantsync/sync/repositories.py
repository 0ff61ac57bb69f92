"""Per-table repository view over LocalDatabase used by the sync sessions."""

import sqlite3
from typing import Iterator, Optional

from ..storage.local_db import LocalDatabase
from ..storage.models import (
    EntityKind,
    UserRecord,
    PlantRecord,
    SensorReadingRecord,
    AlertRecord,
)


class TableRepository:
    """Read access shared by every table."""

    table: str = ""

    def __init__(self, db: LocalDatabase):
        self.db = db

    def count(self) -> int:
        return self.db.count_rows(self.table)

    def iter_rows(self) -> Iterator[sqlite3.Row]:
        return self.db.iter_rows(self.table)

    def insert(self, record) -> int:
        raise NotImplementedError

    def update_by_key(self, record) -> int:
        raise NotImplementedError(f"{self.table} is append-only")

    def get_by_natural_key(self, key) -> Optional[object]:
        return None

    def get_all(self) -> list:
        raise NotImplementedError


class UserRepository(TableRepository):
    table = "users"

    def insert(self, record: UserRecord) -> int:
        return self.db.insert_user(record)

    def update_by_key(self, record: UserRecord) -> int:
        return self.db.update_user(record)

    def get_by_natural_key(self, email: str) -> Optional[UserRecord]:
        return self.db.get_user_by_email(email)

    def get_all(self) -> list[UserRecord]:
        return self.db.get_all_users()


class PlantRepository(TableRepository):
    table = "plants"

    def insert(self, record: PlantRecord) -> int:
        return self.db.insert_plant(record)

    def update_by_key(self, record: PlantRecord) -> int:
        return self.db.update_plant(record)

    def get_by_natural_key(self, plant_id: int) -> Optional[PlantRecord]:
        return self.db.get_plant_by_id(plant_id)

    def get_all(self) -> list[PlantRecord]:
        return self.db.get_all_plants()


class SensorReadingRepository(TableRepository):
    table = "sensor_data"

    def insert(self, record: SensorReadingRecord) -> int:
        return self.db.insert_sensor_reading(record)

    def get_all(self) -> list[SensorReadingRecord]:
        return self.db.get_all_sensor_readings()


class AlertRepository(TableRepository):
    table = "alerts"

    def insert(self, record: AlertRecord) -> int:
        return self.db.insert_alert(record)

    def get_all(self) -> list[AlertRecord]:
        return self.db.get_all_alerts()


def build_repositories(db: LocalDatabase) -> dict[EntityKind, TableRepository]:
    """One repository per entity kind over the same database."""
    return {
        EntityKind.USERS: UserRepository(db),
        EntityKind.PLANTS: PlantRepository(db),
        EntityKind.SENSOR_DATA: SensorReadingRepository(db),
        EntityKind.ALERTS: AlertRepository(db),
    }
