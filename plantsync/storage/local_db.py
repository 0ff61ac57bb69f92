"""
Local SQLite database operations for the plant monitor.
Offline-first store for users, plants, sensor readings and alerts.
"""

import logging
import sqlite3
import time
from pathlib import Path
from typing import Iterator, Optional
from contextlib import contextmanager

from .models import (
    UserRecord,
    PlantRecord,
    SensorReadingRecord,
    AlertRecord,
)

logger = logging.getLogger(__name__)

TABLES = ("users", "plants", "sensor_data", "alerts")


def _now_millis() -> str:
    return str(int(time.time() * 1000))


def _row_values(row: sqlite3.Row) -> dict:
    """Column dict without NULLs, so record defaults apply."""
    return {key: row[key] for key in row.keys() if row[key] is not None}


class LocalDatabase:
    """SQLite database manager for local plant storage."""

    def __init__(self, db_path: str = "data/plants.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()
        logger.info(f"Local database ready at {self.db_path}")

    @contextmanager
    def _get_connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT UNIQUE NOT NULL,
                    password TEXT NOT NULL,
                    profile_image TEXT,
                    google_id TEXT,
                    created_at TEXT,
                    updated_at TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS plants (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER,
                    plant_name TEXT NOT NULL,
                    type TEXT,
                    species TEXT,
                    scientific_name TEXT,
                    image_url TEXT,
                    is_connected INTEGER DEFAULT 0,
                    optimal_soil_hum_min REAL,
                    optimal_soil_hum_max REAL,
                    optimal_temp_min REAL,
                    optimal_temp_max REAL,
                    optimal_amb_hum_min REAL,
                    optimal_amb_hum_max REAL,
                    optimal_light TEXT,
                    created_at TEXT,
                    updated_at TEXT,
                    FOREIGN KEY(user_id) REFERENCES users(id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sensor_data (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    plant_id INTEGER,
                    soil_humidity REAL,
                    temperature REAL,
                    ambient_humidity REAL,
                    uv_level REAL,
                    water_level REAL,
                    pest_count INTEGER,
                    timestamp TEXT,
                    FOREIGN KEY(plant_id) REFERENCES plants(id)
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_sensor_data_plant
                ON sensor_data(plant_id)
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS alerts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    plant_id INTEGER,
                    alert_type TEXT,
                    title TEXT,
                    message TEXT,
                    severity TEXT,
                    is_read INTEGER DEFAULT 0,
                    icon_type TEXT,
                    timestamp TEXT,
                    FOREIGN KEY(plant_id) REFERENCES plants(id)
                )
            """)

    # =========================================================================
    # GENERIC TABLE ACCESS
    # =========================================================================

    def _check_table(self, table: str) -> str:
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        return table

    def count_rows(self, table: str) -> int:
        """Count rows in one of the synchronized tables."""
        self._check_table(table)
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT COUNT(*) FROM {table}")
            return cursor.fetchone()[0]

    def iter_rows(self, table: str) -> Iterator[sqlite3.Row]:
        """Stream raw rows of a table in storage order."""
        self._check_table(table)
        with self._get_connection() as conn:
            cursor = conn.execute(f"SELECT * FROM {table}")
            for row in cursor:
                yield row

    # =========================================================================
    # USERS
    # =========================================================================

    def insert_user(self, user: UserRecord) -> int:
        """Insert a new user. Returns the generated id."""
        now = _now_millis()
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO users
                (name, email, password, profile_image, google_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                user.name,
                user.email,
                user.password_hash,
                user.profile_image_url,
                user.external_auth_id,
                user.created_at or now,
                user.updated_at or now,
            ))
            return cursor.lastrowid

    def update_user(self, user: UserRecord) -> int:
        """Update a user by id. An empty password keeps the stored one."""
        fields = {
            "name": user.name,
            "email": user.email,
            "profile_image": user.profile_image_url,
            "google_id": user.external_auth_id,
            "updated_at": user.updated_at or _now_millis(),
        }
        if user.password_hash:
            fields["password"] = user.password_hash

        set_clause = ', '.join([f"{k} = ?" for k in fields.keys()])
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"""
                UPDATE users
                SET {set_clause}
                WHERE id = ?
            """, [*fields.values(), user.id])
            return cursor.rowcount

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Get a user by email."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users WHERE email = ?", (email,))
            row = cursor.fetchone()

            if row is None:
                return None

            return UserRecord.model_validate(_row_values(row))

    def get_all_users(self) -> list[UserRecord]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users ORDER BY id ASC")
            return [UserRecord.model_validate(_row_values(row)) for row in cursor.fetchall()]

    # =========================================================================
    # PLANTS
    # =========================================================================

    def insert_plant(self, plant: PlantRecord) -> int:
        """Insert a plant. A positive plant.id is kept, otherwise one is generated."""
        now = _now_millis()
        values = {
            "user_id": plant.user_id,
            "plant_name": plant.name,
            "type": plant.type,
            "species": plant.species,
            "scientific_name": plant.scientific_name,
            "image_url": plant.image_url,
            "is_connected": 1 if plant.is_connected else 0,
            "optimal_soil_hum_min": plant.optimal_soil_humidity_min,
            "optimal_soil_hum_max": plant.optimal_soil_humidity_max,
            "optimal_temp_min": plant.optimal_temp_min,
            "optimal_temp_max": plant.optimal_temp_max,
            "optimal_amb_hum_min": plant.optimal_ambient_humidity_min,
            "optimal_amb_hum_max": plant.optimal_ambient_humidity_max,
            "optimal_light": plant.optimal_light,
            "created_at": plant.created_at or now,
            "updated_at": plant.updated_at or now,
        }
        if plant.id > 0:
            values = {"id": plant.id, **values}

        columns = ', '.join(values.keys())
        placeholders = ','.join(['?'] * len(values))
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"INSERT INTO plants ({columns}) VALUES ({placeholders})",
                list(values.values()),
            )
            return cursor.lastrowid

    def update_plant(self, plant: PlantRecord) -> int:
        """Update every mutable plant column by id."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                UPDATE plants
                SET user_id = ?, plant_name = ?, type = ?, species = ?,
                    scientific_name = ?, image_url = ?, is_connected = ?,
                    optimal_soil_hum_min = ?, optimal_soil_hum_max = ?,
                    optimal_temp_min = ?, optimal_temp_max = ?,
                    optimal_amb_hum_min = ?, optimal_amb_hum_max = ?,
                    optimal_light = ?, updated_at = ?
                WHERE id = ?
            """, (
                plant.user_id,
                plant.name,
                plant.type,
                plant.species,
                plant.scientific_name,
                plant.image_url,
                1 if plant.is_connected else 0,
                plant.optimal_soil_humidity_min,
                plant.optimal_soil_humidity_max,
                plant.optimal_temp_min,
                plant.optimal_temp_max,
                plant.optimal_ambient_humidity_min,
                plant.optimal_ambient_humidity_max,
                plant.optimal_light,
                plant.updated_at or _now_millis(),
                plant.id,
            ))
            return cursor.rowcount

    def get_plant_by_id(self, plant_id: int) -> Optional[PlantRecord]:
        """Get a plant by id."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM plants WHERE id = ?", (plant_id,))
            row = cursor.fetchone()

            if row is None:
                return None

            return PlantRecord.model_validate(_row_values(row))

    def get_all_plants(self) -> list[PlantRecord]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM plants ORDER BY id ASC")
            return [PlantRecord.model_validate(_row_values(row)) for row in cursor.fetchall()]

    # =========================================================================
    # SENSOR READINGS
    # =========================================================================

    def insert_sensor_reading(self, reading: SensorReadingRecord) -> int:
        """Append a sensor reading."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO sensor_data
                (plant_id, soil_humidity, temperature, ambient_humidity, uv_level,
                 water_level, pest_count, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                reading.plant_id,
                reading.soil_humidity,
                reading.temperature,
                reading.ambient_humidity,
                reading.uv_index,
                reading.water_level,
                reading.pest_count,
                reading.timestamp or _now_millis(),
            ))
            return cursor.lastrowid

    def get_all_sensor_readings(self) -> list[SensorReadingRecord]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM sensor_data ORDER BY id ASC")
            return [
                SensorReadingRecord.model_validate(_row_values(row))
                for row in cursor.fetchall()
            ]

    # =========================================================================
    # ALERTS
    # =========================================================================

    def insert_alert(self, alert: AlertRecord) -> int:
        """Append an alert."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO alerts
                (plant_id, alert_type, title, message, severity, is_read, icon_type, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                alert.plant_id,
                alert.alert_type,
                alert.title,
                alert.message,
                alert.severity.value,
                1 if alert.is_read else 0,
                alert.icon_tag,
                alert.timestamp or _now_millis(),
            ))
            return cursor.lastrowid

    def get_all_alerts(self) -> list[AlertRecord]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM alerts ORDER BY id ASC")
            return [AlertRecord.model_validate(_row_values(row)) for row in cursor.fetchall()]
