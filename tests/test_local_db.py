"""Tests for the local SQLite store and the catalog."""
from __future__ import annotations

import pytest

from plantsync.storage.models import (
    AlertRecord,
    AlertSeverity,
    EntityKind,
    PlantRecord,
    SensorReadingRecord,
    UserRecord,
)
from plantsync.sync.catalog import CATALOG, get_spec, ordered_specs
from plantsync.sync.repositories import build_repositories


class TestLocalDatabase:

    def test_insert_and_find_user_by_email(self, db):
        user_id = db.insert_user(UserRecord(name="Ana", email="ana@x.com", password_hash="h"))
        found = db.get_user_by_email("ana@x.com")
        assert found is not None
        assert found.id == user_id
        assert found.name == "Ana"
        assert found.created_at != ""
        assert db.get_user_by_email("nobody@x.com") is None

    def test_update_user_keeps_password_when_empty(self, db):
        user_id = db.insert_user(UserRecord(name="Ana", email="ana@x.com", password_hash="h"))
        rows = db.update_user(UserRecord(id=user_id, name="Ana B", email="ana@x.com"))
        assert rows == 1
        found = db.get_user_by_email("ana@x.com")
        assert found.name == "Ana B"
        assert found.password_hash == "h"

    def test_update_missing_user_touches_nothing(self, db):
        assert db.update_user(UserRecord(id=99, name="Ghost", email="g@x.com")) == 0

    def test_insert_plant_keeps_explicit_id(self, db):
        assert db.insert_plant(PlantRecord(id=42, user_id=1, name="Fern")) == 42
        assert db.insert_plant(PlantRecord(user_id=1, name="Cactus")) == 43
        assert db.get_plant_by_id(42).name == "Fern"

    def test_update_plant_rewrites_optimal_ranges(self, db):
        db.insert_plant(PlantRecord(id=5, name="Fern", optimal_temp_min=10.0))
        db.update_plant(PlantRecord(id=5, name="Fern", optimal_temp_min=18.0, image_url="a.png"))
        plant = db.get_plant_by_id(5)
        assert plant.optimal_temp_min == 18.0
        assert plant.image_url == "a.png"

    def test_null_real_columns_read_back_as_zero(self, db):
        with db._get_connection() as conn:
            conn.execute("INSERT INTO plants (id, plant_name) VALUES (9, 'Bare')")
        plant = db.get_plant_by_id(9)
        assert plant.optimal_temp_max == 0.0
        assert plant.species is None

    def test_append_only_tables(self, db):
        db.insert_sensor_reading(SensorReadingRecord(plant_id=1, temperature=21.0, pest_count=2))
        db.insert_alert(AlertRecord(plant_id=1, title="Dry", severity=AlertSeverity.WARNING))
        assert db.count_rows("sensor_data") == 1
        assert db.count_rows("alerts") == 1
        assert db.get_all_alerts()[0].severity is AlertSeverity.WARNING
        assert db.get_all_sensor_readings()[0].timestamp != ""

    def test_iter_rows_streams_in_storage_order(self, db):
        for name in ("a", "b", "c"):
            db.insert_user(UserRecord(name=name, email=f"{name}@x.com", password_hash="h"))
        assert [row["name"] for row in db.iter_rows("users")] == ["a", "b", "c"]

    def test_unknown_table_is_rejected(self, db):
        with pytest.raises(ValueError):
            db.count_rows("users; DROP TABLE users")
        with pytest.raises(ValueError):
            list(db.iter_rows("devices"))


class TestCatalog:

    def test_dependency_order(self):
        assert [spec.local_table for spec in ordered_specs()] == [
            "users", "plants", "sensor_data", "alerts",
        ]
        assert [spec.rank for spec in CATALOG] == [0, 1, 2, 2]

    def test_natural_keys(self):
        user = UserRecord(id=3, email="a@x.com")
        plant = PlantRecord(id=7)
        assert get_spec(EntityKind.USERS).natural_key(user) == "a@x.com"
        assert get_spec("plants").natural_key(plant) == 7
        assert get_spec("sensor_data").append_only
        assert get_spec("alerts").append_only

    def test_progress_intervals(self):
        assert get_spec("users").import_progress_interval == 5
        assert get_spec("plants").import_progress_interval == 5
        assert get_spec("sensor_data").import_progress_interval == 10
        assert get_spec("alerts").import_progress_interval == 10

    def test_remote_child_path(self):
        assert get_spec("plants").remote_child_path("12") == "plants/12"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            get_spec("devices")


class TestRepositories:

    def test_get_all_returns_records_per_kind(self, db):
        repos = build_repositories(db)
        db.insert_user(UserRecord(name="Ana", email="ana@x.com", password_hash="h"))
        db.insert_user(UserRecord(name="Bo", email="bo@x.com", password_hash="h"))
        db.insert_plant(PlantRecord(id=4, user_id=1, name="Fern"))
        db.insert_sensor_reading(SensorReadingRecord(plant_id=4, temperature=19.5))
        db.insert_alert(AlertRecord(plant_id=4, title="Dry"))

        assert [user.email for user in repos[EntityKind.USERS].get_all()] == ["ana@x.com", "bo@x.com"]
        assert [plant.id for plant in repos[EntityKind.PLANTS].get_all()] == [4]
        assert repos[EntityKind.SENSOR_DATA].get_all()[0].temperature == 19.5
        assert repos[EntityKind.ALERTS].get_all()[0].title == "Dry"

    def test_append_only_tables_have_no_natural_key(self, db):
        repos = build_repositories(db)
        assert repos[EntityKind.SENSOR_DATA].get_by_natural_key(1) is None
        with pytest.raises(NotImplementedError):
            repos[EntityKind.ALERTS].update_by_key(AlertRecord(id=1))
