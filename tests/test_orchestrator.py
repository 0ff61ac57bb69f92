"""Tests for full-catalog transfers."""
from __future__ import annotations

import threading

import pytest

from plantsync.storage.models import (
    AlertRecord,
    AlertSeverity,
    EntityKind,
    PlantRecord,
    SensorReadingRecord,
    UserRecord,
)
from plantsync.sync.orchestrator import TransferOrchestrator


def make_orchestrator(db, remote, reporter, pauses=None):
    return TransferOrchestrator(
        db,
        remote,
        reporter=reporter,
        export_pause_seconds=1.0,
        read_timeout=1,
        confirm_writes=False,
        sleep=(pauses.append if pauses is not None else lambda seconds: None),
    )


def seed(db):
    user_id = db.insert_user(UserRecord(name="Ana", email="ana@x.com", password_hash="h"))
    db.insert_plant(PlantRecord(id=3, user_id=user_id, name="Fern", optimal_temp_min=18.0))
    db.insert_sensor_reading(SensorReadingRecord(plant_id=3, temperature=21.5, pest_count=1))
    db.insert_sensor_reading(SensorReadingRecord(plant_id=3, temperature=22.0))
    db.insert_alert(AlertRecord(plant_id=3, title="Dry soil", severity=AlertSeverity.WARNING))


class TestFullRuns:

    def test_import_reports_tables_in_dependency_order(self, db, remote, reporter):
        remote.data["users"] = {"1": {"id": 1, "email": "ana@x.com"}}

        result = make_orchestrator(db, remote, reporter).import_all()

        completed = [event[1] for event in reporter.of("table_complete")]
        assert completed == ["users", "plants", "sensor_data", "alerts"]
        assert reporter.events[-1] == ("complete", 1, 0)
        assert result.direction == "import"
        assert result.total_success == 1

    def test_failing_table_does_not_stop_the_run(self, db, remote, reporter):
        remote.data["users"] = {"1": {"id": 1, "email": "ana@x.com"}}
        remote.data["sensor_data"] = {"1": {"plant_id": 3}}
        remote.failing_reads.add("plants")

        result = make_orchestrator(db, remote, reporter).import_all()

        tables = result.by_table()
        assert tables["plants"].failed
        assert tables["sensor_data"].success_count == 1
        completed = [event[1] for event in reporter.of("table_complete")]
        assert completed == ["users", "sensor_data", "alerts"]
        assert reporter.events[-1] == ("complete", 2, 0)

    def test_export_pauses_between_tables_only(self, db, remote, reporter):
        seed(db)
        pauses = []

        result = make_orchestrator(db, remote, reporter, pauses).export_all()

        assert pauses == [1.0, 1.0, 1.0]
        assert result.total_success == 5
        assert reporter.events[-1] == ("complete", 5, 0)

    def test_full_import_runs_in_background(self, db, remote, reporter):
        remote.data["users"] = {"1": {"id": 1, "email": "ana@x.com"}}

        thread = make_orchestrator(db, remote, reporter).run_full_import()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert thread is not threading.current_thread()
        assert reporter.events[-1] == ("complete", 1, 0)

    def test_single_table_runs_skip_overall_completion(self, db, remote, reporter):
        seed(db)
        orchestrator = make_orchestrator(db, remote, reporter)

        thread = orchestrator.export_table_async(EntityKind.ALERTS)
        thread.join(timeout=5)

        assert thread.name == "plantsync-export-alerts"
        assert reporter.events == [("table_complete", "alerts", 1, 0)]
        assert reporter.of("complete") == []

    def test_export_then_import_preserves_data(self, db, other_db, remote, reporter):
        seed(db)
        make_orchestrator(db, remote, reporter).export_all()

        result = make_orchestrator(other_db, remote, reporter).import_all()

        assert result.total_errors == 0
        assert make_orchestrator(other_db, remote, reporter).get_local_table_counts() == {
            "users": 1, "plants": 1, "sensor_data": 2, "alerts": 1,
        }
        plant = other_db.get_plant_by_id(3)
        assert plant.optimal_temp_min == 18.0
        assert plant.image_url is None
        assert other_db.get_all_alerts()[0].severity is AlertSeverity.WARNING


class TestSummaries:

    def test_local_counts(self, db, remote, reporter):
        seed(db)
        counts = make_orchestrator(db, remote, reporter).get_local_table_counts()
        assert counts == {"users": 1, "plants": 1, "sensor_data": 2, "alerts": 1}

    def test_local_count_failure_counts_zero(self, db, remote, reporter, monkeypatch):
        orchestrator = make_orchestrator(db, remote, reporter)

        def broken():
            raise RuntimeError("disk I/O error")

        monkeypatch.setattr(orchestrator.repositories[EntityKind.PLANTS], "count", broken)

        assert orchestrator.get_local_table_counts()["plants"] == 0

    def test_remote_counts_are_delivered_to_callback(self, db, remote, reporter):
        remote.data["users"] = {"1": {}, "2": {}}
        remote.data["sensor_data"] = {str(i): {} for i in range(4)}
        remote.failing_reads.add("alerts")
        received = {}
        done = threading.Event()

        def on_counts(counts):
            received.update(counts)
            done.set()

        make_orchestrator(db, remote, reporter).get_remote_table_counts(on_counts)

        assert done.wait(timeout=5)
        assert received == {"users": 2, "plants": 0, "sensor_data": 4, "alerts": 0}

    def test_unknown_table_kind(self, db, remote, reporter):
        with pytest.raises(ValueError):
            make_orchestrator(db, remote, reporter).export_table("devices")
