"""Tests for logging setup."""
from __future__ import annotations

import logging

from plantsync import config
from plantsync.utils import setup_logging


def test_setup_logging_writes_to_log_file(tmp_path, monkeypatch):
    log_file = tmp_path / "logs" / "plantsync.log"
    monkeypatch.setattr(config, "LOG_FILE", str(log_file))
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level

    try:
        setup_logging("INFO")
        logging.getLogger("plantsync.test").info("sync started")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)

    content = log_file.read_text()
    assert "plantsync.test - INFO - sync started" in content
