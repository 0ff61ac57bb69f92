"""Configuration for the plant monitor sync engine"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
_repo_root = Path(__file__).parent.parent.resolve()
_env_file = _repo_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

# Base directory
BASE_DIR = Path(__file__).parent.resolve()

# Local SQLite store
DATABASE_PATH = os.getenv("DATABASE_PATH", str(_repo_root / "data" / "plants.db"))

# Default to relative path (./firebase-key.json) but allow environment override
_default_creds = str(_repo_root / "firebase-key.json")
FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", _default_creds)
FIREBASE_DATABASE_URL = os.getenv("FIREBASE_DATABASE_URL", "")
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")

# Remote backend: "realtime" (Realtime Database) or "firestore"
REMOTE_BACKEND = os.getenv("REMOTE_BACKEND", "realtime").lower()

# Sync tuning
REMOTE_READ_TIMEOUT_SECONDS = float(os.getenv("REMOTE_READ_TIMEOUT_SECONDS", "30"))
EXPORT_TABLE_PAUSE_SECONDS = float(os.getenv("EXPORT_TABLE_PAUSE_SECONDS", "1.0"))
EXPORT_CONFIRM_WRITES = os.getenv("EXPORT_CONFIRM_WRITES", "false").lower() == "true"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "logs/plantsync.log")

# Debug
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
