"""
Pydantic records for the four synchronized tables.
Field aliases are the SQLite column names, which are also the remote field names.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

# =============================================================================
# SYSTEM CONSTANTS
# =============================================================================

REMOTE_READ_TIMEOUT_SECONDS = 30
EXPORT_TABLE_PAUSE_SECONDS = 1.0

EXPORT_PROGRESS_INTERVAL = 5
IMPORT_PROGRESS_INTERVAL_KEYED = 5  # users, plants
IMPORT_PROGRESS_INTERVAL_EVENTS = 10  # sensor_data, alerts


# =============================================================================
# ENUMS
# =============================================================================

class EntityKind(str, Enum):
    USERS = "users"
    PLANTS = "plants"
    SENSOR_DATA = "sensor_data"
    ALERTS = "alerts"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @classmethod
    def _missing_(cls, value):
        # Alert generator writes upper case ("CRITICAL")
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


# =============================================================================
# DATA MODELS
# =============================================================================

class UserRecord(BaseModel):
    id: int = 0
    name: str = ""
    email: str = ""
    password_hash: str = Field(default="", alias="password")
    profile_image_url: Optional[str] = Field(default=None, alias="profile_image")
    external_auth_id: Optional[str] = Field(default=None, alias="google_id")
    created_at: str = ""
    updated_at: str = ""

    class Config:
        populate_by_name = True


class PlantRecord(BaseModel):
    id: int = 0
    user_id: int = 0
    name: str = Field(default="", alias="plant_name")
    type: str = ""
    species: Optional[str] = None
    scientific_name: Optional[str] = None
    image_url: Optional[str] = None
    is_connected: bool = False
    optimal_soil_humidity_min: float = Field(default=0.0, alias="optimal_soil_hum_min")
    optimal_soil_humidity_max: float = Field(default=0.0, alias="optimal_soil_hum_max")
    optimal_temp_min: float = 0.0
    optimal_temp_max: float = 0.0
    optimal_ambient_humidity_min: float = Field(default=0.0, alias="optimal_amb_hum_min")
    optimal_ambient_humidity_max: float = Field(default=0.0, alias="optimal_amb_hum_max")
    optimal_light: str = ""
    created_at: str = ""
    updated_at: str = ""

    class Config:
        populate_by_name = True


class SensorReadingRecord(BaseModel):
    id: int = 0
    plant_id: int = 0
    soil_humidity: float = 0.0  # Percent
    temperature: float = 0.0  # Celsius
    ambient_humidity: float = 0.0  # Percent
    uv_index: float = Field(default=0.0, alias="uv_level")
    water_level: float = 0.0  # Percent
    pest_count: int = 0
    timestamp: str = ""  # Epoch millis as text

    class Config:
        populate_by_name = True


class AlertRecord(BaseModel):
    id: int = 0
    plant_id: int = 0
    alert_type: str = ""
    title: str = ""
    message: str = ""
    severity: AlertSeverity = AlertSeverity.INFO
    is_read: bool = False
    icon_tag: str = Field(default="", alias="icon_type")
    timestamp: str = ""

    class Config:
        populate_by_name = True


RECORD_TYPES: dict[EntityKind, type] = {
    EntityKind.USERS: UserRecord,
    EntityKind.PLANTS: PlantRecord,
    EntityKind.SENSOR_DATA: SensorReadingRecord,
    EntityKind.ALERTS: AlertRecord,
}
