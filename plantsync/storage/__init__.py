"""Local storage package"""

from .local_db import LocalDatabase
from .models import EntityKind, UserRecord, PlantRecord, SensorReadingRecord, AlertRecord

__all__ = [
    'LocalDatabase',
    'EntityKind',
    'UserRecord',
    'PlantRecord',
    'SensorReadingRecord',
    'AlertRecord',
]
