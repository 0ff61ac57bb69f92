"""Plant monitor sync engine package"""

from .storage import LocalDatabase
from .sync import TransferOrchestrator, ProgressReporter

__all__ = ['LocalDatabase', 'TransferOrchestrator', 'ProgressReporter']
