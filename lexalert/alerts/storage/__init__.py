"""
Storage backends for alerts.
"""

from lexalert.alerts.storage.base_storage import BaseStorage, Alert
from lexalert.alerts.storage.memory_storage import AlertStore

__all__ = ['BaseStorage', 'Alert', 'AlertStore']
