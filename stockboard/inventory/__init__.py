from .record import InventoryRecord
from .record_store import RecordStore, InMemoryRecordStore, JsonRecordStore, Subscription
from .record_manager import RecordManager, validate_fields

__all__ = [
    "InventoryRecord",
    "RecordStore",
    "InMemoryRecordStore",
    "JsonRecordStore",
    "Subscription",
    "RecordManager",
    "validate_fields",
]
