# stockboard/inventory/record_store.py
from __future__ import annotations

import json
import logging
import threading
import uuid
import weakref
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from stockboard.errors import WriteError
from stockboard.inventory.record import InventoryRecord, EDITABLE_FIELDS
from stockboard.utils.io_utils import atomic_write_text

logger = logging.getLogger(__name__)

Snapshot = Tuple[InventoryRecord, ...]
Listener = Callable[[Snapshot], None]
ListenerRef = Callable[[], Optional[Callable[..., None]]]


def listener_ref(listener: Callable[..., None], weak: bool = False) -> ListenerRef:
    """
    Wrap a listener for storage in a listener list.

    Calling the result returns the listener, or None once a weakly held bound
    method's object has been garbage collected.
    """
    if weak:
        return weakref.WeakMethod(listener)  # type: ignore[arg-type]
    return lambda: listener


class Subscription:
    """Handle returned by `subscribe`; `unsubscribe()` may be called any number of times."""

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Optional[Callable[[], None]] = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()


class RecordStore:
    """
    Per-owner collections of InventoryRecords with push subscriptions.

    Every change to an owner's collection pushes the whole collection (a tuple, in
    insertion order) to that owner's listeners. Writes either fully succeed and push
    a snapshot, or raise WriteError and leave the stored state untouched.

    Locking: `_lock` guards state and listener lists and is never held while a
    listener runs. `_delivery_lock` serializes deliveries, and each delivery reads
    the state at delivery time, so listeners never see an older snapshot after a
    newer one.

    Subclasses persist the state by overriding `_persist`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._delivery_lock = threading.RLock()
        self._records: Dict[str, List[InventoryRecord]] = {}
        self._listeners: Dict[str, List[ListenerRef]] = {}

    # ---------------------------
    # Persistence hook
    # ---------------------------
    def _persist(self, state: Dict[str, List[InventoryRecord]]) -> None:
        """Persist the full state. Raise OSError/WriteError to abort the write."""

    # ---------------------------
    # Subscriptions
    # ---------------------------
    def subscribe(self, owner_id: str, listener: Listener, weak: bool = False) -> Subscription:
        """
        Register `listener` for `owner_id`; it receives the current snapshot right away.

        weak=True holds a bound method weakly: once its object is garbage collected
        the listener is dropped as if it had unsubscribed.
        """
        owner_id = str(owner_id)
        ref = listener_ref(listener, weak)
        with self._lock:
            self._listeners.setdefault(owner_id, []).append(ref)

        def _release() -> None:
            with self._lock:
                refs = self._listeners.get(owner_id, [])
                refs[:] = [r for r in refs if r is not ref]
                if not refs:
                    self._listeners.pop(owner_id, None)
            logger.debug("Unsubscribed listener from owner %s", owner_id)

        with self._delivery_lock:
            self._deliver(listener, self.list_records(owner_id))
        return Subscription(_release)

    def _live_listeners(self, owner_id: str) -> List[Listener]:
        """Resolve the owner's listeners, pruning weak ones whose object is gone."""
        with self._lock:
            refs = self._listeners.get(owner_id, [])
            live = []
            kept = []
            for ref in refs:
                listener = ref()
                if listener is None:
                    logger.debug("Dropped collected listener of owner %s", owner_id)
                    continue
                kept.append(ref)
                live.append(listener)
            if kept:
                self._listeners[owner_id] = kept
            else:
                self._listeners.pop(owner_id, None)
            return live

    def listener_count(self, owner_id: str) -> int:
        return len(self._live_listeners(str(owner_id)))

    def _snapshot(self, owner_id: str) -> Snapshot:
        return tuple(self._records.get(owner_id, []))

    def _deliver(self, listener: Listener, snapshot: Snapshot) -> None:
        try:
            listener(snapshot)
        except Exception:
            # one broken listener must not starve the others
            logger.exception("Record listener %r failed", listener)

    def _notify(self, owner_id: str) -> None:
        """Push the owner's current snapshot. Must be called without holding `_lock`."""
        with self._delivery_lock:
            for listener in self._live_listeners(owner_id):
                # re-read per listener: an earlier listener may have written
                self._deliver(listener, self.list_records(owner_id))

    # ---------------------------
    # Queries
    # ---------------------------
    def list_records(self, owner_id: str) -> Snapshot:
        with self._lock:
            return self._snapshot(str(owner_id))

    def get_record(self, owner_id: str, record_id: str) -> Optional[InventoryRecord]:
        with self._lock:
            for r in self._records.get(str(owner_id), []):
                if r.id == record_id:
                    return r
        return None

    # ---------------------------
    # Writes
    # ---------------------------
    def _commit(self, owner_id: str, new_records: List[InventoryRecord]) -> None:
        """Persist the owner's new collection, then swap it in. Caller holds `_lock`."""
        state = dict(self._records)
        state[owner_id] = new_records
        try:
            self._persist(state)
        except OSError as exc:
            logger.exception("Failed to persist records for owner %s", owner_id)
            raise WriteError("Could not save changes. Please try again.") from exc
        self._records = state

    def _index_of(self, owner_id: str, record_id: str) -> int:
        for i, r in enumerate(self._records.get(owner_id, [])):
            if r.id == record_id:
                return i
        # ids of other owners are indistinguishable from unknown ids
        raise WriteError("Record not found", record_id=record_id)

    def create(self, owner_id: str, fields: Dict[str, Any]) -> InventoryRecord:
        """Create a record for `owner_id`; the store assigns the id."""
        owner_id = str(owner_id)
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise WriteError(f"Invalid field(s): {', '.join(sorted(unknown))}")
        try:
            record = InventoryRecord(id=uuid.uuid4().hex, owner_id=owner_id, **fields)
        except ValueError as exc:
            raise WriteError(f"Rejected record data: {exc}") from exc

        with self._lock:
            self._commit(owner_id, self._records.get(owner_id, []) + [record])
        logger.info("Created record %s for owner %s", record.id, owner_id)
        self._notify(owner_id)
        return record

    def update(self, owner_id: str, record_id: str, changes: Dict[str, Any]) -> InventoryRecord:
        """Apply a partial update to one of the owner's records."""
        owner_id = str(owner_id)
        with self._lock:
            idx = self._index_of(owner_id, record_id)
            current = self._records[owner_id]
            try:
                updated = current[idx].with_changes(**changes)
            except ValueError as exc:
                raise WriteError(f"Rejected record data: {exc}", record_id=record_id) from exc
            new_records = list(current)
            new_records[idx] = updated
            self._commit(owner_id, new_records)
        logger.info("Updated record %s for owner %s (%s)", record_id, owner_id, ", ".join(sorted(changes)))
        self._notify(owner_id)
        return updated

    def delete(self, owner_id: str, record_id: str) -> None:
        owner_id = str(owner_id)
        with self._lock:
            idx = self._index_of(owner_id, record_id)
            new_records = list(self._records[owner_id])
            del new_records[idx]
            self._commit(owner_id, new_records)
        logger.info("Deleted record %s for owner %s", record_id, owner_id)
        self._notify(owner_id)


class InMemoryRecordStore(RecordStore):
    """Store without persistence. Set `fail_writes` to simulate a backend outage."""

    def __init__(self, records: Optional[Dict[str, List[InventoryRecord]]] = None) -> None:
        super().__init__()
        self.fail_writes = False
        if records:
            self._records = {str(k): list(v) for k, v in records.items()}

    def _persist(self, state: Dict[str, List[InventoryRecord]]) -> None:
        if self.fail_writes:
            raise WriteError("Record store unavailable")


class JsonRecordStore(RecordStore):
    """
    Store backed by a single JSON file: {"<owner_id>": [record, ...], ...}.
    Writes are atomic; an unreadable file is logged and treated as empty.
    """

    def __init__(self, storage_file: Union[str, Path] = "data/records.json") -> None:
        super().__init__()
        self.storage_file = Path(storage_file)
        self._load()

    def _load(self) -> None:
        if not self.storage_file.exists():
            return
        try:
            data = json.loads(self.storage_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to load records from %s. Starting empty.", self.storage_file)
            return
        if not isinstance(data, dict):
            logger.warning("Records file %s doesn't contain an object. Ignoring.", self.storage_file)
            return

        for owner_id, rows in data.items():
            records: List[InventoryRecord] = []
            for i, row in enumerate(rows or [], start=1):
                try:
                    record = InventoryRecord.from_dict(row)
                except (ValueError, TypeError, AttributeError):
                    logger.exception("Skipping bad record %s of owner %s. Row content: %s", i, owner_id, row)
                    continue
                if record.owner_id and record.owner_id != str(owner_id):
                    logger.warning("Skipping record %s filed under owner %s but owned by %s",
                                   record.id, owner_id, record.owner_id)
                    continue
                # records written before owner ids were stored inherit the collection owner
                records.append(record if record.owner_id else replace(record, owner_id=str(owner_id)))
            self._records[str(owner_id)] = records

    def _persist(self, state: Dict[str, List[InventoryRecord]]) -> None:
        data = {owner_id: [r.to_dict() for r in records] for owner_id, records in state.items()}
        atomic_write_text(self.storage_file, json.dumps(data, ensure_ascii=False, indent=2))
