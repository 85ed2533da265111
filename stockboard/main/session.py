# stockboard/main/session.py
from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from stockboard.auth.identity import IdentityProvider, Owner
from stockboard.errors import AuthError
from stockboard.inventory.record import InventoryRecord
from stockboard.inventory.record_manager import RecordManager
from stockboard.inventory.record_store import RecordStore, Snapshot, Subscription
from stockboard.reports.period import Period, select_by_period
from stockboard.reports.summary import FinancialSummary, compute_summary, rank_by_profit, revenue_cost_rows
from stockboard.utils.time_zone import get_report_tz

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardView:
    """Everything a page renders for one period, computed from one snapshot."""
    period: Period
    records: Tuple[InventoryRecord, ...]
    filtered: Tuple[InventoryRecord, ...]
    summary: FinancialSummary
    profit_ranking: List[Tuple[InventoryRecord, Decimal]] = field(default_factory=list)
    revenue_cost: List[Dict[str, Any]] = field(default_factory=list)


class _SnapshotSink:
    """
    Receives one owner's snapshots for a session.

    The store holds `deliver` weakly and the session holds the sink, so the
    subscription goes away with the session even if `close()` is never called.
    """

    def __init__(self, session: "DashboardSession") -> None:
        self._session = weakref.ref(session)

    def deliver(self, snapshot: Snapshot) -> None:
        session = self._session()
        if session is not None:
            session._accept(self, snapshot)


class DashboardSession:
    """
    Binds the signed-in owner to their record subscription.

    - sign-in: subscribe to the owner's records
    - owner change / sign-out / close(): release that subscription first
    - every pushed snapshot replaces the previous one; views are recomputed on demand

    The session lock only guards its own fields; store and identity calls are made
    without it. Both subscriptions are held weakly, so a session dropped without
    `close()` (e.g. an expired browser session) stops receiving pushes.
    """

    def __init__(self, identity: IdentityProvider, store: RecordStore,
                 now_fn: Optional[Callable[[], datetime]] = None) -> None:
        self.identity = identity
        self.store = store
        self._now = now_fn or (lambda: datetime.now(get_report_tz()))
        self._lock = threading.RLock()
        self._owner: Optional[Owner] = None
        self._sink: Optional[_SnapshotSink] = None
        self._records_sub: Optional[Subscription] = None
        self._snapshot: Snapshot = ()
        self._closed = False
        self._identity_sub: Optional[Subscription] = identity.subscribe(self._on_owner, weak=True)

    # ---------------------------
    # Subscriptions
    # ---------------------------
    def _on_owner(self, owner: Optional[Owner]) -> None:
        with self._lock:
            if self._closed or (owner == self._owner and (owner is None or self._sink is not None)):
                return
            previous, old_sub = self._owner, self._records_sub
            self._owner = owner
            self._snapshot = ()
            self._records_sub = None
            sink = _SnapshotSink(self) if owner is not None else None
            self._sink = sink

        if old_sub is not None:
            old_sub.unsubscribe()
            logger.info("Released record subscription of owner %s", previous.uid if previous else None)
        if owner is None or sink is None:
            return

        logger.info("Subscribing to records of owner %s", owner.uid)
        sub = self.store.subscribe(owner.uid, sink.deliver, weak=True)
        with self._lock:
            current = sink is self._sink
            if current:
                self._records_sub = sub
        if not current:
            # the owner changed again while subscribing
            sub.unsubscribe()

    def _accept(self, sink: _SnapshotSink, snapshot: Snapshot) -> None:
        with self._lock:
            if sink is not self._sink:
                return
            self._snapshot = tuple(snapshot)
        logger.debug("Received snapshot with %s records", len(snapshot))

    def close(self) -> None:
        """Tear down the record and identity subscriptions."""
        with self._lock:
            self._closed = True
            subs = [self._records_sub, self._identity_sub]
            self._records_sub = self._identity_sub = None
            self._sink = None
            self._owner = None
            self._snapshot = ()
        for sub in subs:
            if sub is not None:
                sub.unsubscribe()

    # ---------------------------
    # Accessors
    # ---------------------------
    @property
    def owner(self) -> Optional[Owner]:
        return self._owner

    @property
    def is_subscribed(self) -> bool:
        sub = self._records_sub
        return sub is not None and sub.active

    @property
    def records(self) -> Snapshot:
        return self._snapshot

    def require_owner(self) -> Owner:
        if self._owner is None:
            raise AuthError(AuthError.NOT_SIGNED_IN)
        return self._owner

    def records_manager(self) -> RecordManager:
        """RecordManager scoped to the signed-in owner."""
        return RecordManager(self.store, self.require_owner().uid, now_fn=self._now)

    def view(self, period: Optional[Period] = None) -> DashboardView:
        """Filter the latest snapshot by `period` and aggregate it."""
        period = period or Period.all()
        records = self._snapshot
        filtered = tuple(select_by_period(records, period, now=self._now()))
        return DashboardView(
            period=period,
            records=records,
            filtered=filtered,
            summary=compute_summary(filtered, all_records=records),
            profit_ranking=rank_by_profit(filtered),
            revenue_cost=revenue_cost_rows(filtered),
        )
