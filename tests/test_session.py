import gc
import threading
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from stockboard.auth.identity import InMemoryIdentityProvider
from stockboard.errors import AuthError
from stockboard.main.session import DashboardSession
from stockboard.reports.period import Period

TZ = ZoneInfo("America/Sao_Paulo")


@pytest.fixture
def session(identity, store, fixed_now):
    s = DashboardSession(identity, store, now_fn=lambda: fixed_now)
    yield s
    s.close()


def test_signed_out_session_has_no_subscription(session, store):
    assert session.owner is None
    assert not session.is_subscribed
    assert session.records == ()
    with pytest.raises(AuthError) as exc:
        session.records_manager()
    assert exc.value.code == AuthError.NOT_SIGNED_IN


def test_sign_in_subscribes_and_sign_out_releases(session, identity, store):
    owner = identity.sign_up("ana@example.com", "secret1")
    assert session.owner == owner
    assert session.is_subscribed
    assert store.listener_count(owner.uid) == 1

    identity.sign_out()
    assert session.owner is None
    assert not session.is_subscribed
    assert store.listener_count(owner.uid) == 0
    assert session.records == ()


def test_switching_owner_releases_previous_subscription(session, identity, store):
    first = identity.sign_up("ana@example.com", "secret1")
    store.create(first.uid, {"name": "Ana's milk"})
    second = identity.sign_up("bia@example.com", "secret2")

    assert store.listener_count(first.uid) == 0
    assert store.listener_count(second.uid) == 1
    assert session.records == ()


def test_writes_refresh_the_view(session, identity, fixed_now):
    identity.sign_up("ana@example.com", "secret1")
    manager = session.records_manager()

    milk = manager.add_record("Milk", quantity_purchased=5, purchase_price=4, sale_price=10, quantity_sold=3)
    manager.add_record("Soap", quantity_purchased=2, purchase_price=15, sale_price=20,
                       last_sale_date=datetime(2024, 1, 5, tzinfo=TZ))

    assert len(session.records) == 2
    view = session.view(Period.today())
    assert [r.name for r in view.filtered] == ["Milk"]
    assert view.summary.total_revenue == Decimal("30")
    assert view.summary.total_inventory_cost == Decimal("50")
    assert view.profit_ranking == [(milk, Decimal("18"))]

    manager.update_record(milk.id, quantity_sold=4)
    assert session.view(Period.today()).summary.total_revenue == Decimal("40")


def test_view_defaults_to_all_time(session, identity):
    identity.sign_up("ana@example.com", "secret1")
    session.records_manager().add_record("Milk")
    view = session.view()
    assert view.period == Period.all()
    assert view.filtered == view.records
    assert len(view.summary.unsold_records) == 1


def test_close_releases_everything(identity, store):
    session = DashboardSession(identity, store)
    owner = identity.sign_up("ana@example.com", "secret1")
    session.close()
    session.close()

    assert store.listener_count(owner.uid) == 0
    assert session.owner is None
    identity.sign_out()
    identity.sign_in("ana@example.com", "secret1")
    assert session.owner is None


def test_sign_out_while_a_write_is_being_delivered(session, identity, store):
    owner = identity.sign_up("ana@example.com", "secret1")
    manager = session.records_manager()
    delivering = threading.Event()
    release = threading.Event()

    def slow_listener(snapshot):
        if snapshot:
            delivering.set()
            release.wait(5)

    store.subscribe(owner.uid, slow_listener)
    writer = threading.Thread(target=manager.add_record, args=("Milk",))
    writer.start()
    assert delivering.wait(5)

    signer = threading.Thread(target=identity.sign_out)
    signer.start()
    signer.join(3)
    finished_while_writing = not signer.is_alive()
    release.set()
    writer.join(3)

    assert finished_while_writing
    assert not writer.is_alive()
    assert session.owner is None
    assert store.listener_count(owner.uid) == 1  # only slow_listener remains


def test_dropped_session_releases_its_subscriptions(store):
    identity = InMemoryIdentityProvider()
    session = DashboardSession(identity, store)
    owner = identity.sign_up("ana@example.com", "secret1")
    assert store.listener_count(owner.uid) == 1

    del session
    gc.collect()

    assert store.listener_count(owner.uid) == 0
    store.create(owner.uid, {"name": "Milk"})
    identity.sign_out()
