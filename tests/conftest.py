import pytest
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from stockboard.config import get_settings
from stockboard.inventory.record import InventoryRecord
from stockboard.inventory.record_store import InMemoryRecordStore
from stockboard.auth.identity import InMemoryIdentityProvider

TZ = ZoneInfo("America/Sao_Paulo")


@pytest.fixture(autouse=True)
def report_settings(monkeypatch, tmp_path):
    """Pin the settings so tests don't depend on the developer's environment or .env file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STOCKBOARD_TIMEZONE", "America/Sao_Paulo")
    monkeypatch.setenv("STOCKBOARD_CURRENCY", "BRL")
    monkeypatch.setenv("STOCKBOARD_LOCALE", "pt_BR")
    monkeypatch.setenv("STOCKBOARD_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("STOCKBOARD_REPORTS_DIR", str(tmp_path / "reports"))
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 15, 12, 0, tzinfo=TZ)


@pytest.fixture
def make_record():
    counter = {"n": 0}

    def _make(name="Item", sale=0, purchase=0, sold=0, bought=0, date=None, owner="u1"):
        counter["n"] += 1
        return InventoryRecord(
            id=f"r{counter['n']}",
            name=name,
            quantity_purchased=bought,
            purchase_price=Decimal(str(purchase)),
            sale_price=Decimal(str(sale)),
            quantity_sold=sold,
            last_sale_date=date,
            owner_id=owner,
        )

    return _make


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def identity():
    return InMemoryIdentityProvider()
