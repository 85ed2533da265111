from pathlib import Path

import pytest
from pydantic import ValidationError as SettingsError

from stockboard.config import Settings, get_settings


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("STOCKBOARD_CURRENCY", "usd")
    monkeypatch.setenv("STOCKBOARD_LOCALE", "en_US")
    monkeypatch.setenv("STOCKBOARD_DATA_DIR", str(tmp_path / "store"))
    get_settings.cache_clear()

    settings = get_settings()
    assert settings.currency == "USD"
    assert settings.locale == "en_US"
    assert settings.records_file == tmp_path / "store" / "records.json"
    assert settings.accounts_file == tmp_path / "store" / "accounts.json"


def test_settings_are_cached():
    assert get_settings() is get_settings()


def test_defaults(monkeypatch):
    for name in ("TIMEZONE", "CURRENCY", "LOCALE", "DATA_DIR", "REPORTS_DIR"):
        monkeypatch.delenv(f"STOCKBOARD_{name}", raising=False)
    settings = Settings()
    assert settings.timezone == "America/Sao_Paulo"
    assert settings.currency == "BRL"
    assert settings.locale == "pt_BR"
    assert settings.data_dir == Path("data")


def test_unknown_timezone_is_rejected(monkeypatch):
    monkeypatch.setenv("STOCKBOARD_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(SettingsError):
        Settings()
