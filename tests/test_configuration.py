"""Mini README: Tests for environment driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from envelopes.configuration import EnvelopesSettings, get_settings
from envelopes.formatting import CurrencyISOCode


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """ENVELOPES_* variables select the data directory and display formats."""

    data_directory = tmp_path / "budgets"
    monkeypatch.setenv("ENVELOPES_DATA_DIRECTORY", str(data_directory))
    monkeypatch.setenv("ENVELOPES_CURRENCY_CODE", "EUR")
    monkeypatch.setenv("ENVELOPES_DATE_FORMAT", "DD.MM.YYYY")
    monkeypatch.setenv("ENVELOPES_SNAPSHOT_NAME", "home.json")

    settings = get_settings()
    assert settings.data_directory == data_directory.resolve()
    assert data_directory.is_dir()
    assert settings.currency_code is CurrencyISOCode.EUR
    assert settings.snapshot_path == data_directory.resolve() / "home.json"
    assert settings.budget_settings().format_amount(1500) == "1,50 €"
    assert get_settings() is settings


def test_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ENVELOPES_DATA_DIRECTORY", str(tmp_path))
    settings = EnvelopesSettings()
    assert settings.default_budget_name == "My Budget"
    assert settings.snapshot_path.name == "budget.json"
    assert settings.interface_port == 8000


def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ENVELOPES_DATA_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("ENVELOPES_INTERFACE_PORT", "70000")
    with pytest.raises(ValidationError):
        EnvelopesSettings()

    monkeypatch.setenv("ENVELOPES_INTERFACE_PORT", "8080")
    monkeypatch.setenv("ENVELOPES_DATE_FORMAT", "YY/MM")
    with pytest.raises(ValidationError):
        EnvelopesSettings()
