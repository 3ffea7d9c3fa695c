"""Integration test fixtures: real config files and HTTP stack, mocked network."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

COINCAP_URL = "https://coincap.test/v2"
RATES_URL = "https://rates.test"

# 2024-01-01T00:00:00Z and 2024-01-03T00:00:00Z
JAN_1_MS = 1704067200000
JAN_3_MS = 1704240000000


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("BEANCOUNT_PRICES_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a config file pointing both sources at the mocked hosts."""

    def _write(base_currency: str = "EUR", currencies: str = "", extra: str = "") -> Path:
        path = tmp_path / "beancount-prices.yml"
        path.write_text(
            "start: 2024-01-01\n"
            f"base_currency: {base_currency}\n"
            "coincap:\n"
            f"  base_url: {COINCAP_URL}\n"
            "exchange_rates:\n"
            f"  base_url: {RATES_URL}\n"
            f"{extra}"
            f"currencies:\n{currencies}"
        )
        return path

    return _write


@pytest.fixture
def btc_history() -> dict:
    return {
        "data": [
            {"priceUsd": "102.0", "time": JAN_3_MS},
            {"priceUsd": "100.0", "time": JAN_1_MS},
        ]
    }


@pytest.fixture
def eur_usd_rates() -> dict:
    """1 EUR = 0.9 USD, published on 2024-01-01 only."""
    return {"base": "EUR", "rates": {"2024-01-01": {"USD": 0.9}}}
