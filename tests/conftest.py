"""Shared pytest fixtures for beancount-prices."""

from datetime import date
from pathlib import Path

import pytest

from beancount_prices.core.config import PricesConfig
from beancount_prices.core.models import PricePoint
from beancount_prices.pricing.rates import RateTable


class FakePriceSource:
    """In-memory PriceHistorySource recording every call."""

    def __init__(self, histories: dict[str, list[PricePoint]] | None = None, error=None):
        self.histories = histories or {}
        self.error = error
        self.calls: list[tuple[str, date, date]] = []

    async def fetch_price_history(self, asset_id, start, end):
        self.calls.append((asset_id, start, end))
        if self.error is not None:
            raise self.error
        return list(self.histories.get(asset_id, []))


class FakeRateSource:
    """In-memory ExchangeRateSource keyed by symbol."""

    def __init__(self, rates: dict[str, dict[date, float]] | None = None, error=None):
        self.rates = rates or {}
        self.error = error
        self.calls: list[tuple[date, date, str, str]] = []

    async def fetch_rate_table(self, first, last, symbol, base_currency):
        if symbol == base_currency:
            return RateTable.identity()
        self.calls.append((first, last, symbol, base_currency))
        if self.error is not None:
            raise self.error
        return RateTable.conversion(
            symbol,
            {day: {symbol: rate} for day, rate in self.rates.get(symbol, {}).items()},
        )


@pytest.fixture
def btc_points() -> list[PricePoint]:
    return [
        PricePoint(date=date(2024, 1, 1), price="100.0"),
        PricePoint(date=date(2024, 1, 3), price="102.0"),
    ]


@pytest.fixture
def usd_rates() -> RateTable:
    """1 EUR = 0.9 USD on 2024-01-01 only."""
    return RateTable.conversion("USD", {date(2024, 1, 1): {"USD": 0.9}})


@pytest.fixture
def prices_config(tmp_path: Path) -> PricesConfig:
    return PricesConfig(
        start=date(2024, 1, 1),
        base_currency="EUR",
        currencies=[
            {"type": "coincap", "ticker": "BTC", "id": "bitcoin", "path": tmp_path / "btc.beancount"},
            {"type": "fiat", "symbol": "USD", "path": tmp_path / "usd.beancount"},
        ],
    )


@pytest.fixture
def fake_prices(btc_points) -> FakePriceSource:
    return FakePriceSource({"bitcoin": btc_points})


@pytest.fixture
def fake_rates() -> FakeRateSource:
    return FakeRateSource({"USD": {date(2024, 1, 1): 0.9}})


@pytest.fixture
def price_source_factory():
    return FakePriceSource


@pytest.fixture
def rate_source_factory():
    return FakeRateSource
