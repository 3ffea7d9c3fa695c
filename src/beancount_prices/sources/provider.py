"""Source protocols — the interface layer between fetchers and the pipeline.

Architecture
------------
Each remote service is split in two:

    HTTP response → Adapter → PricePoint list / RateTable → Source → Pipeline

- **Adapters** turn a parsed JSON body into domain objects. They do no I/O
  and can be tested with plain dicts.
- **Sources** own the HTTP client and expose one async method the pipeline
  depends on. Tests substitute any object with the same method.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol, runtime_checkable

from beancount_prices.core.models import PricePoint
from beancount_prices.pricing.rates import RateTable


@runtime_checkable
class PriceHistoryAdapter(Protocol):
    """Transforms a price-history response body into PricePoints."""

    def adapt(self, raw_data: Any) -> list[PricePoint]: ...


@runtime_checkable
class ExchangeRateAdapter(Protocol):
    """Transforms an exchange-rate response body into a RateTable."""

    def adapt(self, raw_data: Any, symbol: str) -> RateTable: ...


@runtime_checkable
class PriceHistorySource(Protocol):
    """Daily price history for one asset, quoted in USD."""

    async def fetch_price_history(
        self, asset_id: str, start: date, end: date
    ) -> list[PricePoint]:
        """Fetch daily prices between ``start`` and ``end``.

        Returns an empty list when the service has no history for the asset.

        Raises
        ------
        PriceHistoryError
            The request failed or the body could not be parsed.
        """
        ...


@runtime_checkable
class ExchangeRateSource(Protocol):
    """Daily exchange rates between a currency and the base currency."""

    async def fetch_rate_table(
        self, first: date, last: date, symbol: str, base_currency: str
    ) -> RateTable:
        """Fetch rates for ``symbol`` against ``base_currency``.

        Returns an identity table, without any request, when ``symbol``
        equals ``base_currency``.

        Raises
        ------
        ExchangeRateError
            The request failed or the body could not be parsed.
        """
        ...
