"""Exchange-rate history source (Frankfurter-compatible API).

Time series endpoint ``/{first}..{last}?from={base}&to={symbol}`` returns
rates for business days only:

    {"base": "EUR", "rates": {"2024-01-02": {"USD": 1.0956}, ...}}

meaning 1 EUR = 1.0956 USD on 2024-01-02.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from beancount_prices.core.config import ExchangeRatesConfig
from beancount_prices.core.exceptions import ExchangeRateError
from beancount_prices.pricing.rates import RateTable
from beancount_prices.sources.http import build_client, get_json

logger = logging.getLogger(__name__)


class FrankfurterAdapter:
    """Transforms a time series response into a conversion RateTable."""

    def adapt(self, raw_data: Any, symbol: str) -> RateTable:
        """Parse the ``rates`` mapping.

        Days are kept sparse; a day without ``symbol`` is simply absent
        from lookups.

        Raises:
            ExchangeRateError: If the body has the wrong shape.
        """
        if not isinstance(raw_data, dict) or not isinstance(raw_data.get("rates"), dict):
            raise ExchangeRateError(
                "exchange-rate response has no 'rates' mapping",
                context={"symbol": symbol},
            )

        rates: dict[date, dict[str, float]] = {}
        for day_str, day_rates in raw_data["rates"].items():
            try:
                day = date.fromisoformat(day_str)
                rates[day] = {str(k): float(v) for k, v in day_rates.items()}
            except (TypeError, ValueError, AttributeError) as e:
                raise ExchangeRateError(
                    f"malformed rates for {day_str!r}: {day_rates!r}",
                    context={"symbol": symbol, "date": str(day_str)},
                ) from e
        return RateTable.conversion(symbol, rates)


class FrankfurterRateSource:
    """Fetches historical exchange rates.

    Use via ``async with FrankfurterRateSource(config) as source:``.

    Parameters
    ----------
    config : ExchangeRatesConfig
        Base URL and timeout.
    adapter : FrankfurterAdapter | None
        Custom adapter instance. Uses default if None.
    """

    def __init__(
        self, config: ExchangeRatesConfig, adapter: FrankfurterAdapter | None = None
    ) -> None:
        self._config = config
        self._adapter = adapter or FrankfurterAdapter()
        self._client = build_client(config.request_timeout)

    async def __aenter__(self) -> FrankfurterRateSource:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client. Called automatically by __aexit__."""
        await self._client.aclose()

    async def fetch_rate_table(
        self, first: date, last: date, symbol: str, base_currency: str
    ) -> RateTable:
        """Rates for ``symbol`` expressed per unit of ``base_currency``.

        No request is made when the two currencies are the same.
        """
        if symbol == base_currency:
            return RateTable.identity()

        url = f"{self._config.base_url.rstrip('/')}/{first.isoformat()}..{last.isoformat()}"
        params = {"from": base_currency, "to": symbol}
        raw = await get_json(
            self._client,
            url,
            ExchangeRateError,
            params=params,
            context={"symbol": symbol, "base_currency": base_currency},
        )
        table = self._adapter.adapt(raw, symbol)
        logger.info(
            "Fetched %d %s/%s rate(s) for %s..%s",
            len(table.all()), base_currency, symbol, first, last,
        )
        return table
