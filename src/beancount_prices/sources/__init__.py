"""Remote data sources for price and exchange-rate history.

Built-in implementations:

- ``CoincapPriceSource``: daily USD prices from CoinCap.
- ``FrankfurterRateSource``: daily exchange rates from a Frankfurter-style API.

Adding a new source:
1. Write an adapter that turns the response body into domain objects.
2. Write a source with the matching ``fetch_*`` coroutine.
"""

from beancount_prices.sources.coincap import CoincapAdapter, CoincapPriceSource
from beancount_prices.sources.exchange_rates import FrankfurterAdapter, FrankfurterRateSource
from beancount_prices.sources.provider import (
    ExchangeRateAdapter,
    ExchangeRateSource,
    PriceHistoryAdapter,
    PriceHistorySource,
)

__all__ = [
    # Protocols
    "PriceHistoryAdapter",
    "ExchangeRateAdapter",
    "PriceHistorySource",
    "ExchangeRateSource",
    # CoinCap
    "CoincapAdapter",
    "CoincapPriceSource",
    # Exchange rates
    "FrankfurterAdapter",
    "FrankfurterRateSource",
]
