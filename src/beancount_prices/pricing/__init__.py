"""Price reconciliation: rate tables, backward-fill alignment, conversion.

    PricePoint series + RateTable → align() → list[ConvertedPriceRecord]
"""

from beancount_prices.pricing.aligner import align, order_points, resolve_rate
from beancount_prices.pricing.conversion import (
    DEFAULT_PRECISION,
    crypto_amount,
    fiat_amount,
    parse_price,
    quantize_amount,
)
from beancount_prices.pricing.rates import RateTable, RateTableKind

__all__ = [
    # Rate tables
    "RateTable",
    "RateTableKind",
    # Alignment
    "align",
    "order_points",
    "resolve_rate",
    # Conversion
    "DEFAULT_PRECISION",
    "crypto_amount",
    "fiat_amount",
    "parse_price",
    "quantize_amount",
]
