"""Align a daily price series with a sparse exchange-rate table.

For each price day D the aligner looks for a rate on D, then D-1, D-2, ...
down to a floor, and converts the price with the first rate it finds. The
output record keeps the price's own date D. Days with no rate anywhere at
or above the floor are dropped without error: partial rate coverage must
not sink the whole asset.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from beancount_prices.core.models import ConvertedPriceRecord, PricePoint
from beancount_prices.pricing.conversion import DEFAULT_PRECISION, crypto_amount
from beancount_prices.pricing.rates import RateTable, RateTableKind

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


def resolve_rate(table: RateTable, day: date, floor: date | None = None) -> float | None:
    """Most recent rate on or before ``day``, searching no earlier than ``floor``.

    Without an explicit floor the search stops at the table's earliest
    rate, below which nothing can be found.
    """
    if table.kind == RateTableKind.IDENTITY:
        return 1.0

    lower = floor if floor is not None else table.first_date
    if lower is None:
        return None

    current = day
    while current >= lower:
        rate = table.rate_at(current)
        if rate is not None:
            return rate
        if current == date.min:
            break
        current -= _ONE_DAY
    return None


def order_points(points: Iterable[PricePoint]) -> list[PricePoint]:
    """Sort ascending by date; on duplicate dates the last point received wins."""
    by_date: dict[date, PricePoint] = {}
    for point in points:
        by_date[point.date] = point
    return [by_date[day] for day in sorted(by_date)]


def align(
    points: Iterable[PricePoint],
    table: RateTable,
    *,
    commodity: str,
    currency: str,
    precision: int = DEFAULT_PRECISION,
    floor: date | None = None,
) -> list[ConvertedPriceRecord]:
    """Convert a price series into base-currency records, ascending by date.

    Parameters
    ----------
    points : Iterable[PricePoint]
        Daily prices in the table's quote currency, in any order.
    table : RateTable
        Rates to the base currency.
    commodity : str
        Ledger commodity the prices belong to.
    currency : str
        Base currency written on every record.
    precision : int
        Decimal places of the converted amounts.
    floor : date | None
        Earliest day the backward rate search may reach. Defaults to the
        table's earliest rate, looked up once for the whole series.

    Returns
    -------
    list[ConvertedPriceRecord]
        One record per point that has a rate on or before its date.

    Raises
    ------
    MalformedPriceError, InvalidPriceError
        A price cannot be converted. These are never skipped.
    """
    if floor is None:
        floor = table.first_date
    records: list[ConvertedPriceRecord] = []
    skipped = 0

    for point in order_points(points):
        rate = resolve_rate(table, point.date, floor)
        if rate is None:
            skipped += 1
            logger.debug("No %s rate on or before %s, skipping", currency, point.date)
            continue

        records.append(
            ConvertedPriceRecord(
                date=point.date,
                commodity=commodity,
                amount=crypto_amount(point.price, rate, precision),
                currency=currency,
            )
        )

    if skipped:
        logger.info("%s: skipped %d day(s) without an exchange rate", commodity, skipped)
    return records
