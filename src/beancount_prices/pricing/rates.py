"""Exchange-rate tables.

A ``RateTable`` answers "what is the rate on this exact day" for one
currency pair. It is a single model tagged with its ``kind``:

- ``identity``: the source currency already is the base currency. Every
  day has rate 1.0 and nothing is fetched.
- ``conversion``: a sparse ``{date: {symbol: rate}}`` mapping from one
  exchange-rate fetch. Days without a rate (weekends, holidays, gaps)
  simply return ``None``; walking backward to an earlier day is the
  aligner's job, not the table's.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class RateTableKind(StrEnum):
    """Rate table variants."""

    IDENTITY = "identity"
    CONVERSION = "conversion"


class RateTable(BaseModel):
    """Sparse date → rate lookup for one currency pair.

    Rates follow the exchange-rate service convention:
    1 unit of base currency = ``rate`` units of ``symbol``.
    """

    model_config = ConfigDict(frozen=True)

    kind: RateTableKind
    symbol: str | None = None
    rates: dict[date, dict[str, float]] = {}

    @model_validator(mode="after")
    def symbol_required_for_conversion(self) -> RateTable:
        if self.kind == RateTableKind.CONVERSION and not self.symbol:
            raise ValueError("symbol is required for a conversion rate table")
        return self

    @classmethod
    def identity(cls) -> RateTable:
        return cls(kind=RateTableKind.IDENTITY)

    @classmethod
    def conversion(cls, symbol: str, rates: dict[date, dict[str, float]]) -> RateTable:
        return cls(kind=RateTableKind.CONVERSION, symbol=symbol, rates=rates)

    def rate_at(self, day: date) -> float | None:
        """Exact-day lookup. Returns None when the day carries no rate."""
        if self.kind == RateTableKind.IDENTITY:
            return 1.0
        day_rates = self.rates.get(day)
        if day_rates is None:
            return None
        return day_rates.get(self.symbol)

    def all(self) -> list[tuple[date, float]]:
        """Every (date, rate) for the symbol, ascending by date."""
        if self.kind == RateTableKind.IDENTITY:
            return []
        return sorted(
            (day, day_rates[self.symbol])
            for day, day_rates in self.rates.items()
            if self.symbol in day_rates
        )

    @property
    def first_date(self) -> date | None:
        """Earliest day carrying a rate for the symbol."""
        days = [day for day, day_rates in self.rates.items() if self.symbol in day_rates]
        return min(days) if days else None
