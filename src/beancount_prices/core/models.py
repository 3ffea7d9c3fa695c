"""Pydantic data models — the system's type contracts."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# --- Type Aliases ---

Ticker = str
CurrencyCode = str
AssetId = str

# Beancount commodity syntax: capitals, digits and ' . _ - inside, max 24 chars
COMMODITY_PATTERN = re.compile(r"^[A-Z][A-Z0-9'._-]{0,22}[A-Z0-9]$|^[A-Z]$")
CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")

# --- Enumerations ---


class AssetKind(StrEnum):
    """Configured asset kinds, used as the ``type`` tag in config."""

    COINCAP = "coincap"
    FIAT = "fiat"


# --- Price Models ---


class PricePoint(BaseModel):
    """One daily price as returned by a price-history source.

    ``price`` is kept as the decimal text the source sent; it is parsed
    during conversion so a malformed value fails the asset, not the fetch.
    """

    model_config = ConfigDict(frozen=True)

    date: date
    price: str


class ConvertedPriceRecord(BaseModel):
    """A price expressed in the base currency, ready to be written."""

    model_config = ConfigDict(frozen=True)

    date: date
    commodity: Ticker
    amount: Decimal
    currency: CurrencyCode

    @field_validator("commodity", "currency")
    @classmethod
    def valid_commodity(cls, v: str) -> str:
        if not COMMODITY_PATTERN.match(v):
            raise ValueError(f"Invalid commodity name: {v!r}")
        return v


# --- Run Results ---


class AssetResult(BaseModel):
    """Outcome of one asset's pipeline."""

    model_config = ConfigDict(frozen=True)

    asset_id: AssetId
    kind: AssetKind
    path: str
    records_written: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RunReport(BaseModel):
    """Aggregate of every asset processed in one run."""

    model_config = ConfigDict(frozen=True)

    results: list[AssetResult] = []

    @property
    def succeeded(self) -> list[AssetResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[AssetResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def records_written(self) -> int:
        return sum(r.records_written for r in self.results)
