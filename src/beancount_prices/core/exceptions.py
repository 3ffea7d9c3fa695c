"""Custom exception hierarchy for beancount-prices."""

from typing import Any


class BeancountPricesError(Exception):
    """Base exception for all beancount-prices errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(BeancountPricesError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Fatal before any asset runs.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value
    """


class SourceError(BeancountPricesError):
    """A remote data source could not be fetched or parsed.

    Fatal to the current asset.

    Context keys:
        url: str — the URL that was being fetched
        status_code: int | None — HTTP status code if applicable
    """


class PriceHistoryError(SourceError):
    """The price-history request failed or returned an unusable body."""


class ExchangeRateError(SourceError):
    """The exchange-rate request failed or returned an unusable body.

    Never replaced by an empty rate table.

    Context keys:
        symbol: str — the currency being converted
        base_currency: str — the target currency
    """


class OutputError(BeancountPricesError):
    """The price file could not be created or written.

    Context keys:
        path: str — the destination file
    """


class DataError(BeancountPricesError):
    """A fetched value cannot be turned into a price.

    Fatal to the current asset. Distinct from a missing exchange rate,
    which skips the date silently.
    """


class MalformedPriceError(DataError):
    """Price text is not a decimal number.

    Context keys:
        value: str — the offending text
    """


class InvalidPriceError(DataError):
    """Converted amount is not a finite decimal (NaN, infinity, zero rate).

    Context keys:
        value: str — the offending amount or rate
    """


class AssetPipelineError(BeancountPricesError):
    """Any failure while producing one asset's price file.

    The original error is available as ``__cause__``.

    Context keys:
        asset_id: str — coincap id or fiat symbol
    """

    def __init__(self, asset_id: str, message: str | None = None):
        super().__init__(
            message or f"could not update {asset_id}",
            context={"asset_id": asset_id},
        )
        self.asset_id = asset_id
