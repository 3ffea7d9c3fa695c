"""beancount_prices.core — Foundation types, config, and exceptions."""

from beancount_prices.core.config import (
    AssetConfig,
    CoincapAssetConfig,
    CoincapConfig,
    ExchangeRatesConfig,
    FiatConfig,
    PricesConfig,
    load_config,
)
from beancount_prices.core.exceptions import (
    AssetPipelineError,
    BeancountPricesError,
    ConfigError,
    DataError,
    ExchangeRateError,
    InvalidPriceError,
    MalformedPriceError,
    OutputError,
    PriceHistoryError,
    SourceError,
)
from beancount_prices.core.models import (
    AssetId,
    AssetKind,
    AssetResult,
    ConvertedPriceRecord,
    CurrencyCode,
    PricePoint,
    RunReport,
    Ticker,
)

__all__ = [
    # Type aliases
    "AssetId",
    "CurrencyCode",
    "Ticker",
    # Enums
    "AssetKind",
    # Price models
    "PricePoint",
    "ConvertedPriceRecord",
    # Run results
    "AssetResult",
    "RunReport",
    # Config
    "PricesConfig",
    "AssetConfig",
    "CoincapAssetConfig",
    "FiatConfig",
    "CoincapConfig",
    "ExchangeRatesConfig",
    "load_config",
    # Exceptions
    "BeancountPricesError",
    "ConfigError",
    "SourceError",
    "PriceHistoryError",
    "ExchangeRateError",
    "OutputError",
    "DataError",
    "MalformedPriceError",
    "InvalidPriceError",
    "AssetPipelineError",
]
