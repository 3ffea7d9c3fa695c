"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from beancount_prices.core.exceptions import ConfigError
from beancount_prices.core.models import COMMODITY_PATTERN, CURRENCY_CODE_PATTERN

DEFAULT_CONFIG_FILE = "beancount-prices.yml"
ENV_PREFIX = "BEANCOUNT_PRICES_"


def _currency_code(v: str) -> str:
    code = v.strip().upper()
    if not CURRENCY_CODE_PATTERN.match(code):
        raise ValueError(f"currency must be a 3-letter code, got {v!r}")
    return code


def _precision_in_range(v: int | None) -> int | None:
    if v is not None and not 0 <= v <= 18:
        raise ValueError("precision must be between 0 and 18")
    return v


class CoincapConfig(BaseModel):
    """CoinCap price-history API access."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.coincap.io/v2"
    api_key: str | None = None
    request_timeout: int = 30

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("request_timeout must be >= 1")
        return v


class ExchangeRatesConfig(BaseModel):
    """Exchange-rate history API access."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.frankfurter.app"
    request_timeout: int = 30
    lookback_days: int = 7

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("request_timeout must be >= 1")
        return v

    @field_validator("lookback_days")
    @classmethod
    def lookback_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("lookback_days must be >= 0")
        return v


class CoincapAssetConfig(BaseModel):
    """A cryptocurrency priced in USD by CoinCap."""

    model_config = ConfigDict(frozen=True)

    type: Literal["coincap"] = "coincap"
    ticker: str
    id: str
    path: Path
    precision: int | None = None

    @field_validator("ticker")
    @classmethod
    def ticker_is_commodity(cls, v: str) -> str:
        if not COMMODITY_PATTERN.match(v):
            raise ValueError(f"ticker {v!r} is not a valid beancount commodity")
        return v

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("id must not be empty")
        return v.strip()

    @field_validator("precision")
    @classmethod
    def precision_in_range(cls, v: int | None) -> int | None:
        return _precision_in_range(v)

    @property
    def asset_id(self) -> str:
        return self.id

    @property
    def commodity(self) -> str:
        return self.ticker


class FiatConfig(BaseModel):
    """A fiat currency priced through the exchange-rate source."""

    model_config = ConfigDict(frozen=True)

    type: Literal["fiat"] = "fiat"
    symbol: str
    path: Path
    precision: int | None = None

    @field_validator("symbol")
    @classmethod
    def symbol_is_currency_code(cls, v: str) -> str:
        return _currency_code(v)

    @field_validator("precision")
    @classmethod
    def precision_in_range(cls, v: int | None) -> int | None:
        return _precision_in_range(v)

    @property
    def asset_id(self) -> str:
        return self.symbol

    @property
    def commodity(self) -> str:
        return self.symbol


AssetConfig = Annotated[CoincapAssetConfig | FiatConfig, Field(discriminator="type")]


class PricesConfig(BaseModel):
    """Root configuration for a beancount-prices run."""

    model_config = ConfigDict(frozen=True)

    start: date
    base_currency: str
    precision: int = 2
    continue_on_error: bool = False
    coincap: CoincapConfig = CoincapConfig()
    exchange_rates: ExchangeRatesConfig = ExchangeRatesConfig()
    currencies: list[AssetConfig] = []

    @field_validator("base_currency")
    @classmethod
    def base_is_currency_code(cls, v: str) -> str:
        return _currency_code(v)

    @field_validator("precision")
    @classmethod
    def precision_in_range(cls, v: int) -> int:
        return _precision_in_range(v)

    @model_validator(mode="before")
    @classmethod
    def normalize_asset_tags(cls, data: Any) -> Any:
        """Accept ``Coincap``/``FIAT`` style tags as well as lowercase."""
        if isinstance(data, dict) and isinstance(data.get("currencies"), list):
            currencies = []
            for entry in data["currencies"]:
                if isinstance(entry, dict) and isinstance(entry.get("type"), str):
                    entry = {**entry, "type": entry["type"].lower()}
                currencies.append(entry)
            data = {**data, "currencies": currencies}
        return data

    @model_validator(mode="after")
    def paths_unique(self) -> PricesConfig:
        seen: set[Path] = set()
        for asset in self.currencies:
            if asset.path in seen:
                raise ValueError(f"output path {str(asset.path)!r} is used by more than one asset")
            seen.add(asset.path)
        return self

    def precision_for(self, asset: CoincapAssetConfig | FiatConfig) -> int:
        """Per-asset precision override, else the global default."""
        return asset.precision if asset.precision is not None else self.precision


def load_config(
    config_path: str | None = None,
    env_prefix: str = ENV_PREFIX,
) -> PricesConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (BEANCOUNT_PRICES_BASE_CURRENCY, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        BEANCOUNT_PRICES_COINCAP__API_KEY=abc  ->  coincap.api_key = "abc"
    """
    try:
        yaml_path = _resolve_config_path(config_path, env_prefix)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return PricesConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None, env_prefix: str = ENV_PREFIX) -> Path | None:
    """Pick the config file: ``--config``, then ``{prefix}CONFIG``, then the cwd default.

    A path that was asked for explicitly must exist; the cwd default is
    optional.
    """
    env_var = f"{env_prefix}CONFIG"
    requested = [("config_path", explicit), (env_var, os.environ.get(env_var))]
    for field, value in requested:
        if not value:
            continue
        if not Path(value).is_file():
            raise ConfigError(
                f"Config file not found: {value} (from {field})",
                context={"field": field, "value": value},
            )
        return Path(value)

    default = Path(DEFAULT_CONFIG_FILE)
    return default if default.is_file() else None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(
            f"Could not open config file: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"YAML config must be a mapping, got {type(data).__name__}",
            context={"field": "config_file", "value": str(path)},
        )
    return data


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay ``{prefix}SECTION__KEY=value`` variables onto the YAML dict.

    Values stay strings; the models' lax validation turns ``"30"``,
    ``"true"`` or ``"2024-01-01"`` into the field's type, and an API key of
    digits stays a string. ``currencies`` can only come from the YAML file.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        *sections, name = key[len(prefix) :].lower().split("__")
        if not sections and name == "config":
            continue
        if (sections[0] if sections else name) == "currencies":
            continue

        target = result
        for section in sections:
            nested = target.get(section)
            target[section] = dict(nested) if isinstance(nested, dict) else {}
            target = target[section]
        target[name] = value

    return result
