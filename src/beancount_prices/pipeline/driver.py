"""Per-asset pipeline: fetch → align → convert → write.

Assets run one after another on a single event loop. Each asset owns its
fetched series, its rate table and its output file; nothing is shared
between assets.

Failure policy
--------------
Every error raised while producing an asset's file is wrapped in
``AssetPipelineError`` carrying the asset id, with the original error as
``__cause__``. By default the first failure aborts the run. With
``continue_on_error`` every asset is attempted and the outcome of each one
is collected in a ``RunReport``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from beancount_prices.core.config import CoincapAssetConfig, FiatConfig, PricesConfig
from beancount_prices.core.exceptions import AssetPipelineError
from beancount_prices.core.models import AssetKind, AssetResult, ConvertedPriceRecord, RunReport
from beancount_prices.ledger.emitter import PriceRecordEmitter
from beancount_prices.pricing.aligner import align
from beancount_prices.pricing.conversion import fiat_amount
from beancount_prices.pricing.rates import RateTable
from beancount_prices.sources.provider import ExchangeRateSource, PriceHistorySource

logger = logging.getLogger(__name__)

# Currency the price-history source quotes in
QUOTE_CURRENCY = "USD"


def describe_error(exc: BaseException) -> str:
    """Render an exception and its ``__cause__`` chain on one line."""
    parts = []
    current: BaseException | None = exc
    while current is not None:
        parts.append(str(current) or type(current).__name__)
        current = current.__cause__
    return ": ".join(parts)


class PipelineDriver:
    """Produces one price file per configured asset.

    Parameters
    ----------
    config : PricesConfig
        Loaded configuration.
    price_source : PriceHistorySource
        Provider of USD price histories.
    rate_source : ExchangeRateSource
        Provider of exchange-rate tables.
    today : date | None
        Last day to fetch. Defaults to the current UTC date.
    """

    def __init__(
        self,
        config: PricesConfig,
        price_source: PriceHistorySource,
        rate_source: ExchangeRateSource,
        today: date | None = None,
    ) -> None:
        self._config = config
        self._prices = price_source
        self._rates = rate_source
        self._today = today or datetime.now(timezone.utc).date()

    async def generate_crypto_file(self, asset: CoincapAssetConfig) -> int:
        """Write the base-currency price file for one CoinCap asset."""
        base = self._config.base_currency
        emitter = PriceRecordEmitter(asset.path)

        points = await self._prices.fetch_price_history(
            asset.id, self._config.start, self._today
        )
        if not points:
            logger.warning("No price history for %s", asset.id)
            return emitter.emit([])

        first = min(p.date for p in points)
        last = max(p.date for p in points)

        if base == QUOTE_CURRENCY:
            table = RateTable.identity()
        else:
            lookback = timedelta(days=self._config.exchange_rates.lookback_days)
            table = await self._rates.fetch_rate_table(
                first - lookback, last, QUOTE_CURRENCY, base
            )

        records = align(
            points,
            table,
            commodity=asset.ticker,
            currency=base,
            precision=self._config.precision_for(asset),
        )
        return emitter.emit(records)

    async def generate_fiat_file(self, asset: FiatConfig) -> int:
        """Write the base-currency price file for one fiat currency."""
        base = self._config.base_currency
        table = await self._rates.fetch_rate_table(
            self._config.start, self._today, asset.symbol, base
        )
        if asset.symbol == base:
            logger.info("%s is the base currency, writing an empty price file", asset.symbol)

        precision = self._config.precision_for(asset)
        records = [
            ConvertedPriceRecord(
                date=day,
                commodity=asset.symbol,
                amount=fiat_amount(rate, precision),
                currency=base,
            )
            for day, rate in table.all()
        ]
        return PriceRecordEmitter(asset.path).emit(records)

    async def run_asset(self, asset: CoincapAssetConfig | FiatConfig) -> AssetResult:
        """Run one asset, wrapping any failure with the asset's id.

        Raises:
            AssetPipelineError: If anything fails for this asset.
        """
        logger.info("Updating %s (%s) -> %s", asset.asset_id, asset.type, asset.path)
        try:
            if asset.type == AssetKind.COINCAP:
                count = await self.generate_crypto_file(asset)
            elif asset.type == AssetKind.FIAT:
                count = await self.generate_fiat_file(asset)
            else:
                raise ValueError(f"Unknown asset type: {asset.type}")
        except Exception as e:
            raise AssetPipelineError(asset.asset_id) from e

        return AssetResult(
            asset_id=asset.asset_id,
            kind=AssetKind(asset.type),
            path=str(asset.path),
            records_written=count,
        )

    async def run(self, continue_on_error: bool | None = None) -> RunReport:
        """Process every configured asset in order.

        Parameters
        ----------
        continue_on_error : bool | None
            Overrides ``config.continue_on_error`` when given.

        Raises
        ------
        AssetPipelineError
            On the first failing asset, unless continuing on error.
        """
        keep_going = (
            self._config.continue_on_error if continue_on_error is None else continue_on_error
        )
        results: list[AssetResult] = []

        for asset in self._config.currencies:
            try:
                results.append(await self.run_asset(asset))
            except AssetPipelineError as e:
                if not keep_going:
                    raise
                logger.error("%s", describe_error(e))
                results.append(
                    AssetResult(
                        asset_id=asset.asset_id,
                        kind=AssetKind(asset.type),
                        path=str(asset.path),
                        error=describe_error(e),
                    )
                )

        report = RunReport(results=results)
        logger.info(
            "Run finished: %d succeeded, %d failed, %d price(s) written",
            len(report.succeeded), len(report.failed), report.records_written,
        )
        return report
