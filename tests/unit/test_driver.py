"""Tests for beancount_prices.pipeline.driver."""

from datetime import date
from pathlib import Path

import pytest

from beancount_prices.core.config import PricesConfig
from beancount_prices.core.exceptions import (
    AssetPipelineError,
    ExchangeRateError,
    MalformedPriceError,
    PriceHistoryError,
)
from beancount_prices.core.models import AssetKind, PricePoint
from beancount_prices.pipeline.driver import PipelineDriver, describe_error

TODAY = date(2024, 1, 10)


def _config(tmp_path: Path, base: str = "EUR", currencies=None, **kwargs) -> PricesConfig:
    return PricesConfig(
        start=date(2024, 1, 1),
        base_currency=base,
        currencies=currencies or [],
        **kwargs,
    )


def _btc(tmp_path: Path, **kwargs) -> dict:
    return {
        "type": "coincap",
        "ticker": "BTC",
        "id": "bitcoin",
        "path": tmp_path / "btc.beancount",
        **kwargs,
    }


def _fiat(tmp_path: Path, symbol: str = "USD", **kwargs) -> dict:
    return {
        "type": "fiat",
        "symbol": symbol,
        "path": tmp_path / f"{symbol.lower()}.beancount",
        **kwargs,
    }


class TestDescribeError:
    def test_joins_cause_chain(self):
        try:
            try:
                raise MalformedPriceError("could not parse price 'abc'")
            except MalformedPriceError as inner:
                raise AssetPipelineError("bitcoin") from inner
        except AssetPipelineError as exc:
            assert describe_error(exc) == "could not update bitcoin: could not parse price 'abc'"

    def test_empty_message_uses_type_name(self):
        assert describe_error(ValueError()) == "ValueError"


class TestCryptoFile:
    async def test_end_to_end_example(self, prices_config, fake_prices, fake_rates, tmp_path):
        driver = PipelineDriver(prices_config, fake_prices, fake_rates, today=TODAY)
        count = await driver.generate_crypto_file(prices_config.currencies[0])

        assert count == 2
        assert (tmp_path / "btc.beancount").read_text() == (
            "2024-01-01 price BTC 111.11 EUR\n"
            "2024-01-03 price BTC 113.33 EUR\n"
        )

    async def test_fetches_from_start_to_today(self, prices_config, fake_prices, fake_rates):
        driver = PipelineDriver(prices_config, fake_prices, fake_rates, today=TODAY)
        await driver.generate_crypto_file(prices_config.currencies[0])
        assert fake_prices.calls == [("bitcoin", date(2024, 1, 1), TODAY)]

    async def test_rate_window_covers_lookback(self, prices_config, fake_prices, fake_rates):
        driver = PipelineDriver(prices_config, fake_prices, fake_rates, today=TODAY)
        await driver.generate_crypto_file(prices_config.currencies[0])
        # USD per EUR, from 7 days before the first price to the last price
        assert fake_rates.calls == [(date(2023, 12, 25), date(2024, 1, 3), "USD", "EUR")]

    async def test_usd_base_needs_no_rates(self, tmp_path, fake_prices, rate_source_factory):
        config = _config(tmp_path, base="USD", currencies=[_btc(tmp_path)])
        rates = rate_source_factory()
        driver = PipelineDriver(config, fake_prices, rates, today=TODAY)

        await driver.generate_crypto_file(config.currencies[0])

        assert rates.calls == []
        assert (tmp_path / "btc.beancount").read_text() == (
            "2024-01-01 price BTC 100.00 USD\n"
            "2024-01-03 price BTC 102.00 USD\n"
        )

    async def test_empty_history_writes_empty_file(
        self, tmp_path, price_source_factory, fake_rates
    ):
        config = _config(tmp_path, currencies=[_btc(tmp_path)])
        driver = PipelineDriver(config, price_source_factory(), fake_rates, today=TODAY)

        assert await driver.generate_crypto_file(config.currencies[0]) == 0
        assert (tmp_path / "btc.beancount").read_text() == ""
        assert fake_rates.calls == []

    async def test_per_asset_precision(self, tmp_path, fake_prices, fake_rates):
        config = _config(tmp_path, currencies=[_btc(tmp_path, precision=4)])
        driver = PipelineDriver(config, fake_prices, fake_rates, today=TODAY)
        await driver.generate_crypto_file(config.currencies[0])
        assert (tmp_path / "btc.beancount").read_text().startswith(
            "2024-01-01 price BTC 111.1111 EUR\n"
        )

    async def test_dates_before_first_rate_are_dropped(
        self, tmp_path, price_source_factory, rate_source_factory
    ):
        prices = price_source_factory({
            "bitcoin": [
                PricePoint(date=date(2024, 1, 1), price="10"),
                PricePoint(date=date(2024, 1, 2), price="20"),
            ]
        })
        rates = rate_source_factory({"USD": {date(2024, 1, 2): 2.0}})
        config = _config(tmp_path, currencies=[_btc(tmp_path)])
        driver = PipelineDriver(config, prices, rates, today=TODAY)

        assert await driver.generate_crypto_file(config.currencies[0]) == 1
        assert (tmp_path / "btc.beancount").read_text() == "2024-01-02 price BTC 10.00 EUR\n"


class TestFiatFile:
    async def test_inverse_rates(self, tmp_path, fake_prices, rate_source_factory):
        rates = rate_source_factory({"USD": {date(2024, 1, 2): 0.5, date(2024, 1, 3): 1.25}})
        config = _config(tmp_path, currencies=[_fiat(tmp_path)])
        driver = PipelineDriver(config, fake_prices, rates, today=TODAY)

        assert await driver.generate_fiat_file(config.currencies[0]) == 2
        assert (tmp_path / "usd.beancount").read_text() == (
            "2024-01-02 price USD 2.00 EUR\n"
            "2024-01-03 price USD 0.80 EUR\n"
        )
        assert rates.calls == [(date(2024, 1, 1), TODAY, "USD", "EUR")]
        assert fake_prices.calls == []

    async def test_base_currency_writes_empty_file(self, tmp_path, fake_prices, fake_rates):
        config = _config(tmp_path, currencies=[_fiat(tmp_path, "EUR")])
        driver = PipelineDriver(config, fake_prices, fake_rates, today=TODAY)

        assert await driver.generate_fiat_file(config.currencies[0]) == 0
        assert (tmp_path / "eur.beancount").read_text() == ""


class TestRunAsset:
    async def test_result_for_success(self, prices_config, fake_prices, fake_rates):
        driver = PipelineDriver(prices_config, fake_prices, fake_rates, today=TODAY)
        result = await driver.run_asset(prices_config.currencies[0])
        assert result.ok
        assert result.asset_id == "bitcoin"
        assert result.kind == AssetKind.COINCAP
        assert result.records_written == 2

    async def test_malformed_price_fails_asset(
        self, tmp_path, price_source_factory, fake_rates
    ):
        prices = price_source_factory(
            {"bitcoin": [PricePoint(date=date(2024, 1, 1), price="abc")]}
        )
        config = _config(tmp_path, currencies=[_btc(tmp_path)])
        driver = PipelineDriver(config, prices, fake_rates, today=TODAY)

        with pytest.raises(AssetPipelineError) as exc_info:
            await driver.run_asset(config.currencies[0])
        assert exc_info.value.asset_id == "bitcoin"
        assert isinstance(exc_info.value.__cause__, MalformedPriceError)

    async def test_rate_failure_is_not_empty_table(
        self, prices_config, fake_prices, rate_source_factory
    ):
        rates = rate_source_factory(error=ExchangeRateError("HTTP 500"))
        driver = PipelineDriver(prices_config, fake_prices, rates, today=TODAY)

        with pytest.raises(AssetPipelineError) as exc_info:
            await driver.run_asset(prices_config.currencies[0])
        assert isinstance(exc_info.value.__cause__, ExchangeRateError)


class TestRun:
    async def test_all_assets_processed(self, prices_config, fake_prices, fake_rates, tmp_path):
        driver = PipelineDriver(prices_config, fake_prices, fake_rates, today=TODAY)
        report = await driver.run()

        assert report.ok
        assert [r.asset_id for r in report.results] == ["bitcoin", "USD"]
        assert (tmp_path / "usd.beancount").read_text() == (
            "2024-01-01 price USD 1.11 EUR\n"
        )

    async def test_fail_fast_stops_at_first_error(
        self, tmp_path, price_source_factory, fake_rates
    ):
        prices = price_source_factory(error=PriceHistoryError("HTTP 404"))
        config = _config(tmp_path, currencies=[_btc(tmp_path), _fiat(tmp_path)])
        driver = PipelineDriver(config, prices, fake_rates, today=TODAY)

        with pytest.raises(AssetPipelineError, match="could not update bitcoin"):
            await driver.run()
        assert not (tmp_path / "usd.beancount").exists()

    async def test_keep_going_collects_failures(
        self, tmp_path, price_source_factory, fake_rates
    ):
        prices = price_source_factory(error=PriceHistoryError("HTTP 404"))
        config = _config(tmp_path, currencies=[_btc(tmp_path), _fiat(tmp_path)])
        driver = PipelineDriver(config, prices, fake_rates, today=TODAY)

        report = await driver.run(continue_on_error=True)

        assert not report.ok
        assert [r.asset_id for r in report.failed] == ["bitcoin"]
        assert report.failed[0].error == "could not update bitcoin: HTTP 404"
        assert [r.asset_id for r in report.succeeded] == ["USD"]
        assert (tmp_path / "usd.beancount").exists()

    async def test_keep_going_from_config(self, tmp_path, price_source_factory, fake_rates):
        prices = price_source_factory(error=PriceHistoryError("HTTP 404"))
        config = _config(
            tmp_path, currencies=[_btc(tmp_path)], continue_on_error=True
        )
        driver = PipelineDriver(config, prices, fake_rates, today=TODAY)
        report = await driver.run()
        assert len(report.failed) == 1

    async def test_explicit_flag_overrides_config(
        self, tmp_path, price_source_factory, fake_rates
    ):
        prices = price_source_factory(error=PriceHistoryError("HTTP 404"))
        config = _config(
            tmp_path, currencies=[_btc(tmp_path)], continue_on_error=True
        )
        driver = PipelineDriver(config, prices, fake_rates, today=TODAY)
        with pytest.raises(AssetPipelineError):
            await driver.run(continue_on_error=False)

    async def test_no_assets(self, tmp_path, fake_prices, fake_rates):
        driver = PipelineDriver(_config(tmp_path), fake_prices, fake_rates, today=TODAY)
        report = await driver.run()
        assert report.results == []
        assert report.ok
