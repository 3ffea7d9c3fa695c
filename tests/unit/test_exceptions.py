"""Tests for beancount_prices.core.exceptions."""

import pytest

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


class TestExceptionHierarchy:
    """Verify the exception class hierarchy."""

    def test_config_is_subclass(self):
        assert issubclass(ConfigError, BeancountPricesError)

    def test_source_errors(self):
        assert issubclass(PriceHistoryError, SourceError)
        assert issubclass(ExchangeRateError, SourceError)
        assert issubclass(SourceError, BeancountPricesError)

    def test_data_errors(self):
        assert issubclass(MalformedPriceError, DataError)
        assert issubclass(InvalidPriceError, DataError)
        assert issubclass(DataError, BeancountPricesError)

    def test_output_is_subclass(self):
        assert issubclass(OutputError, BeancountPricesError)

    def test_missing_rate_is_not_an_error_type(self):
        assert not issubclass(ExchangeRateError, DataError)


class TestExceptionContext:
    """Verify context dict behavior."""

    def test_context_preserved(self):
        exc = ExchangeRateError(
            "HTTP 500", context={"symbol": "USD", "base_currency": "EUR"}
        )
        assert exc.context["symbol"] == "USD"
        assert exc.context["base_currency"] == "EUR"

    def test_default_context_is_empty_dict(self):
        assert BeancountPricesError("test error").context == {}

    def test_str_returns_message(self):
        assert str(ConfigError("invalid field")) == "invalid field"

    def test_exception_can_be_caught_as_parent(self):
        with pytest.raises(SourceError):
            raise PriceHistoryError("bad body", context={"asset_id": "bitcoin"})


class TestAssetPipelineError:
    def test_default_message_names_asset(self):
        exc = AssetPipelineError("bitcoin")
        assert str(exc) == "could not update bitcoin"
        assert exc.asset_id == "bitcoin"
        assert exc.context == {"asset_id": "bitcoin"}

    def test_custom_message(self):
        assert str(AssetPipelineError("USD", "rates unavailable")) == "rates unavailable"

    def test_cause_is_kept(self):
        try:
            try:
                raise MalformedPriceError("could not parse price 'abc'")
            except MalformedPriceError as inner:
                raise AssetPipelineError("bitcoin") from inner
        except AssetPipelineError as exc:
            assert isinstance(exc.__cause__, MalformedPriceError)
