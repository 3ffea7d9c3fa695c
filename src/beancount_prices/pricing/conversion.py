"""Decimal conversion of source prices into the base currency.

Two formulas, never interchangeable:

- crypto: the price is in the rate's quote currency (USD), and the rate
  says 1 base = ``rate`` USD, so ``base_amount = price / rate``.
- fiat: the commodity *is* the quote currency, so one unit of it is worth
  ``base_amount = 1 / rate``.

All arithmetic is Decimal. Floats coming from the rate source enter via
their shortest ``repr`` so 0.9 stays 0.9.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation

from beancount_prices.core.exceptions import InvalidPriceError, MalformedPriceError

DEFAULT_PRECISION = 2

# Wide enough that quantizing to 18 places never loses integer digits
_CONTEXT = Context(prec=50, rounding=ROUND_HALF_UP)


def parse_price(text: str) -> Decimal:
    """Parse decimal price text.

    Raises:
        MalformedPriceError: If the text is not a decimal number.
    """
    try:
        return Decimal(str(text).strip())
    except (InvalidOperation, ValueError) as e:
        raise MalformedPriceError(
            f"could not parse price {text!r}",
            context={"value": str(text)},
        ) from e


def _rate_to_decimal(rate: float) -> Decimal:
    try:
        value = Decimal(repr(float(rate)))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidPriceError(
            f"invalid exchange rate {rate!r}",
            context={"value": repr(rate)},
        ) from e
    if not value.is_finite() or value.is_zero():
        raise InvalidPriceError(
            f"invalid exchange rate {rate!r}",
            context={"value": repr(rate)},
        )
    return value


def quantize_amount(value: Decimal, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Round to ``precision`` decimal places (half up).

    Amounts below one keep ``precision`` significant digits instead, so a
    price of 0.0000215 is not flattened to 0.00.

    Raises:
        InvalidPriceError: If the value is NaN or infinite, or if a nonzero
            value would be written as zero.
    """
    if not value.is_finite():
        raise InvalidPriceError(f"invalid price {value}", context={"value": str(value)})
    places = precision
    if not value.is_zero():
        places = max(precision, precision - 1 - value.adjusted())
    try:
        result = value.quantize(Decimal(1).scaleb(-places), context=_CONTEXT)
    except InvalidOperation as e:
        raise InvalidPriceError(
            f"price {value} cannot be represented with {places} decimal places",
            context={"value": str(value)},
        ) from e
    if result.is_zero() and not value.is_zero():
        raise InvalidPriceError(
            f"price {value} rounds to zero with {precision} decimal places",
            context={"value": str(value)},
        )
    return result


def crypto_amount(price_text: str, rate: float, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Convert a quote-currency price into the base currency (``price / rate``)."""
    price = parse_price(price_text)
    if not price.is_finite():
        raise InvalidPriceError(f"invalid price {price_text!r}", context={"value": str(price_text)})
    return quantize_amount(_CONTEXT.divide(price, _rate_to_decimal(rate)), precision)


def fiat_amount(rate: float, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Value of one unit of the rate's symbol in the base currency (``1 / rate``)."""
    return quantize_amount(_CONTEXT.divide(Decimal(1), _rate_to_decimal(rate)), precision)
