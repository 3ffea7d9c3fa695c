"""Ledger output: beancount price directive files."""

from beancount_prices.ledger.emitter import PriceRecordEmitter, render_price

__all__ = [
    "PriceRecordEmitter",
    "render_price",
]
