"""Pipeline orchestration across configured assets."""

from beancount_prices.pipeline.driver import QUOTE_CURRENCY, PipelineDriver, describe_error

__all__ = [
    "PipelineDriver",
    "QUOTE_CURRENCY",
    "describe_error",
]
