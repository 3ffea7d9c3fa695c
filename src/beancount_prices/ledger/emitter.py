"""Beancount price directive writer.

One file per asset, one line per record:

    2024-01-01 price BTC 111.11 EUR
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from beancount_prices.core.exceptions import OutputError
from beancount_prices.core.models import ConvertedPriceRecord

logger = logging.getLogger(__name__)


def render_price(record: ConvertedPriceRecord) -> str:
    """Render a record as a price directive, without the trailing newline.

    Amounts are always fixed-point; ``Decimal("1E+3")`` renders as ``1000``.
    """
    return (
        f"{record.date.isoformat()} price {record.commodity} "
        f"{format(record.amount, 'f')} {record.currency}"
    )


class PriceRecordEmitter:
    """Writes converted price records to one asset's price file.

    The file is created (or truncated) exactly once per ``emit`` call and
    closed before it returns. Missing parent directories are created.

    Parameters
    ----------
    path : str | Path
        Destination file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def emit(self, records: Iterable[ConvertedPriceRecord]) -> int:
        """Write every record in order and return how many were written.

        Ordering is checked before the file is opened, so a rejected batch
        leaves any existing file untouched.

        Raises:
            OutputError: If the file cannot be created or written, or if the
                records are not strictly ascending by date.
        """
        records = list(records)
        for previous, record in zip(records, records[1:]):
            if record.date <= previous.date:
                raise OutputError(
                    f"price for {record.date} is not after {previous.date}",
                    context={"path": str(self._path), "date": str(record.date)},
                )

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8", newline="\n") as f:
                for record in records:
                    f.write(render_price(record))
                    f.write("\n")
        except OSError as e:
            raise OutputError(
                f"could not write price file {self._path}: {e}",
                context={"path": str(self._path)},
            ) from e

        logger.info("Wrote %d price(s) to %s", len(records), self._path)
        return len(records)
