"""CoinCap price-history source.

Uses the ``/assets/{id}/history`` endpoint with daily interval. Prices come
back as USD decimal strings with millisecond UTC timestamps:

    {"data": [{"priceUsd": "42000.12", "time": 1704067200000}, ...]}
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any

from beancount_prices.core.config import CoincapConfig
from beancount_prices.core.exceptions import PriceHistoryError
from beancount_prices.core.models import PricePoint
from beancount_prices.sources.http import build_client, get_json

logger = logging.getLogger(__name__)

_HISTORY_PATH = "/assets/{id}/history"
_INTERVAL = "d1"


def _to_millis(day: date, at: time = time.min) -> int:
    return int(datetime.combine(day, at, tzinfo=timezone.utc).timestamp() * 1000)


class CoincapAdapter:
    """Transforms a CoinCap history response into PricePoints.

    Points keep the order the service sent them in; ordering is the
    aligner's responsibility.
    """

    def adapt(self, raw_data: Any) -> list[PricePoint]:
        """Parse a history body.

        A missing or null ``data`` field means the asset has no history.

        Raises:
            PriceHistoryError: If the body or an entry has the wrong shape.
        """
        if not isinstance(raw_data, dict):
            raise PriceHistoryError(
                f"history response must be an object, got {type(raw_data).__name__}"
            )
        entries = raw_data.get("data")
        if entries is None:
            return []
        if not isinstance(entries, list):
            raise PriceHistoryError("history 'data' must be a list")

        points: list[PricePoint] = []
        for entry in entries:
            try:
                price = entry["priceUsd"]
                day = datetime.fromtimestamp(int(entry["time"]) / 1000, tz=timezone.utc).date()
            except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
                raise PriceHistoryError(
                    f"malformed history entry: {entry!r}",
                    context={"entry": repr(entry)[:200]},
                ) from e
            if price is None:
                raise PriceHistoryError(
                    f"history entry without price: {entry!r}",
                    context={"entry": repr(entry)[:200]},
                )
            points.append(PricePoint(date=day, price=str(price)))
        return points


class CoincapPriceSource:
    """Fetches daily USD price history from CoinCap.

    Use via ``async with CoincapPriceSource(config) as source:``.

    Parameters
    ----------
    config : CoincapConfig
        Base URL, optional API key and timeout.
    adapter : CoincapAdapter | None
        Custom adapter instance. Uses default if None.
    """

    def __init__(self, config: CoincapConfig, adapter: CoincapAdapter | None = None) -> None:
        self._config = config
        self._adapter = adapter or CoincapAdapter()
        headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else None
        self._client = build_client(config.request_timeout, headers)

    async def __aenter__(self) -> CoincapPriceSource:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client. Called automatically by __aexit__."""
        await self._client.aclose()

    async def fetch_price_history(
        self, asset_id: str, start: date, end: date
    ) -> list[PricePoint]:
        """Fetch daily prices from ``start`` 00:00 UTC to the end of ``end``."""
        url = self._config.base_url.rstrip("/") + _HISTORY_PATH.format(id=asset_id)
        params = {
            "interval": _INTERVAL,
            "start": str(_to_millis(start)),
            "end": str(_to_millis(end, time.max)),
        }
        logger.debug("Fetching %s price history %s..%s", asset_id, start, end)
        raw = await get_json(
            self._client,
            url,
            PriceHistoryError,
            params=params,
            context={"asset_id": asset_id},
        )
        points = self._adapter.adapt(raw)
        logger.info("Fetched %d price(s) for %s", len(points), asset_id)
        return points
