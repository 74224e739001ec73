"""
Watch Market - Price Statistics Aggregator

Trimmed-mean summary over a batch of scraped listings:

    valid   = sorted(p for p in prices if p > floor)
    trim    = floor(len(valid) × 0.1)
    core    = valid[trim : len(valid) - trim]
    average = round(mean(core))   (whole currency units, half-up)

min/max describe the trimmed core while count reports every listing
that had a usable price.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

import structlog
from pydantic import BaseModel, ConfigDict

from watch_market.config import settings
from watch_market.engine.price import listing_price

logger = structlog.get_logger(__name__)

_WHOLE = Decimal("1")


def _round_whole(value: Decimal) -> int:
    return int(value.quantize(_WHOLE, rounding=ROUND_HALF_UP))


def format_currency(amount: int, symbol: str | None = None) -> str:
    """Render whole currency units with thousands separators, e.g. "$12,345"."""
    prefix = symbol if symbol is not None else settings.CURRENCY_SYMBOL
    return f"{prefix}{amount:,}"


class PriceStatistics(BaseModel):
    """Immutable summary of one batch of listing prices."""

    model_config = ConfigDict(frozen=True)

    average: int
    min: int
    max: int
    count: int
    currency: str

    def formatted(self, symbol: str | None = None) -> dict[str, Any]:
        """Locale-formatted view used by the split poll endpoint."""
        return {
            "average": format_currency(self.average, symbol),
            "min": format_currency(self.min, symbol),
            "max": format_currency(self.max, symbol),
            "count": self.count,
        }


def trim_count(count: int, ratio: Decimal | None = None) -> int:
    share = ratio if ratio is not None else settings.TRIM_RATIO
    return int((Decimal(count) * share).to_integral_value(rounding=ROUND_FLOOR))


def calculate_price_stats(
    listings: Iterable[Mapping[str, Any]],
    currency: str | None = None,
    floor: Decimal | None = None,
    trim_ratio: Decimal | None = None,
) -> PriceStatistics | None:
    """
    Build trimmed price statistics for a batch of listings.

    Args:
        listings: Raw listing records, in any order.
        currency: Currency code stamped on the result (default from config).
        floor: Plausibility floor passed to the normalizer.
        trim_ratio: Share trimmed from each end (default 0.1).

    Returns:
        PriceStatistics, or None when no listing has a plausible price.
    """
    prices = sorted(
        price
        for price in (listing_price(listing, floor=floor) for listing in listings)
        if price is not None
    )
    if not prices:
        logger.info("price_stats_no_data")
        return None

    trim = trim_count(len(prices), trim_ratio)
    core = prices[trim : len(prices) - trim] if trim else prices

    average = sum(core, Decimal("0")) / len(core)
    stats = PriceStatistics(
        average=_round_whole(average),
        min=_round_whole(core[0]),
        max=_round_whole(core[-1]),
        count=len(prices),
        currency=currency or settings.DEFAULT_CURRENCY,
    )

    logger.info(
        "price_stats_calculated",
        count=stats.count,
        trimmed=trim,
        average=stats.average,
        min=stats.min,
        max=stats.max,
        currency=stats.currency,
    )
    return stats
