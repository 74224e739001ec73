"""Tests for the price statistics aggregator (watch_market/engine/stats.py)."""

from __future__ import annotations

import random
from decimal import Decimal

import pytest

from watch_market.engine.stats import (
    PriceStatistics,
    calculate_price_stats,
    format_currency,
    trim_count,
)


def _listings(prices):
    return [{"price": p} for p in prices]


class TestCalculatePriceStats:
    def test_no_listings_is_none(self) -> None:
        assert calculate_price_stats([]) is None

    def test_only_junk_prices_is_none(self) -> None:
        assert calculate_price_stats(_listings(["", "N/A", "$25", None])) is None

    def test_single_price(self) -> None:
        stats = calculate_price_stats(_listings(["$9,250"]))
        assert stats == PriceStatistics(average=9250, min=9250, max=9250, count=1, currency="USD")

    def test_ten_prices_trim_one_each_end(self) -> None:
        prices = [f"${p:,}" for p in range(1000, 10001, 1000)]
        stats = calculate_price_stats(_listings(prices))

        assert stats is not None
        assert stats.min == 2000
        assert stats.max == 9000
        assert stats.average == 5500
        assert stats.count == 10

    def test_under_ten_prices_trims_nothing(self) -> None:
        stats = calculate_price_stats(_listings(["$1,000", "$2,000", "$60,000"]))

        assert stats is not None
        assert stats.min == 1000
        assert stats.max == 60000
        assert stats.average == 21000
        assert stats.count == 3

    def test_count_ignores_discarded_listings(self, chrono24_listings) -> None:
        stats = calculate_price_stats(chrono24_listings)

        assert stats is not None
        assert stats.count == 4
        assert stats.min == 26100
        assert stats.max == 31000

    def test_average_rounds_half_up(self) -> None:
        stats = calculate_price_stats(_listings(["1000", "1001"]))
        assert stats is not None
        assert stats.average == 1001

    def test_input_order_does_not_matter(self) -> None:
        prices = [str(p) for p in range(600, 6000, 350)]
        shuffled = list(prices)
        random.Random(7).shuffle(shuffled)
        assert calculate_price_stats(_listings(prices)) == calculate_price_stats(_listings(shuffled))

    @pytest.mark.parametrize("seed", range(5))
    def test_average_within_min_max(self, seed: int) -> None:
        rng = random.Random(seed)
        prices = [str(rng.randint(501, 250_000)) for _ in range(rng.randint(1, 20))]
        stats = calculate_price_stats(_listings(prices))

        assert stats is not None
        assert stats.min <= stats.average <= stats.max
        assert stats.count == len(prices)

    def test_currency_override(self) -> None:
        stats = calculate_price_stats(_listings(["2,000"]), currency="GBP")
        assert stats is not None
        assert stats.currency == "GBP"


class TestTrimCount:
    @pytest.mark.parametrize("count, expected", [(1, 0), (9, 0), (10, 1), (19, 1), (20, 2)])
    def test_floor_of_ten_percent(self, count: int, expected: int) -> None:
        assert trim_count(count) == expected

    def test_custom_ratio(self) -> None:
        assert trim_count(10, Decimal("0.25")) == 2


class TestFormatting:
    def test_format_currency(self) -> None:
        assert format_currency(28500) == "$28,500"
        assert format_currency(1250, "£") == "£1,250"

    def test_formatted_view(self) -> None:
        stats = PriceStatistics(average=12345, min=9000, max=15500, count=7, currency="USD")
        assert stats.formatted() == {
            "average": "$12,345",
            "min": "$9,000",
            "max": "$15,500",
            "count": 7,
        }

    def test_statistics_are_frozen(self) -> None:
        stats = PriceStatistics(average=1, min=1, max=1, count=1, currency="USD")
        with pytest.raises(Exception):
            stats.average = 2
