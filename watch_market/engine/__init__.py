from watch_market.engine.price import listing_price, parse_price, resolve_field
from watch_market.engine.stats import PriceStatistics, calculate_price_stats, format_currency

__all__ = [
    "PriceStatistics",
    "calculate_price_stats",
    "format_currency",
    "listing_price",
    "parse_price",
    "resolve_field",
]
