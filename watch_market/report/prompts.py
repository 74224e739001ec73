"""
Watch Market - Report Prompts

Prompt text for the text-generation service. The live prompt embeds scraped
listings and computed statistics; the estimate prompt relies on the model's
own market knowledge in an alternate currency.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from watch_market.config import settings
from watch_market.engine.stats import PriceStatistics, format_currency
from watch_market.report.models import ListingSample

_SCHEMA_TEMPLATE = """{{
  "brand": "Brand name",
  "model": "Full model name",
  "reference": "Reference number",
  "marketPrice": "{market_price}",
  "priceRange": "{price_range}",
  "specs": {{
    "caseDiameter": "XXmm",
    "caseMaterial": "Material",
    "movement": "Calibre XXXX",
    "powerReserve": "XX hours",
    "waterResistance": "XXXm",
    "yearIntroduced": "XXXX"
  }},
  "pricing": {{
    "msrp": "{symbol}XX,XXX",
    "secondaryAvg": "{secondary_avg}",
    "premiumDiscount": "percentage above or below retail",
    "trend12m": "12-month price direction",
    "liquidity": "High / Medium / Low",
    "updated": "{updated}",
    "listingsFound": "{listings_found}"
  }},
  "byCondition": {{
    "mint": "average + 15%",
    "excellent": "average + 5%",
    "veryGood": "average",
    "good": "average - 10%",
    "fair": "average - 20%"
  }},
  "investment": {{
    "verdict": "Strong Buy | Hold | Caution",
    "analysis": "2-3 sentences on investment merit{analysis_hint}.",
    "bars": [
      {{ "label": "Value Retention", "value": 0-100 }},
      {{ "label": "Market Demand", "value": 0-100 }},
      {{ "label": "Liquidity", "value": 0-100 }},
      {{ "label": "Price Stability", "value": 0-100 }}
    ]
  }}
}}"""


def _updated_label(now: datetime | None = None) -> str:
    return (now or datetime.now(timezone.utc)).strftime("%b %Y")


def _market_context(
    listing_count: int,
    stats: PriceStatistics | None,
    samples: Sequence[ListingSample],
) -> str:
    if listing_count <= 0:
        return "No live listings found. Use your knowledge of current secondary market prices."

    lines = [f"LIVE CHRONO24 LISTINGS ({listing_count} found):"]
    lines.extend(sample.summary_line() for sample in samples)

    # Listings without a single plausible price still go out without stats
    if stats is not None:
        lines += [
            "",
            "CALCULATED PRICE STATS (treat as authoritative):",
            f"- Average: {format_currency(stats.average)}",
            f"- Range: {format_currency(stats.min)} - {format_currency(stats.max)}",
            f"- Based on {stats.count} listings",
        ]
    return "\n".join(lines)


def build_live_prompt(
    query: str,
    stats: PriceStatistics | None,
    listing_count: int,
    samples: Sequence[ListingSample],
    now: datetime | None = None,
) -> str:
    """Prompt for the scrape-backed lookup."""
    if stats is not None:
        market_price = format_currency(stats.average)
        price_range = f"{format_currency(stats.min)} - {format_currency(stats.max)}"
        secondary_avg = market_price
    else:
        market_price = price_range = "use your knowledge"
        secondary_avg = "estimated"

    schema = _SCHEMA_TEMPLATE.format(
        market_price=market_price,
        price_range=price_range,
        symbol=settings.CURRENCY_SYMBOL,
        secondary_avg=secondary_avg,
        updated=_updated_label(now),
        listings_found=listing_count,
        analysis_hint=", mentioning the live data found if available",
    )
    return (
        f'You are a luxury watch market expert. A user has searched for: "{query}"\n\n'
        f"{_market_context(listing_count, stats, samples)}\n\n"
        "Using the live listing data above (if available) as your primary price source, "
        "return a JSON object with EXACTLY this structure "
        "(no markdown, no explanation, just raw JSON):\n"
        f"{schema}"
    )


def build_estimate_prompt(query: str, now: datetime | None = None) -> str:
    """Prompt for the generation-only lookup, framed in the estimate currency."""
    symbol = settings.ESTIMATE_CURRENCY_SYMBOL
    currency = settings.ESTIMATE_CURRENCY
    schema = _SCHEMA_TEMPLATE.format(
        market_price=f"{symbol}XX,XXX",
        price_range=f"{symbol}XX,XXX - {symbol}XX,XXX",
        symbol=symbol,
        secondary_avg=f"{symbol}XX,XXX",
        updated=_updated_label(now),
        listings_found=0,
        analysis_hint="",
    )
    return (
        f'You are a luxury watch market expert. A user has searched for: "{query}"\n\n'
        f"Quote every price in {currency} ({symbol}) as seen on the {settings.ESTIMATE_MARKET} "
        "secondary market, based on your knowledge of recent dealer and auction prices.\n\n"
        "Return a JSON object with EXACTLY this structure "
        "(no markdown, no explanation, just raw JSON):\n"
        f"{schema}"
    )
