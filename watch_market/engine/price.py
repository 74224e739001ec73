"""
Watch Market - Price Normalizer

Turns the loosely-typed price fields of scraped listings into Decimals.
Upstream records are inconsistently cased, so every field is resolved
through an ordered list of candidate names.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

import structlog

from watch_market.config import settings

logger = structlog.get_logger(__name__)

PRICE_FIELDS: tuple[str, ...] = ("price", "Price", "priceValue")
DISPLAY_PRICE_FIELDS: tuple[str, ...] = ("price", "Price")
CONDITION_FIELDS: tuple[str, ...] = ("condition", "Condition")
YEAR_FIELDS: tuple[str, ...] = ("year", "Year")
LOCATION_FIELDS: tuple[str, ...] = ("location", "Location")

_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def resolve_field(
    listing: Mapping[str, Any],
    candidates: Sequence[str],
    default: Any = None,
) -> Any:
    """
    Return the first candidate field holding a usable value.

    Empty strings, zero and None fall through to the next candidate.
    """
    for name in candidates:
        value = listing.get(name)
        if value:
            return value
    return default


def parse_price(raw: Any, floor: Decimal | None = None) -> Decimal | None:
    """
    Parse a raw price into a Decimal, or None when it is unusable.

    Every character other than digits and '.' is stripped and the leading
    number of what remains is parsed ("$12,345" -> 12345). Values at or
    below the floor are rejected.

    Args:
        raw: Absent value, number, or price string.
        floor: Plausibility floor (default from config: 500).

    Returns:
        Parsed price, or None.
    """
    if raw is None or raw is False or raw == "":
        return None

    cleaned = _NON_NUMERIC.sub("", str(raw))
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return None

    try:
        value = Decimal(match.group(0))
    except InvalidOperation:
        return None

    limit = floor if floor is not None else settings.PRICE_FLOOR
    if value <= limit:
        logger.debug("price_below_floor", raw=str(raw), value=str(value), floor=str(limit))
        return None
    return value


def listing_price(listing: Mapping[str, Any], floor: Decimal | None = None) -> Decimal | None:
    return parse_price(resolve_field(listing, PRICE_FIELDS), floor=floor)
