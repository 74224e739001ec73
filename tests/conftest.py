"""
Watch Market - Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- API keys patched onto settings
- Fake scrape client driven by a scripted status sequence
- Fake Anthropic client returning canned text
- Canned listings and report payloads
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from watch_market.config import JobStatus, settings
from watch_market.pipeline.apify import JobHandle


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


@pytest.fixture
def api_keys() -> Iterator[None]:
    """Both service credentials present."""
    with patch.object(settings, "APIFY_API_KEY", "apify-test-key"), patch.object(
        settings, "ANTHROPIC_API_KEY", "anthropic-test-key"
    ):
        yield


@pytest.fixture
def no_api_keys() -> Iterator[None]:
    with patch.object(settings, "APIFY_API_KEY", ""), patch.object(
        settings, "ANTHROPIC_API_KEY", ""
    ):
        yield


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeScrapeClient:
    """Scripted stand-in for ApifyClient; the last status repeats forever."""

    def __init__(self, statuses: list[JobStatus], items: Any = None):
        self._statuses = list(statuses)
        self._items = [] if items is None else items
        self.status_calls = 0
        self.item_calls: list[tuple[str, int]] = []
        self.started: list[tuple[str, int]] = []

    async def start_run(self, search_url: str, max_items: int, use_proxy: bool | None = None) -> JobHandle:
        self.started.append((search_url, max_items))
        return JobHandle(run_id="run-1", dataset_id="dataset-1")

    async def get_run_status(self, run_id: str) -> JobStatus:
        self.status_calls += 1
        if len(self._statuses) > 1:
            return self._statuses.pop(0)
        return self._statuses[0]

    async def get_dataset_items(self, dataset_id: str, limit: int) -> Any:
        self.item_calls.append((dataset_id, limit))
        return self._items


class SleepRecorder:
    """Async sleep replacement that records the requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_scrape_client() -> type[FakeScrapeClient]:
    return FakeScrapeClient


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


def make_anthropic_client(text: str) -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(
        return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])
    )
    client.close = AsyncMock()
    return client


@pytest.fixture
def anthropic_client_factory():
    return make_anthropic_client


# ---------------------------------------------------------------------------
# Canned Data
# ---------------------------------------------------------------------------


@pytest.fixture
def report_payload() -> dict[str, Any]:
    return {
        "brand": "Rolex",
        "model": "Cosmograph Daytona",
        "reference": "116500LN",
        "marketPrice": "$28,500",
        "priceRange": "$26,000 - $31,000",
        "specs": {
            "caseDiameter": "40mm",
            "caseMaterial": "Oystersteel",
            "movement": "Calibre 4130",
            "powerReserve": "72 hours",
            "waterResistance": "100m",
            "yearIntroduced": "2016",
        },
        "pricing": {
            "msrp": "$15,100",
            "secondaryAvg": "$28,500",
            "premiumDiscount": "+89%",
            "trend12m": "-4%",
            "liquidity": "High",
            "updated": "Oct 2026",
            "listingsFound": "12",
        },
        "byCondition": {
            "mint": "$32,800",
            "excellent": "$29,900",
            "veryGood": "$28,500",
            "good": "$25,650",
            "fair": "$22,800",
        },
        "investment": {
            "verdict": "Hold",
            "analysis": "Strong demand with prices easing from the peak.",
            "bars": [
                {"label": "Value Retention", "value": 92},
                {"label": "Market Demand", "value": 95},
                {"label": "Liquidity", "value": 90},
                {"label": "Price Stability", "value": 70},
            ],
        },
    }


@pytest.fixture
def report_text(report_payload: dict[str, Any]) -> str:
    return json.dumps(report_payload)


@pytest.fixture
def chrono24_listings() -> list[dict[str, Any]]:
    """Listings as the actor returns them: mixed casing and junk prices."""
    return [
        {"price": "$27,950", "condition": "Very good", "year": 2021, "location": "United States"},
        {"Price": "$29,400", "Condition": "Unworn", "Year": 2023, "Location": "Germany"},
        {"priceValue": 31000, "condition": "Good"},
        {"price": "Price on request", "condition": "Used"},
        {"price": "$25", "condition": "Strap only"},
        {"price": "", "Price": "$26,100", "location": "Hong Kong"},
    ]
