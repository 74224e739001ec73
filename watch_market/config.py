"""
Watch Market - Configuration & Constants

Every threshold, endpoint, and tunable used by the handlers lives here.
No hardcoded values in business logic.

Usage:
    from watch_market.config import settings
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class JobStatus(str, Enum):
    """Status values reported by the scrape job service."""
    READY = "READY"
    INITIALIZING = "INITIALIZING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTING = "ABORTING"
    ABORTED = "ABORTED"
    TIMING_OUT = "TIMING-OUT"
    TIMED_OUT = "TIMED-OUT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> "JobStatus":
        """Map a raw status string onto the enum; anything unrecognised is UNKNOWN."""
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                pass
        return cls.UNKNOWN

    @property
    def is_pending(self) -> bool:
        return self in PENDING_STATUSES


PENDING_STATUSES = frozenset({JobStatus.RUNNING, JobStatus.READY, JobStatus.INITIALIZING})


class PollState(str, Enum):
    """Caller-facing classification of a scrape job."""
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class DataSource(str, Enum):
    """Where the prices in a report came from."""
    LIVE = "live"
    AI_ESTIMATED = "ai-estimated"


class LookupMode(str, Enum):
    """Which lookup capability the watch-lookup route serves."""
    LIVE = "live"           # scrape + poll + generate
    ESTIMATE = "estimate"   # generate only, alternate currency


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for Watch Market.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # -----------------------------------------------------------------------
    # API Keys
    # -----------------------------------------------------------------------
    APIFY_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""

    # -----------------------------------------------------------------------
    # Scrape job service (Apify actor running a Chrono24 search)
    # -----------------------------------------------------------------------
    APIFY_BASE_URL: str = "https://api.apify.com/v2"
    APIFY_ACTOR_ID: str = "misterkhan~chrono24-search-scraper"
    APIFY_USE_PROXY: bool = True
    CHRONO24_SEARCH_URL: str = "https://www.chrono24.com/search/index.htm"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # -----------------------------------------------------------------------
    # Job polling
    # 20 attempts × 3s keeps the blocking lookup inside a 60s ceiling
    # -----------------------------------------------------------------------
    POLL_INTERVAL_SECONDS: float = 3.0
    POLL_MAX_ATTEMPTS: int = 20

    # -----------------------------------------------------------------------
    # Item limits and sample sizes
    # -----------------------------------------------------------------------
    LOOKUP_MAX_ITEMS: int = 20      # synchronous lookup: scrape + dataset fetch
    SPLIT_MAX_ITEMS: int = 10       # watch-price / watch-poll
    PROMPT_SAMPLE_SIZE: int = 10    # listings summarised in the prompt
    POLL_SAMPLE_SIZE: int = 5       # listings echoed back by watch-poll

    # -----------------------------------------------------------------------
    # Price statistics
    # Prices at or below the floor are shipping fees or placeholders
    # -----------------------------------------------------------------------
    PRICE_FLOOR: Decimal = Decimal("500")
    TRIM_RATIO: Decimal = Decimal("0.1")
    DEFAULT_CURRENCY: str = "USD"
    CURRENCY_SYMBOL: str = "$"

    # Estimate-only lookup framing
    ESTIMATE_CURRENCY: str = "GBP"
    ESTIMATE_CURRENCY_SYMBOL: str = "£"
    ESTIMATE_MARKET: str = "UK"

    # -----------------------------------------------------------------------
    # Text generation (Anthropic Messages API)
    # -----------------------------------------------------------------------
    ANTHROPIC_MODEL: str = "claude-sonnet-4-5-20250929"
    ANTHROPIC_MAX_TOKENS: int = 1200

    # -----------------------------------------------------------------------
    # Request handling
    # -----------------------------------------------------------------------
    QUERY_MIN_LENGTH: int = 3
    LOOKUP_MODE: LookupMode = LookupMode.LIVE

    # -----------------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True


# Singleton instance
settings = Settings()
