"""Watch Market - Scrape Job Pipeline"""

from watch_market.pipeline.apify import ApifyClient, JobHandle, ScrapeServiceError, build_search_url
from watch_market.pipeline.poller import JobPoller, PollResult, PollSnapshot, classify

__all__ = [
    "ApifyClient",
    "JobHandle",
    "JobPoller",
    "PollResult",
    "PollSnapshot",
    "ScrapeServiceError",
    "build_search_url",
    "classify",
]
