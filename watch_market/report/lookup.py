"""
Watch Market - Lookup Services

The two lookup capabilities behind the watch-lookup route:

1. lookup_with_live_data: scrape Chrono24, poll the run to completion,
   aggregate prices, then generate the report around those numbers.
2. lookup_estimate_only: skip scraping and generate an estimate in the
   alternate currency.

A run that fails or times out is not an error: the lookup degrades to an
estimate with zero listings.
"""

from __future__ import annotations

from typing import Any

import structlog

from watch_market.config import settings
from watch_market.engine.stats import calculate_price_stats
from watch_market.pipeline.apify import ApifyClient, build_search_url
from watch_market.pipeline.poller import JobPoller
from watch_market.report.models import ListingSample
from watch_market.report.synthesizer import ReportSynthesizer

logger = structlog.get_logger(__name__)


async def lookup_with_live_data(
    query: str,
    *,
    scrape_client: Any | None = None,
    poller: JobPoller | None = None,
    synthesizer: ReportSynthesizer | None = None,
) -> dict[str, Any]:
    """
    Scrape-backed report for a free-text watch query.

    Args:
        query: What the user searched for.
        scrape_client: Open ApifyClient (one is opened when omitted).
        poller: JobPoller over scrape_client (default interval/attempts).
        synthesizer: ReportSynthesizer (default Anthropic client).

    Returns:
        Report dict with dataSource and listingsFound attached.
    """
    if scrape_client is None:
        async with ApifyClient() as client:
            return await lookup_with_live_data(
                query, scrape_client=client, poller=poller, synthesizer=synthesizer
            )

    logger.info("lookup_scrape_started", query=query, source="watch-lookup")
    handle = await scrape_client.start_run(
        build_search_url(query), max_items=settings.LOOKUP_MAX_ITEMS
    )

    poller = poller or JobPoller(scrape_client)
    result = await poller.poll_to_completion(handle.run_id)

    listings: list[dict[str, Any]] = []
    if result.succeeded:
        listings = await poller.fetch_items(handle.dataset_id, settings.LOOKUP_MAX_ITEMS)
        logger.info("lookup_listings_fetched", listings=len(listings), source="watch-lookup")
    else:
        logger.warning(
            "lookup_scrape_degraded",
            run_id=handle.run_id,
            status=result.status.value,
            timed_out=result.timed_out,
            note="falling back to AI-only estimate",
            source="watch-lookup",
        )

    stats = calculate_price_stats(listings) if listings else None
    samples = [
        ListingSample.from_listing(listing)
        for listing in listings[: settings.PROMPT_SAMPLE_SIZE]
    ]

    if synthesizer is None:
        async with ReportSynthesizer() as owned:
            report = await owned.synthesize(query, stats, len(listings), samples)
    else:
        report = await synthesizer.synthesize(query, stats, len(listings), samples)
    return report.to_response()


async def lookup_estimate_only(
    query: str,
    *,
    synthesizer: ReportSynthesizer | None = None,
) -> dict[str, Any]:
    """Generation-only report; never touches the scrape service."""
    logger.info(
        "lookup_estimate_started",
        query=query,
        currency=settings.ESTIMATE_CURRENCY,
        source="watch-lookup",
    )
    if synthesizer is None:
        async with ReportSynthesizer() as owned:
            return (await owned.estimate(query)).to_response()
    return (await synthesizer.estimate(query)).to_response()
