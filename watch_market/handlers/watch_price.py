"""
Watch Market - watch-price Handler

POST {query} -> {runId, datasetId, status: "RUNNING"}

Starts the scrape run and returns at once; the caller polls watch-poll
with the returned handle.
"""

from __future__ import annotations

import structlog

from watch_market.config import PollState, settings
from watch_market.handlers.common import (
    Event,
    RequestError,
    Response,
    cors_headers,
    error_response,
    http_method,
    json_response,
    parse_query,
    require_credentials,
    require_method,
    run_sync,
)
from watch_market.pipeline.apify import ApifyClient, JobHandle, build_search_url
from watch_market.utils.logs import configure_logging

configure_logging()
logger = structlog.get_logger(__name__)

HEADERS = cors_headers("POST, OPTIONS")


async def start_price_run(query: str) -> JobHandle:
    async with ApifyClient() as client:
        return await client.start_run(build_search_url(query), max_items=settings.SPLIT_MAX_ITEMS)


async def handle(event: Event) -> Response:
    if http_method(event) == "OPTIONS":
        return json_response(200, HEADERS)

    try:
        require_method(event, "POST")
        require_credentials("APIFY_API_KEY")
        query = parse_query(event)
    except RequestError as e:
        logger.warning("watch_price_rejected", status_code=e.status_code, error=e.error, source="watch-price")
        return error_response(e, HEADERS)

    logger.info("watch_price_starting", query=query, source="watch-price")
    try:
        job = await start_price_run(query)
    except Exception as e:
        logger.error(
            "watch_price_failed",
            error=str(e),
            error_type=type(e).__name__,
            source="watch-price",
        )
        return json_response(500, HEADERS, {"error": str(e)})

    logger.info("watch_price_run_started", run_id=job.run_id, source="watch-price")
    return json_response(
        200,
        HEADERS,
        {**job.model_dump(by_alias=True), "status": PollState.RUNNING.value},
    )


handler = run_sync(handle)
