"""
Watch Market - watch-poll Handler

GET ?runId&datasetId ->
    {status: "RUNNING"}
    {status: "FAILED", error}
    {status: "SUCCEEDED", listings, prices, sample}

One status check per invocation; the caller decides how often to ask.
"""

from __future__ import annotations

from typing import Any

import structlog

from watch_market.config import PollState, settings
from watch_market.engine.stats import calculate_price_stats
from watch_market.handlers.common import (
    Event,
    RequestError,
    Response,
    cors_headers,
    error_response,
    http_method,
    json_response,
    query_params,
    require_credentials,
    require_method,
    run_sync,
)
from watch_market.pipeline.apify import ApifyClient
from watch_market.pipeline.poller import JobPoller, PollSnapshot
from watch_market.report.models import ListingSample
from watch_market.utils.logs import configure_logging

configure_logging()
logger = structlog.get_logger(__name__)

HEADERS = cors_headers("GET, OPTIONS")


def summarize_snapshot(snapshot: PollSnapshot) -> dict[str, Any]:
    """Response payload for one poll snapshot."""
    if snapshot.state == PollState.RUNNING:
        return {"status": PollState.RUNNING.value}
    if snapshot.state == PollState.FAILED:
        return {"status": PollState.FAILED.value, "error": "Apify run did not succeed"}

    listings = snapshot.listings
    stats = calculate_price_stats(listings) if listings else None
    sample = [
        ListingSample.from_listing(listing).model_dump()
        for listing in listings[: settings.POLL_SAMPLE_SIZE]
    ]
    return {
        "status": PollState.SUCCEEDED.value,
        "listings": len(listings),
        "prices": stats.formatted() if stats is not None else None,
        "sample": sample,
    }


async def check_run(run_id: str, dataset_id: str) -> PollSnapshot:
    async with ApifyClient() as client:
        return await JobPoller(client).check_once(run_id, dataset_id, settings.SPLIT_MAX_ITEMS)


async def handle(event: Event) -> Response:
    if http_method(event) == "OPTIONS":
        return json_response(200, HEADERS)

    params = query_params(event)
    run_id = params.get("runId")
    dataset_id = params.get("datasetId")
    try:
        require_method(event, "GET")
        require_credentials("APIFY_API_KEY")
        if not run_id or not dataset_id:
            raise RequestError(400, "Missing runId or datasetId")
    except RequestError as e:
        logger.warning("watch_poll_rejected", status_code=e.status_code, error=e.error, source="watch-poll")
        return error_response(e, HEADERS)

    try:
        snapshot = await check_run(run_id, dataset_id)
    except Exception as e:
        logger.error(
            "watch_poll_failed",
            run_id=run_id,
            error=str(e),
            error_type=type(e).__name__,
            source="watch-poll",
        )
        return json_response(500, HEADERS, {"error": str(e)})

    payload = summarize_snapshot(snapshot)
    logger.info(
        "watch_poll_complete",
        run_id=run_id,
        status=payload["status"],
        listings=payload.get("listings"),
        source="watch-poll",
    )
    return json_response(200, HEADERS, payload)


handler = run_sync(handle)
