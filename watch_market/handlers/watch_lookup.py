"""
Watch Market - watch-lookup Handler

POST {query} -> full WatchReport JSON.

Serves one of the two lookup capabilities, picked per deployment by
settings.LOOKUP_MODE:
- live:     scrape, poll, aggregate, generate (needs both API keys)
- estimate: generate only, alternate currency (needs the Anthropic key)
"""

from __future__ import annotations

import structlog

from watch_market.config import LookupMode, settings
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
from watch_market.report.lookup import lookup_estimate_only, lookup_with_live_data
from watch_market.utils.logs import configure_logging

configure_logging()
logger = structlog.get_logger(__name__)

HEADERS = cors_headers("POST, OPTIONS")


async def handle(event: Event) -> Response:
    if http_method(event) == "OPTIONS":
        return json_response(200, HEADERS)

    mode = settings.LOOKUP_MODE
    try:
        require_method(event, "POST")
        if mode == LookupMode.ESTIMATE:
            require_credentials(
                "ANTHROPIC_API_KEY", message="Missing API keys in environment variables"
            )
        else:
            require_credentials(
                "APIFY_API_KEY",
                "ANTHROPIC_API_KEY",
                message="Missing API keys in environment variables",
            )
        query = parse_query(event)
    except RequestError as e:
        logger.warning("watch_lookup_rejected", status_code=e.status_code, error=e.error, source="watch-lookup")
        return error_response(e, HEADERS)

    try:
        if mode == LookupMode.ESTIMATE:
            report = await lookup_estimate_only(query)
        else:
            report = await lookup_with_live_data(query)
    except Exception as e:
        logger.error(
            "watch_lookup_failed",
            error=str(e),
            error_type=type(e).__name__,
            mode=mode.value,
            source="watch-lookup",
        )
        return json_response(500, HEADERS, {"error": "Lookup failed", "message": str(e)})

    logger.info(
        "watch_lookup_complete",
        mode=mode.value,
        data_source=report.get("dataSource"),
        listings=report.get("listingsFound"),
        source="watch-lookup",
    )
    return json_response(200, HEADERS, report)


handler = run_sync(handle)
