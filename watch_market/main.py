"""
Watch Market - Local HTTP App

Serves the serverless handlers on local routes so the frontend can be
developed against them. Each request is adapted into a handler event and
the handler's response is passed back unchanged.

Run via:
    python -m watch_market.main
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response

from watch_market.handlers import watch_lookup, watch_poll, watch_price
from watch_market.utils.logs import configure_logging

configure_logging()
logger = structlog.get_logger(__name__)

Handle = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

# Handlers answer disallowed methods themselves, with CORS headers
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

app = FastAPI(title="Watch Market")


async def to_event(request: Request) -> dict[str, Any]:
    body = await request.body()
    return {
        "httpMethod": request.method,
        "path": request.url.path,
        "headers": dict(request.headers),
        "queryStringParameters": dict(request.query_params) or None,
        "body": body.decode("utf-8") if body else None,
        "isBase64Encoded": False,
    }


async def dispatch(handle: Handle, request: Request) -> Response:
    result = await handle(await to_event(request))
    return Response(
        content=result.get("body", ""),
        status_code=result["statusCode"],
        headers=result.get("headers", {}),
    )


@app.api_route("/watch-lookup", methods=ALL_METHODS)
async def lookup_route(request: Request) -> Response:
    return await dispatch(watch_lookup.handle, request)


@app.api_route("/watch-price", methods=ALL_METHODS)
async def price_route(request: Request) -> Response:
    return await dispatch(watch_price.handle, request)


@app.api_route("/watch-poll", methods=ALL_METHODS)
async def poll_route(request: Request) -> Response:
    return await dispatch(watch_poll.handle, request)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


if __name__ == "__main__":
    logger.info("watch_market_local_startup", port=8888)
    uvicorn.run(app, host="127.0.0.1", port=8888)
