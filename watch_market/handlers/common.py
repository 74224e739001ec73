"""
Watch Market - Shared Handler Plumbing

Serverless-style events in, {statusCode, headers, body} out. Handlers raise
RequestError for client mistakes; everything else is caught at the handler
edge and turned into a JSON 500.
"""

from __future__ import annotations

import asyncio
import base64
import json
from typing import Any, Awaitable, Callable, Mapping

from watch_market.config import settings

Event = Mapping[str, Any]
Response = dict[str, Any]


class RequestError(Exception):
    """A request the handler refuses before doing any work."""

    def __init__(self, status_code: int, error: str):
        super().__init__(error)
        self.status_code = status_code
        self.error = error


def cors_headers(methods: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": methods,
        "Content-Type": "application/json",
    }


def json_response(status_code: int, headers: dict[str, str], payload: Any | None = None) -> Response:
    body = "" if payload is None else json.dumps(payload)
    return {"statusCode": status_code, "headers": dict(headers), "body": body}


def error_response(exc: RequestError, headers: dict[str, str]) -> Response:
    return json_response(exc.status_code, headers, {"error": exc.error})


def http_method(event: Event) -> str:
    return str(event.get("httpMethod") or "").upper()


def require_method(event: Event, allowed: str) -> None:
    if http_method(event) != allowed:
        raise RequestError(405, "Method not allowed")


def require_credentials(*names: str, message: str | None = None) -> None:
    """Fail with a 500 when any named credential is missing from settings."""
    missing = [name for name in names if not getattr(settings, name, "")]
    if missing:
        raise RequestError(500, message or f"Missing {', '.join(missing)}")


def parse_query(event: Event) -> str:
    """
    Extract and validate `query` from a JSON request body.

    Raises:
        RequestError: 400 for an unparseable body or a missing/short query.
    """
    raw = event.get("body")
    try:
        if event.get("isBase64Encoded") and isinstance(raw, str):
            raw = base64.b64decode(raw).decode("utf-8")
        body = json.loads(raw)
    except (TypeError, ValueError):
        raise RequestError(400, "Invalid request body")
    if not isinstance(body, dict):
        raise RequestError(400, "Invalid request body")

    query = body.get("query")
    if not isinstance(query, str) or len(query.strip()) < settings.QUERY_MIN_LENGTH:
        raise RequestError(400, "Query too short")
    return query.strip()


def query_params(event: Event) -> Mapping[str, Any]:
    return event.get("queryStringParameters") or {}


def run_sync(handle: Callable[[Event], Awaitable[Response]]) -> Callable[[Event, Any], Response]:
    """Wrap an async handler for runtimes that expect handler(event, context)."""

    def handler(event: Event, context: Any = None) -> Response:
        return asyncio.run(handle(event))

    handler.__name__ = getattr(handle, "__name__", "handler")
    return handler
