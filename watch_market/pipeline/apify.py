"""
Watch Market - Apify Scrape Job Client

Starts the Chrono24 search actor, reads run status, and fetches dataset
items from the Apify REST API. The API token travels as a query-string
parameter and is never logged.

No retries: a single transport or parse failure propagates to the caller.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from watch_market.config import JobStatus, settings

logger = structlog.get_logger(__name__)


class ScrapeServiceError(RuntimeError):
    """The scrape service refused a run or answered with something other than JSON."""


# ---------------------------------------------------------------------------
# Pydantic Models
# ---------------------------------------------------------------------------


class JobHandle(BaseModel):
    """Identifiers of a started scrape run and its output dataset."""

    model_config = ConfigDict(populate_by_name=True)

    run_id: str = Field(..., alias="runId")
    dataset_id: str = Field(..., alias="datasetId")


def build_search_url(query: str) -> str:
    """Chrono24 search page for a free-text query, newest listings only."""
    return (
        f"{settings.CHRONO24_SEARCH_URL}"
        f"?dosearch=true&query={quote(query, safe='')}&maxAgeInDays=0"
    )


# ---------------------------------------------------------------------------
# API Client
# ---------------------------------------------------------------------------


class ApifyClient:
    """
    Async client for the Apify actor-run API.

    Usage:
        async with ApifyClient() as client:
            handle = await client.start_run(build_search_url("Rolex 116500"), max_items=20)
            status = await client.get_run_status(handle.run_id)
            items = await client.get_dataset_items(handle.dataset_id, limit=20)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        actor_id: str | None = None,
        timeout: float | None = None,
    ):
        self._api_key = api_key or settings.APIFY_API_KEY
        self._base_url = base_url or settings.APIFY_BASE_URL
        self._actor_id = actor_id or settings.APIFY_ACTOR_ID
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ApifyClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Issue one request and decode its JSON body."""
        assert self._client is not None, "Client not initialized. Use 'async with'."

        query = {"token": self._api_key, **(params or {})}
        response = await self._client.request(method, path, params=query, json=json)

        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "apify_invalid_json",
                path=path,
                status_code=response.status_code,
                source="apify",
            )
            raise ScrapeServiceError(f"Invalid JSON: {response.text[:200]}") from e

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def start_run(
        self,
        search_url: str,
        max_items: int,
        use_proxy: bool | None = None,
    ) -> JobHandle:
        """
        Launch the search actor against a Chrono24 search URL.

        Returns:
            JobHandle with the run id and its default dataset id.

        Raises:
            ScrapeServiceError: If the response carries no run id.
        """
        proxy = settings.APIFY_USE_PROXY if use_proxy is None else use_proxy
        payload = {
            "startUrls": [{"url": search_url}],
            "maxItems": max_items,
            "useApifyProxy": proxy,
        }

        data = await self._request("POST", f"/acts/{self._actor_id}/runs", json=payload)
        run = data.get("data") if isinstance(data, dict) else None
        if not isinstance(run, dict) or not run.get("id"):
            logger.error("apify_run_start_failed", response=str(data)[:200], source="apify")
            raise ScrapeServiceError("Failed to start Apify run")

        handle = JobHandle(run_id=run["id"], dataset_id=run.get("defaultDatasetId") or "")
        logger.info(
            "apify_run_started",
            run_id=handle.run_id,
            dataset_id=handle.dataset_id,
            max_items=max_items,
            source="apify",
        )
        return handle

    async def get_run_status(self, run_id: str) -> JobStatus:
        """Current status of a run; a missing status reads as UNKNOWN."""
        data = await self._request("GET", f"/actor-runs/{quote(run_id, safe='')}")
        run = data.get("data") if isinstance(data, dict) else None
        raw = run.get("status") if isinstance(run, dict) else None
        return JobStatus.parse(raw)

    async def get_dataset_items(self, dataset_id: str, limit: int) -> list[dict[str, Any]]:
        """
        Fetch up to `limit` items from a run's dataset.

        A non-list response counts as an empty dataset.
        """
        data = await self._request(
            "GET", f"/datasets/{quote(dataset_id, safe='')}/items", params={"limit": limit}
        )
        if not isinstance(data, list):
            logger.warning(
                "apify_dataset_not_a_list",
                dataset_id=dataset_id,
                response_type=type(data).__name__,
                source="apify",
            )
            return []

        items = [item for item in data if isinstance(item, dict)]
        logger.info(
            "apify_dataset_fetched",
            dataset_id=dataset_id,
            items=len(items),
            source="apify",
        )
        return items
