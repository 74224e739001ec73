"""
Watch Market - Scrape Job Poller

State machine over the scrape run status:

    PENDING  {RUNNING, READY, INITIALIZING}  -> keep polling
    SUCCEEDED                                -> fetch dataset
    anything else (FAILED, UNKNOWN, ...)     -> terminal failure

Two ways to drive it:
- poll_to_completion(): blocks inside one invocation, sleeping a fixed
  interval between checks, for at most max_attempts checks.
- check_once(): a single status check; the caller owns the cadence.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Protocol

import structlog

from watch_market.config import JobStatus, PollState, settings

logger = structlog.get_logger(__name__)


class StatusSource(Protocol):
    async def get_run_status(self, run_id: str) -> JobStatus: ...

    async def get_dataset_items(self, dataset_id: str, limit: int) -> list[dict[str, Any]]: ...


@dataclass(frozen=True)
class PollResult:
    """Outcome of a blocking poll."""

    status: JobStatus
    attempts: int
    timed_out: bool

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.SUCCEEDED


@dataclass(frozen=True)
class PollSnapshot:
    """Outcome of a single caller-driven check."""

    state: PollState
    status: JobStatus
    listings: list[dict[str, Any]] = field(default_factory=list)


def classify(status: JobStatus) -> PollState:
    if status.is_pending:
        return PollState.RUNNING
    if status == JobStatus.SUCCEEDED:
        return PollState.SUCCEEDED
    return PollState.FAILED


class JobPoller:
    """
    Polls a scrape run through a StatusSource (normally ApifyClient).

    Usage:
        poller = JobPoller(client)
        result = await poller.poll_to_completion(handle.run_id)
        if result.succeeded:
            items = await poller.fetch_items(handle.dataset_id, limit=20)
    """

    def __init__(
        self,
        source: StatusSource,
        interval: float | None = None,
        max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._source = source
        self._interval = interval if interval is not None else settings.POLL_INTERVAL_SECONDS
        self._max_attempts = max_attempts if max_attempts is not None else settings.POLL_MAX_ATTEMPTS
        self._sleep = sleep
        if self._max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def poll_to_completion(self, run_id: str) -> PollResult:
        """
        Check the run until it leaves the pending group or attempts run out.

        Waits one interval between consecutive checks. Exhausting the
        attempts while still pending is reported as timed_out, not raised.
        """
        status = JobStatus.RUNNING
        attempts = 0

        while status.is_pending:
            if attempts >= self._max_attempts:
                logger.warning(
                    "job_poll_timed_out",
                    run_id=run_id,
                    attempts=attempts,
                    last_status=status.value,
                    source="job_poller",
                )
                return PollResult(status=status, attempts=attempts, timed_out=True)

            if attempts:
                await self._sleep(self._interval)

            status = await self._source.get_run_status(run_id)
            attempts += 1
            logger.info(
                "job_poll_status",
                run_id=run_id,
                status=status.value,
                attempt=attempts,
                source="job_poller",
            )

        return PollResult(status=status, attempts=attempts, timed_out=False)

    async def check_once(self, run_id: str, dataset_id: str, limit: int) -> PollSnapshot:
        """Classify the run once; fetch its items only when it has succeeded."""
        status = await self._source.get_run_status(run_id)
        state = classify(status)
        logger.info(
            "job_check_status",
            run_id=run_id,
            status=status.value,
            state=state.value,
            source="job_poller",
        )

        if state != PollState.SUCCEEDED:
            return PollSnapshot(state=state, status=status)

        listings = await self.fetch_items(dataset_id, limit)
        return PollSnapshot(state=state, status=status, listings=listings)

    async def fetch_items(self, dataset_id: str, limit: int) -> list[dict[str, Any]]:
        items = await self._source.get_dataset_items(dataset_id, limit)
        return items if isinstance(items, list) else []
