"""
Watch Market - Report Synthesizer

Sends one structured-generation request to the Anthropic Messages API and
turns the reply into a WatchReport. The reply must be a single JSON object,
optionally wrapped in markdown fences; anything else fails the request.
"""

from __future__ import annotations

import json
import re
from typing import Any, Sequence

import anthropic
import structlog
from pydantic import ValidationError

from watch_market.config import DataSource, settings
from watch_market.engine.stats import PriceStatistics
from watch_market.report.models import ListingSample, WatchReport
from watch_market.report.prompts import build_estimate_prompt, build_live_prompt

logger = structlog.get_logger(__name__)

_FENCE = re.compile(r"```json|```")


class GenerationError(RuntimeError):
    """The text-generation service returned no text."""


class ReportParseError(ValueError):
    """Generated text is not a JSON report of the expected shape."""


def strip_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def parse_report(text: str) -> WatchReport:
    """
    Parse generated text into a WatchReport.

    Raises:
        ReportParseError: If the text is not JSON or does not match the schema.
    """
    cleaned = strip_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ReportParseError(f"Report is not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise ReportParseError("Report must be a JSON object")

    try:
        return WatchReport.model_validate(data)
    except ValidationError as e:
        raise ReportParseError(
            f"Report does not match schema: {e.error_count()} invalid field(s)"
        ) from e


def attach_metadata(report: WatchReport, listing_count: int) -> WatchReport:
    source = DataSource.LIVE if listing_count > 0 else DataSource.AI_ESTIMATED
    return report.model_copy(update={"data_source": source, "listings_found": listing_count})


class ReportSynthesizer:
    """
    Builds prompts, calls the generator once, and parses the report.

    Usage:
        async with ReportSynthesizer() as synthesizer:
            report = await synthesizer.synthesize(query, stats, len(listings), samples)

    A client passed in stays open; one created here is closed on exit.
    """

    def __init__(
        self,
        client: Any | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ):
        self._owns_client = client is None
        self._client = client or anthropic.AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
        self._model = model or settings.ANTHROPIC_MODEL
        self._max_tokens = max_tokens or settings.ANTHROPIC_MAX_TOKENS

    async def __aenter__(self) -> ReportSynthesizer:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.close()

    async def generate(self, prompt: str) -> str:
        """Single blocking generation call; concatenates every text block."""
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(getattr(block, "text", None) or "" for block in (response.content or []))
        if not text.strip():
            raise GenerationError("Text generation returned no content")

        logger.info(
            "report_generated",
            model=self._model,
            characters=len(text),
            source="report_synthesizer",
        )
        return text

    async def synthesize(
        self,
        query: str,
        stats: PriceStatistics | None,
        listing_count: int,
        samples: Sequence[ListingSample] = (),
    ) -> WatchReport:
        """
        Report for a scrape-backed lookup.

        With stats the computed average and range steer the generation;
        without them the prompt falls back to the model's own estimate.
        """
        prompt = build_live_prompt(query, stats, listing_count, samples)
        logger.info(
            "report_synthesis_started",
            has_stats=stats is not None,
            listings=listing_count,
            source="report_synthesizer",
        )
        report = parse_report(await self.generate(prompt))
        return attach_metadata(report, listing_count)

    async def estimate(self, query: str) -> WatchReport:
        """Generation-only report in the estimate currency."""
        logger.info(
            "report_estimate_started",
            currency=settings.ESTIMATE_CURRENCY,
            source="report_synthesizer",
        )
        report = parse_report(await self.generate(build_estimate_prompt(query)))
        return attach_metadata(report, 0)
