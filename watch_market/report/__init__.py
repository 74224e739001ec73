"""Watch Market - Report Layer"""

from watch_market.report.lookup import lookup_estimate_only, lookup_with_live_data
from watch_market.report.models import ListingSample, WatchReport
from watch_market.report.synthesizer import (
    GenerationError,
    ReportParseError,
    ReportSynthesizer,
    parse_report,
    strip_fences,
)

__all__ = [
    "GenerationError",
    "ListingSample",
    "ReportParseError",
    "ReportSynthesizer",
    "WatchReport",
    "lookup_estimate_only",
    "lookup_with_live_data",
    "parse_report",
    "strip_fences",
]
