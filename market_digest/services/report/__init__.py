"""
Report Service

CONTRACT:
    Input:  MarketSnapshot + MarketAggregate
    Output: report body (Telegram HTML)

The LLM only writes prose around the pre-formatted digest; it never
computes numbers.
"""

from market_digest.services.report.digest import format_digest, format_report_date
from market_digest.services.report.generator import ReportGenerator, sanitize_markup

__all__ = [
    "format_digest",
    "format_report_date",
    "ReportGenerator",
    "sanitize_markup",
]
