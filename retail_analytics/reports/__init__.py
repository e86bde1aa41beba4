"""
Analytical Report Module
"""
from .engine import REPORTS, ReportEngine, ReportSpec
from .runner import ReportResult, ReportRunner

__all__ = [
    "REPORTS",
    "ReportEngine",
    "ReportSpec",
    "ReportResult",
    "ReportRunner",
]
