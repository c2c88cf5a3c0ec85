"""Data models for shellstrap.

This module exports the result records used throughout the application.
"""

from shellstrap.models.outcome import (
    ApplyResult,
    ItemCounts,
    Outcome,
    OutcomeKind,
    ProbeResult,
)
from shellstrap.models.report import Report, ReportEntry

__all__ = [
    "ApplyResult",
    "ItemCounts",
    "Outcome",
    "OutcomeKind",
    "ProbeResult",
    "Report",
    "ReportEntry",
]
