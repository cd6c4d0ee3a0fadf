"""Data models for ALwrity."""

from .outline import (
    OutlineSection,
    SectionType,
    GenerationStatus,
    GenerationProgress,
    SectionScores,
    SearchMetrics,
    GlobalContext,
    SectionRequest,
    GenerationSummary,
)
from .version import ContentVersion, PerformanceRow, VersionMetrics

__all__ = [
    "OutlineSection",
    "SectionType",
    "GenerationStatus",
    "GenerationProgress",
    "SectionScores",
    "SearchMetrics",
    "GlobalContext",
    "SectionRequest",
    "GenerationSummary",
    "ContentVersion",
    "PerformanceRow",
    "VersionMetrics",
]
