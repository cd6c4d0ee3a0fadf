"""Services for ALwrity."""

from .scorer import SectionScorer
from .outline_store import OutlineStore
from .outline_builder import OutlineBuilder
from .content_writer import ContentWriter, ContentPersonalizationPreferences
from .orchestrator import GenerationOrchestrator
from .search_console import SearchConsoleClient
from .versioning import VersionStore, VersionComparison

__all__ = [
    "SectionScorer",
    "OutlineStore",
    "OutlineBuilder",
    "ContentWriter",
    "ContentPersonalizationPreferences",
    "GenerationOrchestrator",
    "SearchConsoleClient",
    "VersionStore",
    "VersionComparison",
]
