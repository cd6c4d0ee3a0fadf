"""Section generation orchestrator: per-section state machine and sequential scheduler."""

import asyncio
from typing import Callable, Dict, Optional
import logging

from ..config import get_settings
from ..models.outline import (
    GenerationProgress,
    GenerationStatus,
    GenerationSummary,
    GlobalContext,
    SectionRequest,
)
from .content_writer import ContentPersonalizationPreferences, ContentWriter
from .outline_store import OutlineStore
from .scorer import SectionScorer

logger = logging.getLogger(__name__)

ProgressListener = Callable[[str, GenerationProgress], None]


class GenerationOrchestrator:
    """
    Drives content generation for the sections of one outline.

    Each section moves ``pending -> generating -> completed | error``.
    Generate-all walks the outline strictly in order so every request sees
    the latest text of its neighbours. Only one generation may run at a
    time per orchestrator.
    """

    def __init__(
        self,
        store: OutlineStore,
        writer: Optional[ContentWriter] = None,
        scorer: Optional[SectionScorer] = None,
        preferences: Optional[ContentPersonalizationPreferences] = None,
        settle_seconds: Optional[float] = None,
        on_progress: Optional[ProgressListener] = None
    ):
        self.store = store
        self.writer = writer or ContentWriter()
        self.scorer = scorer or SectionScorer()
        self.preferences = preferences
        if settle_seconds is None:
            settle_seconds = get_settings().generation_settle_seconds
        self.settle_seconds = settle_seconds
        self.on_progress = on_progress

        self.progress: Dict[str, GenerationProgress] = {}
        self.is_generating = False
        self.progress_visible = False
        self.current_section_id: Optional[str] = None
        self.last_error: Optional[str] = None
        self._cancel_requested = False
        self._settle_handle: Optional[asyncio.TimerHandle] = None

    # Progress surface

    def _set_progress(self, section_id: str, progress: GenerationProgress) -> None:
        self.progress[section_id] = progress
        if self.on_progress:
            self.on_progress(section_id, progress)

    def _show_progress(self) -> None:
        if self._settle_handle is not None:
            self._settle_handle.cancel()
            self._settle_handle = None
        self.progress_visible = True

    def _reconcile(self) -> None:
        self._settle_handle = None
        self.progress_visible = False
        self.current_section_id = None

    def _schedule_reconcile(self) -> None:
        if self.settle_seconds <= 0:
            self._reconcile()
            return
        loop = asyncio.get_running_loop()
        self._settle_handle = loop.call_later(self.settle_seconds, self._reconcile)

    def status_of(self, section_id: str) -> GenerationStatus:
        progress = self.progress.get(section_id)
        return progress.status if progress else GenerationStatus.PENDING

    def request_cancel(self) -> None:
        """Stop a running generate-all before its next section."""
        if self.is_generating:
            logger.info("Cancellation requested for section generation")
            self._cancel_requested = True

    # Generation

    def _build_request(self, section_id: str) -> SectionRequest:
        section = self.store.get(section_id)
        previous_content, next_content = self.store.neighbours(section_id)
        sections = self.store.snapshot()
        context_title = sections[0].title if sections else self.store.title
        return SectionRequest(
            section_id=section.id,
            title=section.title,
            keywords=list(section.keywords),
            section_type=section.section_type,
            previous_content=previous_content or None,
            next_content=next_content or None,
            global_context=GlobalContext(
                title=self.store.title or context_title,
                outline=[{"title": s.title, "keywords": list(s.keywords)} for s in sections],
            ),
            estimated_word_count=section.estimated_word_count,
        )

    async def _run_section(self, section_id: str) -> bool:
        """Generate, store and score one section. Returns True on success."""
        request = self._build_request(section_id)
        self.current_section_id = section_id
        self._set_progress(section_id, GenerationProgress(
            status=GenerationStatus.GENERATING,
            message=f"Generating {request.title}...",
        ))

        try:
            content = await self.writer.generate_section(request, self.preferences)
        except Exception as e:
            logger.error(f"Error generating section {request.title!r}: {e}")
            self.last_error = f"Failed to generate {request.title}"
            self._set_progress(section_id, GenerationProgress(
                status=GenerationStatus.ERROR,
                message=self.last_error,
            ))
            return False

        try:
            self.store.set_content(section_id, content)
        except KeyError:
            # Deleted while the request was in flight
            logger.warning(f"Section {section_id} was removed before its content arrived")
            self.progress.pop(section_id, None)
            return False

        index = self.store.index_of(section_id)
        scores = self.scorer.score_section(
            content,
            self.store.contents(),
            index,
            request.previous_content,
            request.next_content,
        )
        self.store.update(section_id, lambda section: section.apply_scores(scores))
        self._set_progress(section_id, GenerationProgress(
            status=GenerationStatus.COMPLETED,
            message="Content generated successfully",
            scores=scores,
        ))
        return True

    async def generate_section(self, section_id: str) -> Optional[GenerationProgress]:
        """
        Generate content for a single section, regardless of its neighbours' state.

        Returns the section's final progress, or None when another
        generation is already running or the section is not in the outline.
        """
        if self.is_generating:
            logger.warning("Generation already in progress, ignoring request")
            return None

        try:
            self.store.index_of(section_id)
        except KeyError:
            self.last_error = f"Section {section_id} not found"
            logger.warning(f"Cannot generate content: {self.last_error}")
            return None

        self.is_generating = True
        self.last_error = None
        self._show_progress()
        try:
            await self._run_section(section_id)
        finally:
            self.is_generating = False
            self._schedule_reconcile()
        return self.progress.get(section_id)

    async def generate_all(self) -> Optional[GenerationSummary]:
        """
        Generate every section in outline order, one request at a time.

        Returns None when another generation is already running.
        """
        if self.is_generating:
            logger.warning("Generation already in progress, ignoring request")
            return None

        self.is_generating = True
        self._cancel_requested = False
        self.last_error = None
        self._show_progress()

        section_ids = self.store.ids()
        for section_id in section_ids:
            self._set_progress(section_id, GenerationProgress())

        completed = 0
        attempted = 0
        cancelled = False
        try:
            for section_id in section_ids:
                if self._cancel_requested:
                    cancelled = True
                    logger.info(f"Generation cancelled after {attempted} sections")
                    break
                try:
                    self.store.index_of(section_id)
                except KeyError:
                    logger.warning(f"Skipping section {section_id}, no longer in the outline")
                    self.progress.pop(section_id, None)
                    continue

                attempted += 1
                if await self._run_section(section_id):
                    completed += 1
        finally:
            self.is_generating = False
            self._cancel_requested = False
            self._schedule_reconcile()

        summary = GenerationSummary(completed=completed, attempted=attempted, cancelled=cancelled)
        if summary.all_succeeded:
            logger.info(summary.message)
        else:
            logger.warning(summary.message)
        return summary
