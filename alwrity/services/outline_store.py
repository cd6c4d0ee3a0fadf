"""Ordered outline state with snapshot reads and read-modify-write updates."""

import copy
import math
import time
import uuid
from typing import Callable, Iterable, List, Optional
import logging

from ..config import WORDS_PER_MINUTE
from ..models.outline import OutlineSection, SectionType

logger = logging.getLogger(__name__)


def _uid(prefix: str = "section") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def calculate_section_score(section: OutlineSection) -> int:
    """
    Optimization score of an outline section (0-100).

    Base 50, plus points for keywords, search metrics and related questions.
    """
    score = 50

    if section.keywords:
        score += min(len(section.keywords) * 5, 20)

    metrics = section.search_metrics
    if metrics:
        if metrics.clicks > 0:
            score += min(metrics.clicks, 10)
        # Better position (lower number) earns more
        if metrics.position < 10:
            score += 10 - math.floor(metrics.position)

    if section.related_questions:
        score += min(len(section.related_questions) * 3, 10)

    return int(min(score, 100))


class OutlineStore:
    """
    Single owner of an outline's ordered sections.

    Reads hand out deep copies so callers never hold live references; every
    write looks the section up by id in the current list, so an update made
    after an await always lands on the latest state.
    """

    def __init__(self, title: str = "", sections: Optional[Iterable[OutlineSection]] = None):
        self.title = title
        self._sections: List[OutlineSection] = [copy.deepcopy(s) for s in (sections or [])]

    def __len__(self) -> int:
        return len(self._sections)

    def snapshot(self) -> List[OutlineSection]:
        """Deep copy of the current sections in order."""
        return copy.deepcopy(self._sections)

    def ids(self) -> List[str]:
        return [section.id for section in self._sections]

    def index_of(self, section_id: str) -> int:
        for i, section in enumerate(self._sections):
            if section.id == section_id:
                return i
        raise KeyError(f"Section {section_id} not found")

    def get(self, section_id: str) -> OutlineSection:
        return copy.deepcopy(self._sections[self.index_of(section_id)])

    def contents(self) -> List[str]:
        return [section.content for section in self._sections]

    def neighbours(self, section_id: str):
        """Current (previous, next) content of a section; None at the ends."""
        index = self.index_of(section_id)
        previous = self._sections[index - 1].content if index > 0 else None
        following = (
            self._sections[index + 1].content if index < len(self._sections) - 1 else None
        )
        return previous, following

    def update(self, section_id: str, mutate: Callable[[OutlineSection], None]) -> OutlineSection:
        """Apply ``mutate`` to the live section and return a copy of the result."""
        section = self._sections[self.index_of(section_id)]
        mutate(section)
        return copy.deepcopy(section)

    def set_content(self, section_id: str, content: str) -> OutlineSection:
        def _apply(section: OutlineSection):
            section.content = content
        return self.update(section_id, _apply)

    # Editing

    def _invalidate(self, indices: Iterable[int]) -> None:
        for i in indices:
            if 0 <= i < len(self._sections) and self._sections[i].has_scores:
                logger.debug(f"Clearing stale scores of section {self._sections[i].id}")
                self._sections[i].clear_scores()

    def move_section(self, index: int, direction: str) -> bool:
        """Swap a section with its neighbour; returns False at the edges."""
        if direction not in ("up", "down"):
            raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")
        if (direction == "up" and index == 0) or (
            direction == "down" and index == len(self._sections) - 1
        ):
            return False

        new_index = index - 1 if direction == "up" else index + 1
        items = self._sections
        items[index], items[new_index] = items[new_index], items[index]
        low, high = sorted((index, new_index))
        # Both moved sections and everything adjacent to them see new neighbours
        self._invalidate(range(low - 1, high + 2))
        return True

    def delete_section(self, section_id: str) -> bool:
        try:
            index = self.index_of(section_id)
        except KeyError:
            return False
        self._sections.pop(index)
        # Former neighbours are now adjacent to each other
        self._invalidate((index - 1, index))
        return True

    def add_section(self, title: str = "New Section") -> OutlineSection:
        section = OutlineSection(
            id=_uid(),
            title=title,
            keywords=[],
            estimated_word_count=300,
            section_type=SectionType.BODY,
            optimization_score=50,
        )
        self._sections.append(section)
        self._invalidate((len(self._sections) - 2,))
        return copy.deepcopy(section)

    def update_section(self, edited: OutlineSection) -> OutlineSection:
        """Replace a section's editable fields and recompute its optimization score."""
        edited = copy.deepcopy(edited)
        edited.optimization_score = calculate_section_score(edited)
        self._sections[self.index_of(edited.id)] = edited
        return copy.deepcopy(edited)

    # Aggregates

    def full_content(self) -> str:
        """All generated content joined under markdown headings."""
        parts = []
        for section in self._sections:
            if section.content:
                parts.append(f"## {section.title}\n\n{section.content.strip()}")
        return "\n\n".join(parts)

    def total_word_count(self) -> int:
        return sum(section.estimated_word_count for section in self._sections)

    def estimated_reading_time(self) -> int:
        """Minutes to read the planned article."""
        return math.ceil(self.total_word_count() / WORDS_PER_MINUTE)

    def average_optimization_score(self) -> int:
        if not self._sections:
            return 0
        total = sum(section.optimization_score for section in self._sections)
        return round(total / len(self._sections))

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "sections": [section.to_dict() for section in self._sections],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OutlineStore":
        return cls(
            title=data.get("title", ""),
            sections=[OutlineSection.from_dict(item) for item in data.get("sections", [])],
        )


def default_outline(title: str, now: Optional[Callable[[], float]] = None) -> List[OutlineSection]:
    """Five-section outline used when the AI provider cannot produce one."""
    stamp = str(int((now or time.time)() * 1000))
    keywords = [word for word in (title or "").split(" ") if len(word) > 3]
    return [
        OutlineSection(id=f"{stamp}-intro", title="Introduction", keywords=keywords,
                       estimated_word_count=300, section_type=SectionType.INTRODUCTION,
                       optimization_score=70),
        OutlineSection(id=f"{stamp}-body1", title="Key Concepts and Definitions",
                       estimated_word_count=500, section_type=SectionType.BODY,
                       optimization_score=60),
        OutlineSection(id=f"{stamp}-body2", title="Main Benefits and Applications",
                       estimated_word_count=600, section_type=SectionType.BODY,
                       optimization_score=60),
        OutlineSection(id=f"{stamp}-body3", title="Best Practices and Implementation",
                       estimated_word_count=700, section_type=SectionType.BODY,
                       optimization_score=60),
        OutlineSection(id=f"{stamp}-conclusion", title="Conclusion",
                       estimated_word_count=250, section_type=SectionType.CONCLUSION,
                       optimization_score=65),
    ]
