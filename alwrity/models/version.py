"""Content version model for draft snapshots and their search performance."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, String, Text, Float, BigInteger, DateTime

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PerformanceRow:
    """One day of Search Console performance."""
    date: str
    clicks: float = 0
    impressions: float = 0
    ctr: float = 0.0
    position: float = 0.0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "clicks": self.clicks,
            "impressions": self.impressions,
            "ctr": self.ctr,
            "position": self.position,
        }


@dataclass
class VersionMetrics:
    """Most recent daily metrics attached to a version."""
    clicks: float
    impressions: float
    ctr: float
    position: float


class ContentVersion(Base):
    """A saved snapshot of the full content."""

    __tablename__ = "content_versions"

    # Epoch milliseconds at save time, as a string
    id = Column(String(32), primary_key=True)
    content = Column(Text, nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)

    # Latest metrics, attached lazily
    clicks = Column(Float)
    impressions = Column(Float)
    ctr = Column(Float)
    position = Column(Float)
    metrics_updated_at = Column(DateTime)

    def __repr__(self):
        return f"<ContentVersion(id={self.id}, timestamp={self.timestamp})>"

    @property
    def metrics(self) -> Optional[VersionMetrics]:
        if self.clicks is None:
            return None
        return VersionMetrics(
            clicks=self.clicks,
            impressions=self.impressions,
            ctr=self.ctr,
            position=self.position,
        )

    def attach_metrics(self, row: PerformanceRow) -> None:
        """Overwrite the attached metrics with a day's values."""
        self.clicks = row.clicks
        self.impressions = row.impressions
        self.ctr = row.ctr
        self.position = row.position
        self.metrics_updated_at = _utcnow()

    @property
    def preview(self) -> str:
        """First 50 characters of the content."""
        return self.content[:50] + ("..." if len(self.content) > 50 else "")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        metrics = self.metrics
        return {
            "id": self.id,
            "content": self.content,
            "timestamp": self.timestamp,
            "metrics": {
                "clicks": metrics.clicks,
                "impressions": metrics.impressions,
                "ctr": metrics.ctr,
                "position": metrics.position,
            } if metrics else None,
        }
