"""Storage for saved content versions."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import logging

from sqlalchemy.orm import sessionmaker

from .database import get_db_session, get_engine, init_db
from .models.version import ContentVersion, PerformanceRow

logger = logging.getLogger(__name__)


class VersionRepository(ABC):
    """Persistence for ContentVersion records. Versions are never deleted."""

    @abstractmethod
    def save(self, version: ContentVersion) -> ContentVersion:
        """Store a new version."""

    @abstractmethod
    def list(self) -> List[ContentVersion]:
        """All versions, oldest first."""

    @abstractmethod
    def get(self, version_id: str) -> Optional[ContentVersion]:
        """A single version, or None."""

    @abstractmethod
    def update_metrics(self, version_id: str, row: PerformanceRow) -> Optional[ContentVersion]:
        """Attach a day's metrics to a version, replacing earlier ones."""

    def exists(self, version_id: str) -> bool:
        return self.get(version_id) is not None


class InMemoryVersionRepository(VersionRepository):
    """Keeps versions in a dict for the lifetime of the process."""

    def __init__(self):
        self._versions: Dict[str, ContentVersion] = {}

    def save(self, version: ContentVersion) -> ContentVersion:
        self._versions[version.id] = version
        return version

    def list(self) -> List[ContentVersion]:
        return sorted(self._versions.values(), key=lambda v: v.timestamp)

    def get(self, version_id: str) -> Optional[ContentVersion]:
        return self._versions.get(version_id)

    def update_metrics(self, version_id: str, row: PerformanceRow) -> Optional[ContentVersion]:
        version = self._versions.get(version_id)
        if version is not None:
            version.attach_metrics(row)
        return version


class SqlVersionRepository(VersionRepository):
    """
    SQLAlchemy-backed repository.

    Defaults to the local SQLite database from settings, so versions survive
    restarts on this machine but are not shared anywhere else.
    """

    def __init__(self, database_url: str = None):
        engine = get_engine(database_url)
        init_db(engine)
        # Keep loaded attributes usable after the session closes
        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
        )

    def save(self, version: ContentVersion) -> ContentVersion:
        with get_db_session(self._session_factory) as session:
            session.add(version)
        logger.debug(f"Saved content version {version.id}")
        return version

    def list(self) -> List[ContentVersion]:
        with get_db_session(self._session_factory) as session:
            return (
                session.query(ContentVersion)
                .order_by(ContentVersion.timestamp.asc())
                .all()
            )

    def get(self, version_id: str) -> Optional[ContentVersion]:
        with get_db_session(self._session_factory) as session:
            return session.get(ContentVersion, version_id)

    def update_metrics(self, version_id: str, row: PerformanceRow) -> Optional[ContentVersion]:
        with get_db_session(self._session_factory) as session:
            version = session.get(ContentVersion, version_id)
            if version is None:
                logger.warning(f"Cannot attach metrics, version {version_id} not found")
                return None
            version.attach_metrics(row)
            return version
