"""Database connection and session management."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from contextlib import contextmanager
import logging

from .config import get_settings, PROJECT_ROOT

logger = logging.getLogger(__name__)

Base = declarative_base()


def get_engine(database_url: str = None):
    """Create database engine."""
    db_url = database_url or get_settings().database_url

    # Handle relative SQLite paths
    if db_url.startswith("sqlite:///") and not db_url.startswith("sqlite:////"):
        # Relative path - make it relative to project root
        db_path = db_url.replace("sqlite:///", "")
        if db_path and db_path != ":memory:":
            full_path = PROJECT_ROOT / db_path
            full_path.parent.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{full_path}"

    return create_engine(
        db_url,
        echo=False,  # Set to True for SQL debugging
        connect_args={"check_same_thread": False} if "sqlite" in db_url else {}
    )


def get_session_factory(database_url: str = None):
    """Create session factory."""
    engine = get_engine(database_url)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session(session_factory=None) -> Session:
    """Context manager for database sessions."""
    SessionLocal = session_factory or get_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine=None):
    """Initialize the database (create all tables)."""
    # Import models to register them with Base
    from .models import version

    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database initialized at: {engine.url}")
    return engine


def reset_db(engine=None):
    """Reset the database (drop and recreate all tables)."""
    from .models import version

    engine = engine or get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.info("Database reset complete.")
