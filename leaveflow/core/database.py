"""
Database manager for SQLAlchemy
- One pooled engine per process, created at startup
- Table creation and reference-data seeding
- Session-per-request dependency for FastAPI
"""
import logging
from contextlib import contextmanager
from importlib import import_module
from typing import Generator, Optional

from sqlalchemy import create_engine, inspect, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from leaveflow.constants.constants import ROLE_IDS
from leaveflow.core.config import settings
from leaveflow.models.base import Base

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages database sessions and the schema lifecycle."""

    def __init__(self):
        self.engine: Optional[Engine] = None
        self.session_factory: Optional[sessionmaker] = None

    def init(self, database_url: str = None, **engine_kwargs):
        """Initialize the engine and create missing tables."""
        db_url = database_url or settings.DATABASE_URL
        try:
            self.engine = create_engine(db_url, **(engine_kwargs or self._engine_options(db_url)))
            self.session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
                autoflush=False,
            )
            self._setup_database()
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    def _engine_options(self, db_url: str) -> dict:
        options = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
        if db_url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
        else:
            options.update(
                pool_size=settings.DB_POOL_SIZE,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_recycle=300,
            )
        return options

    def _setup_database(self):
        """Initialize database schema"""
        for model in settings.DB_MODELS:
            import_module(model)
        logger.info(f"Models registered: {list(Base.metadata.tables.keys())}")
        Base.metadata.create_all(self.engine)
        logger.info(f"Tables present: {inspect(self.engine).get_table_names()}")

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Context manager for safe session handling"""
        if not self.session_factory:
            raise RuntimeError("DatabaseSessionManager not initialized")
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        with self.get_session() as session:
            session.execute(text("SELECT 1"))
        return True

    def close(self):
        """Cleanup connection pool"""
        if self.engine:
            self.engine.dispose()
            self.engine = None
            self.session_factory = None


def seed_roles(db: Session) -> None:
    """Insert the fixed role rows when they are missing."""
    from leaveflow.models.user import Role

    existing = set(db.execute(select(Role.role_id)).scalars().all())
    for name, role_id in ROLE_IDS.items():
        if role_id not in existing:
            db.add(Role(role_id=role_id, name=name))
            logger.info(f"Seeded role {name.value} ({role_id})")
    db.flush()


# Initialize session manager
session_manager = DatabaseSessionManager()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions
    Usage:
    @router.get("/")
    def endpoint(db: Session = Depends(get_db)):
        ...
    """
    with session_manager.get_session() as session:
        yield session
