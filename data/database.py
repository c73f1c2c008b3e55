"""
Database engine and sessions for the editor store.

Documents are kept as whole PDF blobs; one session per request.
"""
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from config.settings import settings
from utils.logging import get_logger
from .db_models import Base

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(engine: Engine):
    """SQLite ignores ON DELETE for text blocks unless foreign keys are switched on."""

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseManager:
    """Owns the engine and session factory for one database URL."""

    def __init__(self, database_url: Optional[str] = None):
        """
        Initialize database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, uses settings.database_url.
        """
        self.database_url = database_url or settings.database_url
        self.is_sqlite = self.database_url.startswith('sqlite')

        if self.is_sqlite:
            # Request handlers and the threadpool share connections
            self.engine = create_engine(
                self.database_url,
                connect_args={'check_same_thread': False}
            )
            _enable_sqlite_foreign_keys(self.engine)
        else:
            self.engine = create_engine(self.database_url, pool_pre_ping=True)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def create_tables(self):
        """Create documents and text_blocks tables if missing."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("database_tables_created", database_url=self.database_url)

    def drop_tables(self):
        """Drop all editor tables, discarding every open document."""
        Base.metadata.drop_all(bind=self.engine)
        logger.warning("database_tables_dropped", database_url=self.database_url)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager(database_url: Optional[str] = None) -> DatabaseManager:
    """Process-wide manager; database_url only matters on the first call."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    return _db_manager


def init_database(database_url: Optional[str] = None):
    """Create the editor tables on the shared manager."""
    get_db_manager(database_url).create_tables()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Session from the shared manager.

    Usage:
        with session_scope() as session:
            document = session.get(Document, document_id)
    """
    with get_db_manager().session() as session:
        yield session


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    with session_scope() as session:
        yield session
