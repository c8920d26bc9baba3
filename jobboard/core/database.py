"""
Database connection and session management
"""
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool
import structlog

from jobboard.core.config import Settings, settings as default_settings

logger = structlog.get_logger()

# Base class for models
Base = declarative_base()


class Database:
    """Owns the engine and session factory for one process"""

    def __init__(self, url: str, **engine_kwargs):
        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def create_tables(self) -> None:
        """Create tables for all registered models"""
        # Register models on Base.metadata
        import jobboard.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("database_initialized")

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("database_disposed")


def database_connect_args(config: Settings) -> dict:
    """Driver arguments; PyMySQL enables TLS for any non-empty ssl dict"""
    if not config.DB_SSL:
        return {}
    if config.DB_SSL_CA:
        return {"ssl": {"ca": config.DB_SSL_CA}}
    return {"ssl": {"check_hostname": False}}


def create_database(config: Optional[Settings] = None) -> Database:
    """Build the pooled engine used by the API"""
    config = config or default_settings
    return Database(
        config.database_url,
        connect_args=database_connect_args(config),
        poolclass=QueuePool,
        pool_size=config.DATABASE_POOL_SIZE,
        max_overflow=config.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=280,
        echo=config.DEBUG,
    )


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting database session
    Yields a session bound to the application's engine and closes it after use
    """
    db = request.app.state.database.session()
    try:
        yield db
    except Exception as e:
        logger.error("database_session_error", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()
