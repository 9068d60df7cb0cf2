"""
App database connection and session management.

The app database stores organizations, users, groups, saved connections and
permission grants. User data lives behind the connection registry instead.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from typing import Generator

from dbworks.config import settings


def create_app_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the SQLAlchemy engine for the app database."""
    if database_url.startswith("sqlite"):
        # In-memory SQLite must share one connection across sessions
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        pool_size=20,
        max_overflow=30,
        pool_pre_ping=True,
        echo=echo,
        connect_args={'connect_timeout': 10}
    )


app_engine = create_app_engine(settings.DATABASE_URL, echo=settings.DEBUG)

AppSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=app_engine)

Base = declarative_base()


def get_app_db() -> Generator[Session, None, None]:
    """Dependency for App DB session."""
    db = AppSessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_app_db_context() -> Generator[Session, None, None]:
    """Context manager for App DB session."""
    db = AppSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
