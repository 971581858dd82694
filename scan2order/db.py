"""
Database connection management.

The SQL order backend needs an engine and a session factory. Nothing is
created at import time: ``create_session_factory`` is called by the
application factory (or a test) with the URL it wants.

Environment variables:
    - DATABASE_URL: SQLAlchemy connection URL (see config.py for the default)
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from . import config
from .models import Base


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """
    Build an engine for ``database_url`` (defaults to config.DATABASE_URL).

    SQLite files get their parent directory created; an in-memory SQLite URL
    uses a StaticPool so every session sees the same database.
    """
    url = make_url(database_url or config.DATABASE_URL)

    if url.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True, echo=False)

    connect_args = {"check_same_thread": False}
    if not url.database or url.database == ":memory:":
        return create_engine(
            url,
            connect_args=connect_args,
            poolclass=StaticPool,
            echo=False,
        )

    Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args=connect_args, echo=False)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the tables if needed and return a session factory bound to ``engine``."""
    Base.metadata.create_all(bind=engine)
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Transactional scope: commit on success, roll back on error, always close."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
