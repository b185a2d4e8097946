"""
Database session management - SQLAlchemy engine and session factory.

Nothing here is created at import time: create_app() builds the engine from
its Settings, creates the tables and stores the session factory on
app.state, and get_db() reads it from there for each request.
"""

from typing import Iterator

from fastapi import Request
from sqlalchemy import Engine, create_engine  # Creates the database connection pool
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import Session, sessionmaker  # Factory for creating database sessions

from app.core.config import Settings


def build_engine(settings: Settings) -> Engine:
    """
    Create the engine for the configured database.

    - SQLite: check_same_thread=False because FastAPI may use a session
      from a different thread than the one that opened it. ":memory:" gets
      a StaticPool so every session sees the same in-memory database.
    - Postgres: pool_pre_ping=True checks pooled connections before use
      (avoids errors from stale connections after a DB restart).

    Raises:
        ValueError: If DB_TYPE is not supported
    """
    url = settings.database_url

    if url.startswith("sqlite"):
        if url.endswith(":memory:"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """
    Session factory bound to the engine.

    - autocommit=False: you must call db.commit()
    - autoflush=False: you control when flushes happen
    """
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create any missing tables."""
    from app.db.base import Base
    # Model modules register their tables on Base.metadata when imported
    from app.models import calendar_mux, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...

    One session per request; close() always runs, even if the route raises.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
