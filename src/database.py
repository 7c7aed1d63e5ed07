"""Database engine and session factory for the relational stores."""

from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base: Any = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine for the configured database.

    SQLite is accepted for local runs and tests; an in-memory SQLite URL is
    pinned to a single shared connection so every session sees the same data.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create the session factory the stores open their sessions from."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Initialize the database by creating all tables."""
    # Import all models here so they are registered with Base.metadata
    from src import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
