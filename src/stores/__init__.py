"""Store factory: picks the in-memory or database-backed variants once at startup."""

import logging
from dataclasses import dataclass

from sqlalchemy import Engine

from src.config import Settings
from src.database import create_db_engine, create_session_factory, init_db
from src.stores.base import HistoryPage, HistoryStore, PreferencesStore, PushTokenStore, UserStore
from src.stores.database import (
    DatabaseHistoryStore,
    DatabasePreferencesStore,
    DatabasePushTokenStore,
    DatabaseUserStore,
)
from src.stores.memory import (
    InMemoryHistoryStore,
    InMemoryPreferencesStore,
    InMemoryPushTokenStore,
    InMemoryUserStore,
)

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    """The process-wide store instances, injected into request handlers."""

    users: UserStore
    push_tokens: PushTokenStore
    history: HistoryStore
    preferences: PreferencesStore
    engine: Engine | None = None

    async def reset(self) -> None:
        """Clear every store, dependents before users."""
        await self.push_tokens.reset()
        await self.history.reset()
        await self.preferences.reset()
        await self.users.reset()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


def create_memory_stores() -> Stores:
    return Stores(
        users=InMemoryUserStore(),
        push_tokens=InMemoryPushTokenStore(),
        history=InMemoryHistoryStore(),
        preferences=InMemoryPreferencesStore(),
    )


def create_database_stores(database_url: str, create_tables: bool = False) -> Stores:
    engine = create_db_engine(database_url)
    if create_tables:
        init_db(engine)
    session_factory = create_session_factory(engine)
    return Stores(
        users=DatabaseUserStore(session_factory),
        push_tokens=DatabasePushTokenStore(session_factory),
        history=DatabaseHistoryStore(session_factory),
        preferences=DatabasePreferencesStore(session_factory),
        engine=engine,
    )


def create_stores(settings: Settings) -> Stores:
    """Build the stores for this process from configuration."""
    if settings.uses_database:
        logger.info("DATABASE_URL set, using database-backed stores")
        # SQLite has no migration step in local runs; PostgreSQL schema comes from alembic
        return create_database_stores(
            settings.database_url,
            create_tables=settings.database_url.startswith("sqlite"),
        )

    logger.warning("DATABASE_URL not set, using in-memory stores (dev/test only)")
    return create_memory_stores()


__all__ = [
    "HistoryPage",
    "HistoryStore",
    "PreferencesStore",
    "PushTokenStore",
    "Stores",
    "UserStore",
    "create_database_stores",
    "create_memory_stores",
    "create_stores",
]
