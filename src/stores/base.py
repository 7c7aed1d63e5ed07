"""Store contracts shared by the in-memory and database-backed implementations.

Both variants of every store must be interchangeable from the caller's point
of view: same return shapes, same idempotence and ordering guarantees.
"""

from abc import ABC, abstractmethod
from typing import Any, NamedTuple

from src.models.enums import ServiceStatus
from src.schemas.account import PreferencesRecord
from src.schemas.history import HistoryEntryCreate, HistoryEntryRecord
from src.schemas.notification import PushTokenRecord
from src.schemas.user import UserCreate, UserRecord, UserUpdate


class HistoryPage(NamedTuple):
    entries: list[HistoryEntryRecord]
    total: int


class UserStore(ABC):
    """Identity records. Email (case-insensitive) and google_id are unique."""

    @abstractmethod
    async def find_by_email(self, email: str) -> UserRecord | None: ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> UserRecord | None: ...

    @abstractmethod
    async def find_by_google_id(self, google_id: str) -> UserRecord | None: ...

    @abstractmethod
    async def create_user(self, data: UserCreate) -> UserRecord:
        """Persist a new user. Raises ConflictError on duplicate email or google_id."""

    @abstractmethod
    async def update_user(self, user_id: str, updates: UserUpdate) -> UserRecord:
        """Merge the set fields of `updates`. Raises NotFoundError for unknown ids."""

    @abstractmethod
    async def reset(self) -> None: ...


class PushTokenStore(ABC):
    """Device endpoints, unique per (user_id, token)."""

    @abstractmethod
    async def save_push_token(self, user_id: str, token: str) -> PushTokenRecord:
        """Upsert: re-registering an existing pair refreshes updated_at."""

    @abstractmethod
    async def get_push_tokens_for_user(self, user_id: str) -> list[PushTokenRecord]: ...

    @abstractmethod
    async def get_all_push_tokens(self) -> list[PushTokenRecord]: ...

    @abstractmethod
    async def remove_push_token(self, token: str) -> None:
        """Delete every row holding this token value, whoever owns it."""

    @abstractmethod
    async def reset(self) -> None: ...


class HistoryStore(ABC):
    """Service bookings, owned by one user each."""

    @abstractmethod
    async def get_history_for_user(self, user_id: str, page: int, limit: int) -> HistoryPage:
        """Entries newest-scheduled first; `page` is 1-based, `total` is unpaged."""

    @abstractmethod
    async def add_history_entry(self, user_id: str, entry: HistoryEntryCreate) -> HistoryEntryRecord:
        """Persist a new entry with status `scheduled` and no completion time."""

    @abstractmethod
    async def update_history_status(
        self, user_id: str, entry_id: str, status: ServiceStatus
    ) -> HistoryEntryRecord | None:
        """Returns None when the user has no such entry.

        Moving to `completed` stamps completed_at; other statuses leave it alone.
        """

    @abstractmethod
    async def get_service_by_id(self, user_id: str, entry_id: str) -> HistoryEntryRecord | None: ...

    @abstractmethod
    async def reset(self) -> None: ...


class PreferencesStore(ABC):
    """One preferences record per user, created lazily with defaults."""

    @abstractmethod
    async def get_preferences(self, user_id: str) -> PreferencesRecord:
        """Never absent: a default record is persisted on first access."""

    @abstractmethod
    async def update_preferences(self, user_id: str, changes: dict[str, Any]) -> PreferencesRecord:
        """Merge `changes` onto the existing (or default) record."""

    @abstractmethod
    async def reset(self) -> None: ...


def page_offset(page: int, limit: int) -> int:
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive integers")
    return (page - 1) * limit
