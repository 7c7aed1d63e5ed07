"""In-memory store implementations.

Used when no database is configured and as the default backend in tests.
Secondary indexes mirror the unique constraints of the relational schema.
Upserts are check-then-write without locking; two concurrent requests for the
same key may race, the same way the database fallback path can.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from src.errors import ConflictError, NotFoundError
from src.models.enums import ServiceStatus
from src.schemas.account import PreferencesRecord
from src.schemas.history import HistoryEntryCreate, HistoryEntryRecord
from src.schemas.notification import PushTokenRecord
from src.schemas.user import UserCreate, UserRecord, UserUpdate
from src.stores.base import (
    HistoryPage,
    HistoryStore,
    PreferencesStore,
    PushTokenStore,
    UserStore,
    page_offset,
)


def _now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


def normalize_email(email: str) -> str:
    return email.strip().lower()


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._email_index: dict[str, str] = {}
        self._google_index: dict[str, str] = {}

    def _get(self, user_id: str | None) -> UserRecord | None:
        user = self._users.get(user_id) if user_id else None
        return user.model_copy() if user else None

    async def find_by_email(self, email: str) -> UserRecord | None:
        return self._get(self._email_index.get(normalize_email(email)))

    async def find_by_id(self, user_id: str) -> UserRecord | None:
        return self._get(user_id)

    async def find_by_google_id(self, google_id: str) -> UserRecord | None:
        return self._get(self._google_index.get(google_id))

    async def create_user(self, data: UserCreate) -> UserRecord:
        email = normalize_email(data.email)
        if email in self._email_index:
            raise ConflictError("Email already in use")
        if data.google_id and data.google_id in self._google_index:
            raise ConflictError("Google account already linked")

        now = _now()
        user = UserRecord(
            **data.model_dump(exclude={"id", "email"}),
            id=data.id or _new_id(),
            email=email,
            created_at=now,
            updated_at=now,
        )
        if user.id in self._users:
            raise ConflictError("User id already exists")

        self._users[user.id] = user
        self._email_index[email] = user.id
        if user.google_id:
            self._google_index[user.google_id] = user.id
        return user.model_copy()

    async def update_user(self, user_id: str, updates: UserUpdate) -> UserRecord:
        existing = self._users.get(user_id)
        if existing is None:
            raise NotFoundError(f"User {user_id} not found")

        changes = updates.model_dump(exclude_unset=True)
        if changes.get("email") is not None:
            changes["email"] = normalize_email(changes["email"])
            owner = self._email_index.get(changes["email"])
            if owner and owner != user_id:
                raise ConflictError("Email already in use")
        if changes.get("google_id") is not None:
            owner = self._google_index.get(changes["google_id"])
            if owner and owner != user_id:
                raise ConflictError("Google account already linked")

        updated = existing.model_copy(update={**changes, "updated_at": _now()})

        if updated.email != existing.email:
            self._email_index.pop(existing.email, None)
            self._email_index[updated.email] = user_id
        if updated.google_id != existing.google_id:
            if existing.google_id:
                self._google_index.pop(existing.google_id, None)
            if updated.google_id:
                self._google_index[updated.google_id] = user_id

        self._users[user_id] = updated
        return updated.model_copy()

    async def reset(self) -> None:
        self._users.clear()
        self._email_index.clear()
        self._google_index.clear()


class InMemoryPushTokenStore(PushTokenStore):
    def __init__(self) -> None:
        self._tokens: list[PushTokenRecord] = []

    async def save_push_token(self, user_id: str, token: str) -> PushTokenRecord:
        now = _now()
        for index, existing in enumerate(self._tokens):
            if existing.user_id == user_id and existing.expo_push_token == token:
                refreshed = existing.model_copy(update={"updated_at": now})
                self._tokens[index] = refreshed
                return refreshed.model_copy()

        record = PushTokenRecord(
            id=_new_id(),
            user_id=user_id,
            expo_push_token=token,
            created_at=now,
            updated_at=now,
        )
        self._tokens.append(record)
        return record.model_copy()

    async def get_push_tokens_for_user(self, user_id: str) -> list[PushTokenRecord]:
        return [t.model_copy() for t in self._tokens if t.user_id == user_id]

    async def get_all_push_tokens(self) -> list[PushTokenRecord]:
        return [t.model_copy() for t in self._tokens]

    async def remove_push_token(self, token: str) -> None:
        self._tokens = [t for t in self._tokens if t.expo_push_token != token]

    async def reset(self) -> None:
        self._tokens.clear()


class InMemoryHistoryStore(HistoryStore):
    def __init__(self) -> None:
        self._entries: dict[str, list[HistoryEntryRecord]] = {}

    def _sorted(self, user_id: str) -> list[HistoryEntryRecord]:
        return sorted(
            self._entries.get(user_id, []),
            key=lambda e: (e.scheduled_for, e.created_at),
            reverse=True,
        )

    async def get_history_for_user(self, user_id: str, page: int, limit: int) -> HistoryPage:
        offset = page_offset(page, limit)
        entries = self._sorted(user_id)
        return HistoryPage(
            entries=[e.model_copy() for e in entries[offset : offset + limit]],
            total=len(entries),
        )

    async def add_history_entry(self, user_id: str, entry: HistoryEntryCreate) -> HistoryEntryRecord:
        now = _now()
        record = HistoryEntryRecord(
            **entry.model_dump(exclude={"price"}),
            id=_new_id(),
            user_id=user_id,
            price=round(entry.price, 2),
            status=ServiceStatus.SCHEDULED,
            completed_at=None,
            created_at=now,
            updated_at=now,
        )
        self._entries.setdefault(user_id, []).append(record)
        return record.model_copy()

    async def update_history_status(
        self, user_id: str, entry_id: str, status: ServiceStatus
    ) -> HistoryEntryRecord | None:
        entries = self._entries.get(user_id, [])
        for index, existing in enumerate(entries):
            if existing.id != entry_id:
                continue
            now = _now()
            changes: dict[str, Any] = {"status": status, "updated_at": now}
            if status == ServiceStatus.COMPLETED:
                changes["completed_at"] = now
            updated = existing.model_copy(update=changes)
            entries[index] = updated
            return updated.model_copy()
        return None

    async def get_service_by_id(self, user_id: str, entry_id: str) -> HistoryEntryRecord | None:
        for entry in self._entries.get(user_id, []):
            if entry.id == entry_id:
                return entry.model_copy()
        return None

    async def reset(self) -> None:
        self._entries.clear()


class InMemoryPreferencesStore(PreferencesStore):
    def __init__(self) -> None:
        self._preferences: dict[str, PreferencesRecord] = {}

    def _get_or_create(self, user_id: str) -> PreferencesRecord:
        if user_id not in self._preferences:
            now = _now()
            self._preferences[user_id] = PreferencesRecord(
                user_id=user_id, created_at=now, updated_at=now
            )
        return self._preferences[user_id]

    async def get_preferences(self, user_id: str) -> PreferencesRecord:
        return self._get_or_create(user_id).model_copy()

    async def update_preferences(self, user_id: str, changes: dict[str, Any]) -> PreferencesRecord:
        current = self._get_or_create(user_id)
        updated = current.model_copy(update={**changes, "updated_at": _now()})
        self._preferences[user_id] = updated
        return updated.model_copy()

    async def reset(self) -> None:
        self._preferences.clear()
