"""SQLAlchemy-backed store implementations.

Push-token and preferences upserts use the dialect's native
INSERT ... ON CONFLICT on PostgreSQL and SQLite, and fall back to
select-then-write elsewhere.
"""

import logging
from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from src.errors import ConflictError, NotFoundError
from src.models import AccountPreferences, PushToken, ServiceHistory, User
from src.models.enums import ServiceStatus
from src.models.mixins import utcnow
from src.models.user import new_id
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
from src.stores.memory import normalize_email

logger = logging.getLogger(__name__)

_NATIVE_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _native_insert(session: Session, model: Any) -> Any | None:
    """Dialect insert supporting ON CONFLICT, or None if unsupported."""
    factory = _NATIVE_INSERTS.get(session.get_bind().dialect.name)
    return factory(model) if factory else None


class _DatabaseStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory


class DatabaseUserStore(_DatabaseStore, UserStore):
    def _find_one(self, *criteria: Any) -> UserRecord | None:
        with self._session_factory() as session:
            user = session.query(User).filter(*criteria).first()
            return UserRecord.model_validate(user) if user else None

    async def find_by_email(self, email: str) -> UserRecord | None:
        return self._find_one(User.email == normalize_email(email))

    async def find_by_id(self, user_id: str) -> UserRecord | None:
        return self._find_one(User.id == user_id)

    async def find_by_google_id(self, google_id: str) -> UserRecord | None:
        return self._find_one(User.google_id == google_id)

    async def create_user(self, data: UserCreate) -> UserRecord:
        if await self.find_by_email(data.email):
            raise ConflictError("Email already in use")
        if data.google_id and await self.find_by_google_id(data.google_id):
            raise ConflictError("Google account already linked")

        values = data.model_dump(exclude={"id", "email", "role"})
        user = User(
            **values,
            id=data.id or new_id(),
            email=normalize_email(data.email),
            role=data.role.value,
        )
        try:
            with self._session_factory.begin() as session:
                session.add(user)
                session.flush()
                return UserRecord.model_validate(user)
        except IntegrityError as e:
            logger.info(f"Rejected duplicate user {user.email}")
            raise ConflictError("Email or Google account already in use") from e

    async def update_user(self, user_id: str, updates: UserUpdate) -> UserRecord:
        changes = updates.model_dump(exclude_unset=True)
        if changes.get("email") is not None:
            changes["email"] = normalize_email(changes["email"])
        if changes.get("role") is not None:
            changes["role"] = changes["role"].value

        try:
            with self._session_factory.begin() as session:
                user = session.get(User, user_id)
                if user is None:
                    raise NotFoundError(f"User {user_id} not found")
                for field, value in changes.items():
                    setattr(user, field, value)
                user.updated_at = utcnow()
                session.flush()
                return UserRecord.model_validate(user)
        except IntegrityError as e:
            raise ConflictError("Email or Google account already in use") from e

    async def reset(self) -> None:
        with self._session_factory.begin() as session:
            session.query(User).delete()


class DatabasePushTokenStore(_DatabaseStore, PushTokenStore):
    async def save_push_token(self, user_id: str, token: str) -> PushTokenRecord:
        now = utcnow()
        with self._session_factory.begin() as session:
            stmt = _native_insert(session, PushToken)
            if stmt is not None:
                session.execute(
                    stmt.values(
                        id=new_id(),
                        user_id=user_id,
                        expo_push_token=token,
                        created_at=now,
                        updated_at=now,
                    ).on_conflict_do_update(
                        index_elements=["user_id", "expo_push_token"],
                        set_={"updated_at": now},
                    )
                )
            else:
                existing = (
                    session.query(PushToken)
                    .filter(PushToken.user_id == user_id, PushToken.expo_push_token == token)
                    .first()
                )
                if existing:
                    existing.updated_at = now
                else:
                    session.add(PushToken(user_id=user_id, expo_push_token=token))
                session.flush()

            row = (
                session.query(PushToken)
                .filter(PushToken.user_id == user_id, PushToken.expo_push_token == token)
                .populate_existing()
                .one()
            )
            return PushTokenRecord.model_validate(row)

    async def get_push_tokens_for_user(self, user_id: str) -> list[PushTokenRecord]:
        with self._session_factory() as session:
            rows = (
                session.query(PushToken)
                .filter(PushToken.user_id == user_id)
                .order_by(PushToken.created_at)
                .all()
            )
            return [PushTokenRecord.model_validate(row) for row in rows]

    async def get_all_push_tokens(self) -> list[PushTokenRecord]:
        with self._session_factory() as session:
            rows = session.query(PushToken).order_by(PushToken.created_at).all()
            return [PushTokenRecord.model_validate(row) for row in rows]

    async def remove_push_token(self, token: str) -> None:
        with self._session_factory.begin() as session:
            session.query(PushToken).filter(PushToken.expo_push_token == token).delete()

    async def reset(self) -> None:
        with self._session_factory.begin() as session:
            session.query(PushToken).delete()


def _find_entry(session: Session, user_id: str, entry_id: str) -> ServiceHistory | None:
    return (
        session.query(ServiceHistory)
        .filter(ServiceHistory.id == entry_id, ServiceHistory.user_id == user_id)
        .first()
    )


class DatabaseHistoryStore(_DatabaseStore, HistoryStore):
    async def get_history_for_user(self, user_id: str, page: int, limit: int) -> HistoryPage:
        offset = page_offset(page, limit)
        with self._session_factory() as session:
            query = session.query(ServiceHistory).filter(ServiceHistory.user_id == user_id)
            rows = (
                query.order_by(ServiceHistory.scheduled_for.desc(), ServiceHistory.created_at.desc())
                .limit(limit)
                .offset(offset)
                .all()
            )
            return HistoryPage(
                entries=[HistoryEntryRecord.model_validate(row) for row in rows],
                total=query.count(),
            )

    async def add_history_entry(self, user_id: str, entry: HistoryEntryCreate) -> HistoryEntryRecord:
        row = ServiceHistory(
            **entry.model_dump(exclude={"price"}),
            user_id=user_id,
            price=round(entry.price, 2),
            status=ServiceStatus.SCHEDULED.value,
            completed_at=None,
        )
        with self._session_factory.begin() as session:
            session.add(row)
            session.flush()
            return HistoryEntryRecord.model_validate(row)

    async def update_history_status(
        self, user_id: str, entry_id: str, status: ServiceStatus
    ) -> HistoryEntryRecord | None:
        with self._session_factory.begin() as session:
            row = _find_entry(session, user_id, entry_id)
            if row is None:
                return None

            now = utcnow()
            row.status = status.value
            row.updated_at = now
            if status == ServiceStatus.COMPLETED:
                row.completed_at = now
            session.flush()
            return HistoryEntryRecord.model_validate(row)

    async def get_service_by_id(self, user_id: str, entry_id: str) -> HistoryEntryRecord | None:
        with self._session_factory() as session:
            row = _find_entry(session, user_id, entry_id)
            return HistoryEntryRecord.model_validate(row) if row else None

    async def reset(self) -> None:
        with self._session_factory.begin() as session:
            session.query(ServiceHistory).delete()


class DatabasePreferencesStore(_DatabaseStore, PreferencesStore):
    def _select(self, session: Session, user_id: str) -> AccountPreferences | None:
        return (
            session.query(AccountPreferences)
            .filter(AccountPreferences.user_id == user_id)
            .populate_existing()
            .first()
        )

    def _upsert(self, session: Session, user_id: str, changes: dict[str, Any]) -> None:
        now = utcnow()
        stmt = _native_insert(session, AccountPreferences)
        if stmt is not None:
            defaults = {
                "id": new_id(),
                "user_id": user_id,
                "notifications_enabled": True,
                "email_updates": True,
                "created_at": now,
                "updated_at": now,
            }
            stmt = stmt.values(**{**defaults, **changes})
            if changes:
                stmt = stmt.on_conflict_do_update(
                    index_elements=["user_id"], set_={**changes, "updated_at": now}
                )
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=["user_id"])
            session.execute(stmt)
            return

        prefs = self._select(session, user_id)
        if prefs is None:
            prefs = AccountPreferences(user_id=user_id, notifications_enabled=True, email_updates=True)
            session.add(prefs)
        for field, value in changes.items():
            setattr(prefs, field, value)
        if changes:
            prefs.updated_at = now
        session.flush()

    async def get_preferences(self, user_id: str) -> PreferencesRecord:
        with self._session_factory.begin() as session:
            prefs = self._select(session, user_id)
            if prefs is None:
                self._upsert(session, user_id, {})
                prefs = self._select(session, user_id)
            return PreferencesRecord.model_validate(prefs)

    async def update_preferences(self, user_id: str, changes: dict[str, Any]) -> PreferencesRecord:
        with self._session_factory.begin() as session:
            self._upsert(session, user_id, changes)
            return PreferencesRecord.model_validate(self._select(session, user_id))

    async def reset(self) -> None:
        with self._session_factory.begin() as session:
            session.query(AccountPreferences).delete()
