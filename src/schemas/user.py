"""User schemas."""

from src.models.enums import UserRole
from src.schemas.base import ApiModel, UtcDatetime


class UserRecord(ApiModel):
    """User as returned by the user store."""

    id: str
    email: str
    password_hash: str | None = None
    google_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    role: UserRole = UserRole.CLIENT
    created_at: UtcDatetime
    updated_at: UtcDatetime


class UserCreate(ApiModel):
    """Fields accepted by UserStore.create_user."""

    id: str | None = None
    email: str
    password_hash: str | None = None
    google_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    role: UserRole = UserRole.CLIENT


class UserUpdate(ApiModel):
    """Partial update for UserStore.update_user; only set fields are applied."""

    email: str | None = None
    password_hash: str | None = None
    google_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    role: UserRole | None = None


class UserResponse(ApiModel):
    """Session user exposed to clients. Never carries the password hash."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    role: UserRole
