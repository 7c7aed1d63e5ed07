"""Account preference schemas."""

from pydantic import Field, StrictBool, field_validator, model_validator

from src.schemas.base import ApiModel, UtcDatetime
from src.schemas.user import UserResponse


class PreferencesRecord(ApiModel):
    """Account preferences as returned by the preferences store."""

    user_id: str
    notifications_enabled: bool = True
    email_updates: bool = True
    preferred_vehicle: str | None = None
    payment_method_last4: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class PreferencesUpdate(ApiModel):
    """Partial preferences update. At least one recognized field is required."""

    notifications_enabled: StrictBool | None = None
    email_updates: StrictBool | None = None
    preferred_vehicle: str | None = Field(None, max_length=200)
    payment_method_last4: str | None = Field(None, pattern=r"^[0-9]{4}$")

    @field_validator("notifications_enabled", "email_updates")
    @classmethod
    def reject_null_flags(cls, value: bool | None) -> bool | None:
        if value is None:
            raise ValueError("Must be a boolean")
        return value

    @model_validator(mode="after")
    def require_any_field(self) -> "PreferencesUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self

    def changes(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class PreferencesResponse(ApiModel):
    preferences: PreferencesRecord


class AccountResponse(ApiModel):
    user: UserResponse
    preferences: PreferencesRecord
