"""Account preferences model."""

from sqlalchemy import Boolean, Column, ForeignKey, String, true

from src.database import Base
from src.models.mixins import TimestampMixin
from src.models.user import new_id


class AccountPreferences(Base, TimestampMixin):
    """Per-user account settings, at most one row per user."""

    __tablename__ = "account_preferences"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    notifications_enabled = Column(Boolean, nullable=False, default=True, server_default=true())
    email_updates = Column(Boolean, nullable=False, default=True, server_default=true())
    preferred_vehicle = Column(String(200), nullable=True)
    payment_method_last4 = Column(String(4), nullable=True)
