"""Push token model for Expo device registrations."""

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from src.database import Base
from src.models.mixins import TimestampMixin
from src.models.user import new_id


class PushToken(Base, TimestampMixin):
    """Stores Expo push tokens registered by a user's devices."""

    __tablename__ = "push_tokens"
    __table_args__ = (
        UniqueConstraint("user_id", "expo_push_token", name="uq_push_tokens_user_token"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    expo_push_token = Column(String(255), nullable=False, index=True)
