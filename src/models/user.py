"""User model."""

import uuid

from sqlalchemy import Column, String

from src.database import Base
from src.models.enums import UserRole
from src.models.mixins import TimestampMixin


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base, TimestampMixin):
    """User model for authentication and ownership."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lowercased
    password_hash = Column(String(255), nullable=True)  # None for social-only accounts
    google_id = Column(String(255), unique=True, nullable=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    profile_image_url = Column(String(1000), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.CLIENT.value)
