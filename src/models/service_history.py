"""Service history model."""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text

from src.database import Base
from src.models.enums import ServiceStatus
from src.models.mixins import TimestampMixin
from src.models.user import new_id


class ServiceHistory(Base, TimestampMixin):
    """One wash-service booking owned by a user."""

    __tablename__ = "service_history"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    vehicle = Column(String(200), nullable=False)
    service_type = Column(String(100), nullable=False)
    address = Column(String(500), nullable=False)
    scheduled_for = Column(DateTime(timezone=True), nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    status = Column(String(20), nullable=False, default=ServiceStatus.SCHEDULED.value, index=True)
    notes = Column(Text, nullable=True)
