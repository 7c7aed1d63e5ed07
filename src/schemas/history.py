"""Service history schemas."""

from pydantic import Field

from src.models.enums import ServiceStatus
from src.schemas.base import ApiModel, UtcDatetime
from src.validation import IsoDateTime

MAX_PAGE_SIZE = 100


class HistoryEntryRecord(ApiModel):
    """Service history entry as returned by the history store."""

    id: str
    user_id: str
    vehicle: str
    service_type: str
    address: str
    scheduled_for: UtcDatetime
    completed_at: UtcDatetime | None = None
    price: float
    status: ServiceStatus
    notes: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class HistoryEntryCreate(ApiModel):
    """Create a service history entry."""

    vehicle: str = Field(..., min_length=1, max_length=200)
    service_type: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=500)
    scheduled_for: IsoDateTime
    price: float = Field(..., gt=0, allow_inf_nan=False)
    notes: str | None = Field(None, max_length=1000)


class HistoryStatusUpdate(ApiModel):
    """Move an entry to another status."""

    status: ServiceStatus


class HistoryQuery(ApiModel):
    """Pagination parameters for the history listing."""

    page: int = Field(1, gt=0)
    limit: int = Field(20, gt=0, le=MAX_PAGE_SIZE)


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class HistoryPageResponse(ApiModel):
    services: list[HistoryEntryRecord]
    pagination: Pagination
