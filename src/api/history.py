"""Service history API endpoints."""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    CurrentUser,
    HistoryStoreDep,
    rate_limit_by_ip,
    rate_limit_by_user,
)
from src.errors import NotFoundError
from src.schemas.history import (
    HistoryEntryCreate,
    HistoryEntryRecord,
    HistoryPageResponse,
    HistoryQuery,
    HistoryStatusUpdate,
    Pagination,
)

router = APIRouter(
    prefix="/api/history",
    tags=["history"],
    dependencies=[Depends(rate_limit_by_ip("general"))],
)


@router.get("", response_model=HistoryPageResponse)
async def list_history(
    query: Annotated[HistoryQuery, Query()],
    current_user: CurrentUser,
    history: HistoryStoreDep,
):
    """List the caller's services, newest scheduled first."""
    page = await history.get_history_for_user(current_user.id, query.page, query.limit)
    return HistoryPageResponse(
        services=page.entries,
        pagination=Pagination(
            page=query.page,
            limit=query.limit,
            total=page.total,
            total_pages=math.ceil(page.total / query.limit),
        ),
    )


@router.post(
    "",
    response_model=HistoryEntryRecord,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_by_user("create_resource"))],
)
async def create_history_entry(
    entry: HistoryEntryCreate,
    current_user: CurrentUser,
    history: HistoryStoreDep,
):
    """Book a new service."""
    return await history.add_history_entry(current_user.id, entry)


@router.get("/{service_id}", response_model=HistoryEntryRecord)
async def get_history_entry(service_id: str, current_user: CurrentUser, history: HistoryStoreDep):
    entry = await history.get_service_by_id(current_user.id, service_id)
    if entry is None:
        raise NotFoundError("Service not found")
    return entry


@router.patch("/{service_id}/status", response_model=HistoryEntryRecord)
async def update_history_status(
    service_id: str,
    update: HistoryStatusUpdate,
    current_user: CurrentUser,
    history: HistoryStoreDep,
):
    """Move a service to another status. Any transition is accepted."""
    entry = await history.update_history_status(current_user.id, service_id, update.status)
    if entry is None:
        raise NotFoundError("Service not found")
    return entry
