"""Account API endpoints."""

from fastapi import APIRouter, Depends

from src.api.dependencies import CurrentUser, PreferencesStoreDep, rate_limit_by_ip
from src.schemas.account import AccountResponse, PreferencesResponse, PreferencesUpdate
from src.schemas.user import UserResponse

router = APIRouter(
    prefix="/api/account",
    tags=["account"],
    dependencies=[Depends(rate_limit_by_ip("general"))],
)


@router.get("", response_model=AccountResponse)
async def get_account(current_user: CurrentUser, preferences: PreferencesStoreDep):
    """Get the session user with their preferences (defaults on first access)."""
    return AccountResponse(
        user=UserResponse.model_validate(current_user),
        preferences=await preferences.get_preferences(current_user.id),
    )


@router.put("/preferences", response_model=PreferencesResponse)
async def update_preferences(
    update: PreferencesUpdate,
    current_user: CurrentUser,
    preferences: PreferencesStoreDep,
):
    """Merge the provided fields onto the stored preferences."""
    updated = await preferences.update_preferences(current_user.id, update.changes())
    return PreferencesResponse(preferences=updated)
