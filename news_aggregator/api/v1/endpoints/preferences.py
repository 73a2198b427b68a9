import structlog
from fastapi import APIRouter, Depends

from ...dependencies import get_current_user_required, get_user_repository
from ....models.user import User
from ....repositories.user_repository import UserRepository
from ..schemas import PreferencesRequest, PreferencesResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=PreferencesResponse, response_model_exclude_none=True)
async def get_preferences(current_user: User = Depends(get_current_user_required)):
    return PreferencesResponse(preferences=list(current_user.preferences or []))


@router.put("", response_model=PreferencesResponse)
async def set_preferences(
    request: PreferencesRequest,
    current_user: User = Depends(get_current_user_required),
    users: UserRepository = Depends(get_user_repository)
):
    user = users.update_preferences(current_user, request.preferences)
    logger.info("Preferences updated", user_id=user.id, preferences=len(user.preferences))
    return PreferencesResponse(
        message="Preferences updated successfully",
        preferences=list(user.preferences)
    )
