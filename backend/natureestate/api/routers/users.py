from fastapi import APIRouter, Depends
import logging

from natureestate.api.routers.auth import get_user_service
from natureestate.core.auth import Identity, get_current_user
from natureestate.models.user import MessageResponse, PublicProfile, User, UserUpdate
from natureestate.modules.users.service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=User)
async def get_current_user_profile(
    identity: Identity = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_me(identity)


@router.put("/me", response_model=User)
async def update_current_user_profile(
    user_data: UserUpdate,
    identity: Identity = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """Update the caller's profile; only fields present in the body change."""
    return await user_service.update_me(identity, user_data)


@router.delete("/me", response_model=MessageResponse)
async def delete_current_user(
    identity: Identity = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """Delete the caller's account together with their listings and saved data."""
    await user_service.delete_me(identity)
    return MessageResponse(message="Account deleted successfully")


@router.get("/{user_id}", response_model=PublicProfile)
async def get_public_profile(
    user_id: str,
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_public_profile(user_id)
