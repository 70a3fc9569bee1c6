"""Profile routes for the signed-in user."""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from eventhub.core.database import get_session
from eventhub.core.responses import success_response
from eventhub.core.security import Caller, get_caller
from eventhub.schemas import ProfileRead, ProfileUpdate
from eventhub.services.profile_service import UserProfileService

router = APIRouter(prefix="/api/profile", tags=["profile"])


def get_profile_service(session: Session = Depends(get_session)) -> UserProfileService:
    return UserProfileService(session)


@router.get("")
async def get_profile(
    caller: Caller = Depends(get_caller),
    service: UserProfileService = Depends(get_profile_service),
):
    """Return the caller's own profile."""
    profile = service.get(caller.user_id)
    return success_response(ProfileRead(**service.to_read_data(profile)))


@router.put("")
async def update_profile(
    data: ProfileUpdate,
    caller: Caller = Depends(get_caller),
    service: UserProfileService = Depends(get_profile_service),
):
    """
    Update the caller's own profile.

    Only fields present in the body change; id, email and role cannot be
    changed here.
    """
    profile = service.update(caller.user_id, data)
    return success_response(
        ProfileRead(**service.to_read_data(profile)), "Profile updated successfully"
    )
