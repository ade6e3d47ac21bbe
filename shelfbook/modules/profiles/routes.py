from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPAuthorizationCredentials
from shelfbook.core.dependencies import (
    security, get_auth_service, get_current_user_id, get_profile_service, resolve_optional_user,
)
from shelfbook.core.errors import NotFoundError
from shelfbook.modules.profiles.schemas import ProfileCreate, ProfileUpdate, ProfileResponse
from shelfbook.modules.auth.service import AuthService
from shelfbook.modules.profiles.service import ProfileService, validate_username
from typing import Dict, Optional

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the authenticated user's profile"""
    profile = service.get_profile_by_user_id(user_data["id"])
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


@router.post("", response_model=ProfileResponse, status_code=201)
async def create_profile(
    profile_data: ProfileCreate,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service),
    service: ProfileService = Depends(get_profile_service)
):
    """
    Create the profile for the session user, or for body.user_id when there
    is no session yet (right after sign-up, before email confirmation).
    """
    # Reject a bad username before the token is sent to Supabase Auth
    validate_username(profile_data.username)
    user_data = resolve_optional_user(credentials, auth_service)
    session_user_id = user_data["id"] if user_data else None
    return service.create_profile(profile_data, session_user_id)


@router.patch("", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Update display name, bio, avatar/banner URL or theme"""
    return service.update_profile(user_data["id"], profile_data)
