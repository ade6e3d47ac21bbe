"""
Core dependencies for route protection and ownership checks
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from shelfbook.core.errors import AuthorizationError, ForbiddenError, NotFoundError, UpstreamError
from shelfbook.database.supabase_client import get_supabase
from shelfbook.modules.auth.service import AuthService
from shelfbook.modules.profiles.schemas import ProfileResponse
from shelfbook.modules.profiles.service import ProfileService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 from us rather than FastAPI's default
security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise AuthorizationError("Unauthorized")
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def resolve_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials],
    auth_service: AuthService
) -> Optional[dict]:
    """Current user if a valid bearer token was sent, else None"""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return auth_service.get_current_user(credentials.credentials)
    except AuthorizationError:
        return None


def get_current_profile(
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
) -> ProfileResponse:
    """Profile owned by the authenticated user"""
    profile = service.get_profile_by_user_id(user_data["id"])
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


def check_section_owner(section_id: str, profile: ProfileResponse, supabase: Client) -> Dict[str, Any]:
    """Return the section row if it belongs to the profile"""
    try:
        result = supabase.table("sections")\
            .select("*")\
            .eq("id", section_id)\
            .limit(1)\
            .execute()
    except Exception as e:
        logger.error(f"Error loading section {section_id}: {e}")
        raise UpstreamError(str(e))
    if not result.data:
        raise NotFoundError("Section not found")
    section = result.data[0]
    if section.get("profile_id") != profile.id:
        raise ForbiddenError("You can only modify sections on your own profile")
    return section
