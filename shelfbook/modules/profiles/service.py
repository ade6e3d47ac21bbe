import logging
import re
from datetime import datetime, timezone
from supabase import Client
from shelfbook.core.errors import (
    AuthorizationError, ConflictError, NotFoundError, UpstreamError, ValidationError,
    is_unique_violation,
)
from shelfbook.modules.profiles.schemas import ProfileCreate, ProfileUpdate, ProfileResponse
from typing import Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")


def validate_username(username: Optional[str]) -> str:
    """Check length and charset and return the lowercased username. Makes no network call."""
    if not username:
        raise ValidationError("Username is required")
    if len(username) < USERNAME_MIN_LENGTH or len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters")
    if not USERNAME_PATTERN.fullmatch(username):
        raise ValidationError("Username can only contain letters, numbers, and underscores")
    return username.lower()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _find_one(self, column: str, value: str, columns: str = "*") -> Optional[Dict[str, Any]]:
        result = self.supabase.table("profiles")\
            .select(columns)\
            .eq(column, value)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_profile_by_user_id(self, user_id: str) -> Optional[ProfileResponse]:
        """Profile owned by an auth user, or None"""
        try:
            row = self._find_one("user_id", user_id)
            return ProfileResponse(**row) if row else None
        except Exception as e:
            raise UpstreamError(str(e))

    def get_profile_by_id(self, profile_id: str) -> Optional[ProfileResponse]:
        try:
            row = self._find_one("id", profile_id)
            return ProfileResponse(**row) if row else None
        except Exception as e:
            raise UpstreamError(str(e))

    def get_profile_by_username(self, username: str) -> Optional[ProfileResponse]:
        """Case-insensitive lookup; usernames are stored lowercase"""
        try:
            row = self._find_one("username", username.lower())
            return ProfileResponse(**row) if row else None
        except Exception as e:
            raise UpstreamError(str(e))

    def username_taken(self, username: str) -> bool:
        try:
            return self._find_one("username", username.lower(), columns="username") is not None
        except Exception as e:
            raise UpstreamError(str(e))

    def ensure_username_available(self, username: str) -> None:
        if self.username_taken(username):
            raise ConflictError("Username is already taken")

    def create_profile(self, profile_data: ProfileCreate, session_user_id: Optional[str]) -> ProfileResponse:
        """
        Provision the profile row for an identity.

        The session identity wins over an explicit user_id (the explicit one
        is only there for sign-ups that have no session yet). Uniqueness is
        checked up front, then the privileged RPC is tried and a plain insert
        runs only if the RPC produced no row. The pre-checks and the writes
        are not transactional; the table's unique constraints are the backstop.
        """
        username = validate_username(profile_data.username)

        user_id = session_user_id or profile_data.user_id
        if not user_id:
            raise AuthorizationError("Unauthorized")

        self.ensure_username_available(username)

        try:
            existing = self._find_one("user_id", user_id, columns="id")
        except Exception as e:
            raise UpstreamError(str(e))
        if existing:
            raise ConflictError("Profile already exists")

        display_name = profile_data.display_name or profile_data.username.strip()

        profile = self._create_via_rpc(user_id, username, display_name)
        if profile is None:
            profile = self._create_via_insert(user_id, username, display_name)
        logger.info(f"Provisioned profile {profile.id} ({profile.username}) for user {user_id}")
        return profile

    def _create_via_rpc(self, user_id: str, username: str, display_name: str) -> Optional[ProfileResponse]:
        """Privileged path. Returns the created profile, or None if the RPC failed in any way."""
        params = {
            "p_user_id": user_id,
            "p_username": username,
            "p_display_name": display_name,
        }
        try:
            result = self.supabase.rpc("create_profile_for_user", params).execute()
        except Exception as e:
            logger.warning(f"create_profile_for_user RPC failed, falling back to direct insert: {e}")
            return None

        data = result.data
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            logger.warning("create_profile_for_user RPC returned no data, falling back to direct insert")
            return None
        if isinstance(data, dict):
            return ProfileResponse(**data)

        # RPC returns the new profile id
        try:
            profile = self.get_profile_by_id(str(data))
        except HTTPException as e:
            logger.warning(f"Could not read back profile {data}: {e.detail}")
            profile = None
        if profile is not None:
            return profile
        return ProfileResponse(id=str(data), user_id=user_id, username=username, display_name=display_name)

    def _create_via_insert(self, user_id: str, username: str, display_name: str) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles").insert({
                "user_id": user_id,
                "username": username,
                "display_name": display_name,
            }).execute()
        except Exception as e:
            logger.error(f"Profile insert error: {e}")
            if is_unique_violation(e):
                return self._resolve_insert_conflict(user_id, username)
            raise UpstreamError(str(e))

        if not result.data:
            raise UpstreamError("Failed to create profile")
        return ProfileResponse(**result.data[0])

    def _resolve_insert_conflict(self, user_id: str, username: str) -> ProfileResponse:
        """
        The insert hit a unique constraint. If the row that now exists is the
        one this call asked for, the RPC wrote it before failing: return it.
        Otherwise someone else won the race for the username or the user.
        """
        try:
            row = self._find_one("user_id", user_id)
        except Exception as e:
            raise UpstreamError(str(e))
        if row and row.get("username") == username:
            logger.warning(f"Profile for user {user_id} was already written by the RPC; reusing it")
            return ProfileResponse(**row)
        if row:
            raise ConflictError("Profile already exists")
        raise ConflictError("Username is already taken")

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the fields present in the request on the user's profile"""
        update_data = profile_data.model_dump(exclude_unset=True)
        update_data["updated_at"] = utc_now_iso()
        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("user_id", user_id)\
                .execute()

            if not result.data:
                raise NotFoundError("Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise UpstreamError(str(e))

    def set_profile_fields(self, profile_id: str, fields: Dict[str, Any]) -> None:
        """Write fields onto a profile by id, stamping updated_at"""
        update_data = dict(fields)
        update_data["updated_at"] = utc_now_iso()
        try:
            self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", profile_id)\
                .execute()
        except Exception as e:
            raise UpstreamError(str(e))
