"""
Dashboard page controller.

Loads the identity behind an access token, then the profile (creating one
with placeholder values if the user has none yet), then the ordered
sections. Section edits go through ``editor``; profile edits and image
uploads write to the store and reload.
"""

import logging
from supabase import Client
from shelfbook.modules.auth.service import AuthService
from shelfbook.modules.media.service import ImagePurpose, MediaService
from shelfbook.modules.profiles.schemas import ProfileCreate, ProfileUpdate, ProfileResponse
from shelfbook.modules.profiles.service import ProfileService
from shelfbook.modules.sections.editor import SectionEditor
from shelfbook.modules.sections.service import SectionService
from typing import Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def placeholder_username(user_id: str) -> str:
    return f"user_{user_id.replace('-', '')[:8]}"


def placeholder_display_name(email: Optional[str]) -> str:
    if email and email.split("@")[0]:
        return email.split("@")[0]
    return "New User"


class DashboardSession:
    def __init__(self, supabase: Client, access_token: str):
        self.supabase = supabase
        self.access_token = access_token
        self.profiles = ProfileService(supabase)
        self.media = MediaService(supabase)
        self.user: Optional[Dict[str, Any]] = None
        self.profile: Optional[ProfileResponse] = None
        self.editor: Optional[SectionEditor] = None

    def load(self) -> Optional[ProfileResponse]:
        """Identity, then profile, then sections. Returns None if no profile could be found or created."""
        self.user = AuthService(self.supabase).get_current_user(self.access_token)
        profile = self.profiles.get_profile_by_user_id(self.user["id"])
        if profile is None:
            logger.warning(f"Profile not found for user {self.user['id']}, attempting to create")
            profile = self._provision_missing_profile()
        self.profile = profile
        if profile is None:
            self.editor = None
            return None
        self.editor = SectionEditor(SectionService(self.supabase), profile.id)
        self.editor.load()
        return profile

    def _provision_missing_profile(self) -> Optional[ProfileResponse]:
        try:
            return self.profiles.create_profile(
                ProfileCreate(
                    username=placeholder_username(self.user["id"]),
                    display_name=placeholder_display_name(self.user.get("email")),
                ),
                session_user_id=self.user["id"],
            )
        except HTTPException as e:
            logger.error(f"Failed to create profile for user {self.user['id']}: {e.detail}")
            return None

    def reload(self) -> Optional[ProfileResponse]:
        if self.user is None:
            return self.load()
        self.profile = self.profiles.get_profile_by_user_id(self.user["id"])
        if self.profile is not None and self.editor is not None:
            self.editor.reload()
        return self.profile

    def update_profile(self, profile_data: ProfileUpdate) -> bool:
        if self.profile is None:
            return False
        try:
            self.profiles.update_profile(self.user["id"], profile_data)
        except HTTPException as e:
            logger.error(f"Failed to update profile {self.profile.id}: {e.detail}")
            return False
        self.reload()
        return True

    def upload_image(self, purpose: ImagePurpose, filename: str, data: bytes, content_type: Optional[str] = None) -> Optional[str]:
        """Upload and persist an avatar/banner. Returns an error message for the user, or None on success."""
        if self.profile is None:
            return "Profile not loaded"
        try:
            self.media.upload_image(self.profile, purpose, filename, data, content_type)
        except HTTPException as e:
            logger.error(f"{ImagePurpose(purpose).value.capitalize()} upload failed: {e.detail}")
            return e.detail
        self.reload()
        return None

    def upload_avatar(self, filename: str, data: bytes, content_type: Optional[str] = None) -> Optional[str]:
        return self.upload_image(ImagePurpose.AVATAR, filename, data, content_type)

    def upload_banner(self, filename: str, data: bytes, content_type: Optional[str] = None) -> Optional[str]:
        return self.upload_image(ImagePurpose.BANNER, filename, data, content_type)
