import logging
from enum import Enum
from supabase import Client
from shelfbook.config import settings
from shelfbook.core.errors import UploadError, ValidationError
from shelfbook.modules.profiles.schemas import ProfileResponse
from shelfbook.modules.profiles.service import ProfileService
from typing import Optional

logger = logging.getLogger(__name__)


class ImagePurpose(str, Enum):
    AVATAR = "avatar"
    BANNER = "banner"


PROFILE_FIELDS = {
    ImagePurpose.AVATAR: "avatar_url",
    ImagePurpose.BANNER: "banner_url",
}

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB

FOLDERS = {
    ImagePurpose.AVATAR: "avatars",
    ImagePurpose.BANNER: "banners",
}


def storage_path(profile_id: str, purpose: ImagePurpose, filename: Optional[str]) -> str:
    """avatars/<profile id>-avatar.<ext> or banners/<profile id>-banner.<ext>"""
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].lower() or "bin"
    else:
        ext = "bin"
    return f"{FOLDERS[purpose]}/{profile_id}-{purpose.value}.{ext}"


class MediaService:
    def __init__(self, supabase: Client, bucket: Optional[str] = None):
        self.supabase = supabase
        self.bucket = bucket or settings.storage_bucket
        self.profiles = ProfileService(supabase)

    def upload_image(
        self,
        profile: ProfileResponse,
        purpose: str,
        filename: Optional[str],
        data: bytes,
        content_type: Optional[str] = None,
    ) -> ProfileResponse:
        """
        Upload an avatar or banner, overwriting the previous object, and point
        the profile at its public URL. The profile row is only written after
        the upload succeeded.
        """
        try:
            purpose = ImagePurpose(purpose)
        except ValueError:
            raise ValidationError("Image purpose must be 'avatar' or 'banner'")
        if not data:
            raise ValidationError("File is empty")
        if len(data) > MAX_IMAGE_SIZE:
            raise ValidationError("File is too large (max 5MB)")

        path = storage_path(profile.id, purpose, filename)
        logger.info(f"Uploading {purpose.value} for profile {profile.id} to {self.bucket}/{path} ({len(data)} bytes)")
        bucket = self.supabase.storage.from_(self.bucket)
        try:
            bucket.upload(
                path,
                data,
                {"content-type": content_type or "application/octet-stream", "upsert": "true"},
            )
        except Exception as e:
            logger.error(f"{purpose.value.capitalize()} upload failed: {e}")
            raise UploadError(f"Failed to upload {purpose.value}: {e}")

        public_url = bucket.get_public_url(path)
        field = PROFILE_FIELDS[purpose]
        self.profiles.set_profile_fields(profile.id, {field: public_url})
        logger.info(f"Saved {field} for profile {profile.id}")

        updated = self.profiles.get_profile_by_id(profile.id)
        return updated or profile.model_copy(update={field: public_url})
