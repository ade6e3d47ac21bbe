from fastapi import APIRouter, Depends, UploadFile, File
from shelfbook.database.supabase_client import get_supabase
from shelfbook.core.dependencies import get_current_profile
from shelfbook.modules.media.service import MediaService, ImagePurpose
from shelfbook.modules.profiles.schemas import ProfileResponse
from supabase import Client

router = APIRouter(prefix="/profile", tags=["media"])


def get_media_service(supabase: Client = Depends(get_supabase)) -> MediaService:
    return MediaService(supabase)


@router.post("/avatar", response_model=ProfileResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    profile: ProfileResponse = Depends(get_current_profile),
    service: MediaService = Depends(get_media_service)
):
    """Upload a profile picture and save its public URL"""
    data = await file.read()
    return service.upload_image(profile, ImagePurpose.AVATAR, file.filename, data, file.content_type)


@router.post("/banner", response_model=ProfileResponse)
async def upload_banner(
    file: UploadFile = File(...),
    profile: ProfileResponse = Depends(get_current_profile),
    service: MediaService = Depends(get_media_service)
):
    """Upload a banner image and save its public URL"""
    data = await file.read()
    return service.upload_image(profile, ImagePurpose.BANNER, file.filename, data, file.content_type)
