from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from shelfbook.database.supabase_client import get_supabase
from shelfbook.core.errors import NotFoundError
from shelfbook.modules.profiles.schemas import ProfileResponse
from shelfbook.modules.profiles.service import ProfileService
from shelfbook.modules.public.renderer import ProfileRenderer
from shelfbook.modules.public.schemas import PublicProfile, PublicProfilePage
from shelfbook.modules.sections.schemas import SectionResponse
from shelfbook.modules.sections.service import SectionService
from supabase import Client
from typing import List, Optional, Tuple

# JSON lookup lives under /api/v1; the HTML page is mounted at the site root
router = APIRouter(prefix="/public", tags=["public"])
page_router = APIRouter(tags=["pages"])


def load_public_profile(username: str, supabase: Client) -> Tuple[ProfileResponse, List[SectionResponse]]:
    """Profile by username plus its visible sections in display order"""
    profile = ProfileService(supabase).get_profile_by_username(username)
    if profile is None:
        raise NotFoundError("Profile not found")
    sections = SectionService(supabase).list_sections(profile.id, visible_only=True)
    return profile, sections


@router.get("/{username}", response_model=PublicProfilePage)
async def get_public_profile(
    username: str,
    supabase: Client = Depends(get_supabase)
):
    """Public profile data for /{username}"""
    profile, sections = load_public_profile(username, supabase)
    return PublicProfilePage(
        profile=PublicProfile(**profile.model_dump(exclude={"user_id", "created_at", "updated_at"})),
        sections=sections,
    )


@page_router.get("/{username}", response_class=HTMLResponse)
async def view_profile_page(
    username: str,
    section: Optional[str] = None,
    supabase: Client = Depends(get_supabase)
):
    """Read-only public page; ?section=<id> picks the active tab"""
    profile, sections = load_public_profile(username, supabase)
    renderer = ProfileRenderer(profile, sections, active_section_id=section)
    return HTMLResponse(content=renderer.render_page())
