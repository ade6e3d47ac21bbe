from fastapi import APIRouter, Depends
from shelfbook.database.supabase_client import get_supabase
from shelfbook.core.dependencies import get_current_profile, check_section_owner
from shelfbook.modules.profiles.schemas import ProfileResponse
from shelfbook.modules.sections.schemas import SectionCreate, SectionUpdate, SectionReorder, SectionResponse
from shelfbook.modules.sections.service import SectionService
from supabase import Client
from typing import List

router = APIRouter(prefix="/sections", tags=["sections"])


def get_section_service(supabase: Client = Depends(get_supabase)) -> SectionService:
    return SectionService(supabase)


@router.get("", response_model=List[SectionResponse])
async def list_sections(
    profile: ProfileResponse = Depends(get_current_profile),
    service: SectionService = Depends(get_section_service)
):
    """List the caller's sections in display order, hidden ones included"""
    return service.list_sections(profile.id)


@router.post("", response_model=SectionResponse, status_code=201)
async def create_section(
    section_data: SectionCreate,
    profile: ProfileResponse = Depends(get_current_profile),
    service: SectionService = Depends(get_section_service)
):
    """Add a section with the default content for its type"""
    return service.create_section(profile.id, section_data)


@router.put("/order", response_model=List[SectionResponse])
async def reorder_sections(
    order: SectionReorder,
    profile: ProfileResponse = Depends(get_current_profile),
    service: SectionService = Depends(get_section_service)
):
    """Set display order from a full list of section ids"""
    return service.reorder_sections(profile.id, order.section_ids)


@router.patch("/{section_id}", response_model=SectionResponse)
async def update_section(
    section_id: str,
    section_data: SectionUpdate,
    profile: ProfileResponse = Depends(get_current_profile),
    service: SectionService = Depends(get_section_service),
    supabase: Client = Depends(get_supabase)
):
    """Save title, content and visibility of one section"""
    section = check_section_owner(section_id, profile, supabase)
    return service.update_section(section_id, section_data, section["type"])


@router.delete("/{section_id}", status_code=204)
async def delete_section(
    section_id: str,
    profile: ProfileResponse = Depends(get_current_profile),
    service: SectionService = Depends(get_section_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete one section"""
    check_section_owner(section_id, profile, supabase)
    service.delete_section(section_id)
    return None
