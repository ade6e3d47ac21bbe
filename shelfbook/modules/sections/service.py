import logging
from supabase import Client
from shelfbook.core.errors import NotFoundError, UpstreamError, ValidationError
from shelfbook.modules.profiles.service import utc_now_iso
from shelfbook.modules.sections.content import (
    SectionType, default_content, default_title, validate_content,
)
from shelfbook.modules.sections.schemas import SectionCreate, SectionUpdate, SectionResponse
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class SectionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_sections(self, profile_id: str, visible_only: bool = False) -> List[SectionResponse]:
        """Sections of a profile in display order"""
        try:
            query = self.supabase.table("sections")\
                .select("*")\
                .eq("profile_id", profile_id)
            if visible_only:
                query = query.eq("visible", True)
            result = query.order("position").execute()
            return [SectionResponse(**section) for section in result.data or []]
        except Exception as e:
            raise UpstreamError(str(e))

    def get_section(self, section_id: str) -> Optional[SectionResponse]:
        try:
            result = self.supabase.table("sections")\
                .select("*")\
                .eq("id", section_id)\
                .limit(1)\
                .execute()
            return SectionResponse(**result.data[0]) if result.data else None
        except Exception as e:
            raise UpstreamError(str(e))

    def create_section(self, profile_id: str, section_data: SectionCreate, position: Optional[int] = None) -> SectionResponse:
        """Add a section with the default payload for its type, appended after the existing ones"""
        try:
            if position is None:
                position = len(self.list_sections(profile_id))
            section_type = SectionType(section_data.type)
            result = self.supabase.table("sections").insert({
                "profile_id": profile_id,
                "title": section_data.title or default_title(section_type),
                "type": section_type.value,
                "content": default_content(section_type).model_dump(),
                "position": position,
                "visible": True,
            }).execute()

            if not result.data:
                raise UpstreamError("Failed to create section")

            return SectionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise UpstreamError(str(e))

    def update_section(self, section_id: str, section_data: SectionUpdate, section_type: str) -> SectionResponse:
        """Write title/content/visible; content must match the section's type tag"""
        update_data = {"updated_at": utc_now_iso()}
        if section_data.title is not None:
            update_data["title"] = section_data.title
        if section_data.content is not None:
            update_data["content"] = validate_content(section_type, section_data.content).model_dump()
        if section_data.visible is not None:
            update_data["visible"] = section_data.visible
        try:
            result = self.supabase.table("sections")\
                .update(update_data)\
                .eq("id", section_id)\
                .execute()

            if not result.data:
                raise NotFoundError("Section not found")

            return SectionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise UpstreamError(str(e))

    def delete_section(self, section_id: str) -> bool:
        """Delete one section; the others keep their positions"""
        try:
            result = self.supabase.table("sections")\
                .delete()\
                .eq("id", section_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise UpstreamError(str(e))

    def reorder_sections(self, profile_id: str, section_ids: List[str]) -> List[SectionResponse]:
        """Rewrite positions 0..n-1 in the given order. The ids must be exactly the profile's sections."""
        current = self.list_sections(profile_id)
        if len(section_ids) != len(set(section_ids)) or set(section_ids) != {s.id for s in current}:
            raise ValidationError("section_ids must list every section of the profile exactly once")
        positions = {s.id: s.position for s in current}
        try:
            for index, section_id in enumerate(section_ids):
                if positions[section_id] == index:
                    continue
                self.supabase.table("sections")\
                    .update({"position": index, "updated_at": utc_now_iso()})\
                    .eq("id", section_id)\
                    .execute()
        except Exception as e:
            logger.error(f"Reorder failed for profile {profile_id}: {e}")
            raise UpstreamError(str(e))
        return self.list_sections(profile_id)
