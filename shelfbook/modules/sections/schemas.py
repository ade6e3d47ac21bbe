from pydantic import BaseModel
from shelfbook.modules.sections.content import SectionType
from typing import Optional, List, Dict, Any
from datetime import datetime


class SectionCreate(BaseModel):
    type: SectionType
    title: Optional[str] = None


class SectionUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[Dict[str, Any]] = None
    visible: Optional[bool] = None


class SectionReorder(BaseModel):
    section_ids: List[str]


class SectionResponse(BaseModel):
    id: str
    profile_id: str
    title: str
    type: str
    content: Optional[Dict[str, Any]] = None
    position: int = 0
    visible: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
