from pydantic import BaseModel
from shelfbook.modules.sections.schemas import SectionResponse
from typing import Optional, List


class PublicProfile(BaseModel):
    id: str
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    banner_url: Optional[str] = None
    theme: Optional[str] = None


class PublicProfilePage(BaseModel):
    profile: PublicProfile
    sections: List[SectionResponse]
