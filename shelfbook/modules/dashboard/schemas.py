from pydantic import BaseModel
from shelfbook.modules.profiles.schemas import ProfileResponse
from shelfbook.modules.sections.schemas import SectionResponse
from typing import List


class DashboardResponse(BaseModel):
    profile: ProfileResponse
    sections: List[SectionResponse]
