"""
Read-only rendering of a public profile page.

The renderer tracks which section is active (the first one unless another
is selected) and dispatches on the section's type tag to a Jinja2 partial.
Unknown type tags render nothing.
"""

import logging
from pathlib import Path
from urllib.parse import urlparse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from shelfbook.modules.profiles.schemas import ProfileResponse
from shelfbook.modules.sections.content import SectionType, normalize_content
from shelfbook.modules.sections.schemas import SectionResponse
from typing import List, Optional

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

SAFE_URL_SCHEMES = {"http", "https", "mailto"}


def safe_url(url: Optional[str]) -> str:
    """Drop javascript:/data: and other schemes from user-supplied hrefs"""
    if not url:
        return "#"
    try:
        scheme = urlparse(url.strip()).scheme.lower()
    except ValueError:
        return "#"
    if scheme and scheme not in SAFE_URL_SCHEMES:
        return "#"
    return url.strip()


env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)
env.filters["safe_url"] = safe_url

SECTION_TEMPLATES = {
    SectionType.TEXT_LIST: "sections/text_list.html",
    SectionType.LINKS: "sections/links.html",
    SectionType.GALLERY: "sections/gallery.html",
}


class ProfileRenderer:
    def __init__(self, profile: ProfileResponse, sections: List[SectionResponse], active_section_id: Optional[str] = None):
        self.profile = profile
        self.sections = list(sections)
        self.active_section_id = self.sections[0].id if self.sections else ""
        if active_section_id:
            self.select(active_section_id)

    def select(self, section_id: str) -> bool:
        """Make section_id active; unknown ids leave the current selection"""
        if any(s.id == section_id for s in self.sections):
            self.active_section_id = section_id
            return True
        return False

    @property
    def active_section(self) -> Optional[SectionResponse]:
        for section in self.sections:
            if section.id == self.active_section_id:
                return section
        return None

    def render_section(self, section: SectionResponse) -> str:
        try:
            section_type = SectionType(section.type)
        except ValueError:
            logger.debug(f"No renderer for section type {section.type!r}")
            return ""
        try:
            content = normalize_content(section_type, section.content)
        except ValueError as e:
            logger.warning(f"Skipping section {section.id} with unsupported content: {e}")
            return ""
        return env.get_template(SECTION_TEMPLATES[section_type]).render(section=section, content=content)

    def render_active(self) -> str:
        section = self.active_section
        return self.render_section(section) if section else ""

    def render_page(self) -> str:
        return env.get_template("profile.html").render(
            profile=self.profile,
            sections=self.sections,
            active_section_id=self.active_section_id,
            active_html=self.render_active(),
        )
