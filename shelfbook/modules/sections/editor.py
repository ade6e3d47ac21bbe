"""
Draft state for editing a profile's sections.

The editor keeps one draft per section id. Drafts change only through
``update_draft`` and reach the store only through ``save_draft``. Every
successful write reloads the section list from the store.
"""

import logging
from enum import Enum
from pydantic import BaseModel
from shelfbook.modules.sections.content import SectionContent, SectionType, normalize_content
from shelfbook.modules.sections.schemas import SectionCreate, SectionUpdate, SectionResponse
from shelfbook.modules.sections.service import SectionService
from typing import Callable, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class DraftStatus(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class SectionDraft(BaseModel):
    title: str
    type: SectionType
    content: SectionContent
    visible: bool = True
    status: DraftStatus = DraftStatus.CLEAN

    @classmethod
    def from_section(cls, section: SectionResponse) -> "SectionDraft":
        return cls(
            title=section.title,
            type=SectionType(section.type),
            content=normalize_content(section.type, section.content),
            visible=section.visible,
        )


class SectionEditor:
    def __init__(self, service: SectionService, profile_id: str):
        self.service = service
        self.profile_id = profile_id
        self.sections: List[SectionResponse] = []
        self.drafts: Dict[str, SectionDraft] = {}

    def load(self) -> List[SectionResponse]:
        """Load sections and seed a clean draft for each"""
        self.sections = self.service.list_sections(self.profile_id)
        self.drafts = {}
        self._seed()
        return self.sections

    def reload(self, keep_dirty: bool = True) -> List[SectionResponse]:
        """Reload from the store; unsaved drafts of sections that still exist survive when keep_dirty"""
        previous = self.drafts if keep_dirty else {}
        self.sections = self.service.list_sections(self.profile_id)
        self.drafts = {
            section_id: draft for section_id, draft in previous.items()
            if draft.status == DraftStatus.DIRTY
        }
        self._seed()
        return self.sections

    def _seed(self):
        live_ids = set()
        for section in self.sections:
            live_ids.add(section.id)
            if section.id in self.drafts:
                continue
            try:
                self.drafts[section.id] = SectionDraft.from_section(section)
            except ValueError as e:
                logger.warning(f"Skipping section {section.id} with unsupported content: {e}")
        for section_id in list(self.drafts):
            if section_id not in live_ids:
                del self.drafts[section_id]

    def get_draft(self, section_id: str) -> SectionDraft:
        return self.drafts[section_id]

    def is_saving(self, section_id: str) -> bool:
        return self.drafts[section_id].status == DraftStatus.SAVING

    def is_dirty(self, section_id: str) -> bool:
        return self.drafts[section_id].status == DraftStatus.DIRTY

    def update_draft(self, section_id: str, transform: Callable[[SectionDraft], SectionDraft]) -> SectionDraft:
        """Apply a pure transform to one draft. Never touches the store."""
        draft = transform(self.drafts[section_id])
        status = DraftStatus.SAVING if self.is_saving(section_id) else DraftStatus.DIRTY
        self.drafts[section_id] = draft.model_copy(update={"status": status})
        return self.drafts[section_id]

    def edit_content(self, section_id: str, change: Callable[[SectionContent], SectionContent]) -> SectionDraft:
        return self.update_draft(section_id, lambda d: d.model_copy(update={"content": change(d.content)}))

    def set_title(self, section_id: str, title: str) -> SectionDraft:
        return self.update_draft(section_id, lambda d: d.model_copy(update={"title": title}))

    def set_visible(self, section_id: str, visible: bool) -> SectionDraft:
        return self.update_draft(section_id, lambda d: d.model_copy(update={"visible": visible}))

    def save_draft(self, section_id: str) -> bool:
        """
        Persist one draft. Returns False without writing if that draft is
        already being saved. On failure the draft keeps its edits and goes
        back to dirty.
        """
        draft = self.drafts[section_id]
        if draft.status == DraftStatus.SAVING:
            return False
        self.drafts[section_id] = draft.model_copy(update={"status": DraftStatus.SAVING})
        try:
            self.service.update_section(
                section_id,
                SectionUpdate(
                    title=draft.title,
                    content=draft.content.model_dump(),
                    visible=draft.visible,
                ),
                draft.type.value,
            )
        except HTTPException as e:
            logger.error(f"Failed to save section {section_id}: {e.detail}")
            self.drafts[section_id] = draft.model_copy(update={"status": DraftStatus.DIRTY})
            return False
        self.drafts[section_id] = draft.model_copy(update={"status": DraftStatus.CLEAN})
        try:
            self.reload()
        except HTTPException as e:
            logger.error(f"Saved section {section_id} but failed to reload sections: {e.detail}")
        return True

    def add_section(self, section_type: SectionType, title: Optional[str] = None) -> Optional[SectionResponse]:
        """Insert a section with the default payload at position len(sections)"""
        try:
            section = self.service.create_section(
                self.profile_id,
                SectionCreate(type=section_type, title=title),
                position=len(self.sections),
            )
        except HTTPException as e:
            logger.error(f"Failed to add {section_type} section: {e.detail}")
            return None
        self.reload()
        return section

    def delete_section(self, section_id: str, confirm: Callable[[str], bool]) -> bool:
        """Delete after confirm(section_id) returns True"""
        if not confirm(section_id):
            return False
        try:
            self.service.delete_section(section_id)
        except HTTPException as e:
            logger.error(f"Failed to delete section {section_id}: {e.detail}")
            return False
        self.reload()
        return True

    def move_section(self, section_id: str, new_index: int) -> bool:
        """Move one section to new_index and persist contiguous positions"""
        ids = [s.id for s in self.sections]
        if section_id not in ids:
            raise KeyError(section_id)
        ids.remove(section_id)
        new_index = max(0, min(new_index, len(ids)))
        ids.insert(new_index, section_id)
        try:
            self.service.reorder_sections(self.profile_id, ids)
        except HTTPException as e:
            logger.error(f"Failed to move section {section_id}: {e.detail}")
            return False
        self.reload()
        return True
