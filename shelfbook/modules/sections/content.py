"""
Typed section content.

A section's ``content`` column is JSON whose shape depends on the section's
``type`` tag. In Python it is one of three models; ``normalize_content`` turns
stored JSON into the right one, ``validate_content`` does the same for
request bodies but refuses payloads that do not carry the key the type needs.
The edit helpers are pure: they return a new content object.
"""

from enum import Enum
from pydantic import BaseModel
from shelfbook.core.errors import ValidationError
from typing import Any, Dict, List, Optional, Union


class SectionType(str, Enum):
    TEXT_LIST = "text_list"
    LINKS = "links"
    GALLERY = "gallery"


class TextListContent(BaseModel):
    items: List[str] = []


class LinkItem(BaseModel):
    title: str = ""
    url: str = ""


class LinksContent(BaseModel):
    links: List[LinkItem] = []


class GalleryImage(BaseModel):
    url: str = ""
    caption: Optional[str] = None


class GalleryContent(BaseModel):
    images: List[GalleryImage] = []


SectionContent = Union[TextListContent, LinksContent, GalleryContent]

CONTENT_MODELS = {
    SectionType.TEXT_LIST: TextListContent,
    SectionType.LINKS: LinksContent,
    SectionType.GALLERY: GalleryContent,
}

# JSON key holding the list for each type
CONTENT_KEYS = {
    SectionType.TEXT_LIST: "items",
    SectionType.LINKS: "links",
    SectionType.GALLERY: "images",
}


def normalize_content(section_type: Union[SectionType, str], raw: Any) -> SectionContent:
    """Coerce stored JSON into the content model for the type; missing arrays become empty"""
    model = CONTENT_MODELS[SectionType(section_type)]
    if not isinstance(raw, dict):
        raw = {}
    return model(**{k: v for k, v in raw.items() if v is not None})


def validate_content(section_type: Union[SectionType, str], raw: Dict[str, Any]) -> SectionContent:
    """Validate a request payload against the type tag"""
    section_type = SectionType(section_type)
    key = CONTENT_KEYS[section_type]
    if not isinstance(raw, dict) or not isinstance(raw.get(key), list):
        raise ValidationError(f"Content for a {section_type.value} section must have a '{key}' list")
    try:
        return CONTENT_MODELS[section_type](**raw)
    except ValueError as e:
        raise ValidationError(f"Invalid {section_type.value} content: {e}")


def default_content(section_type: Union[SectionType, str]) -> SectionContent:
    section_type = SectionType(section_type)
    if section_type == SectionType.TEXT_LIST:
        return TextListContent(items=["First item", "Second item"])
    if section_type == SectionType.LINKS:
        return LinksContent(links=[LinkItem(title="My Link", url="https://example.com")])
    return GalleryContent(images=[])


def default_title(section_type: Union[SectionType, str]) -> str:
    return "New " + SectionType(section_type).value.replace("_", " ")


# text_list

def text_items_from_text(text: str) -> List[str]:
    """One item per line, blank lines dropped"""
    return [line for line in text.split("\n") if line.strip()]


def text_items_to_text(content: TextListContent) -> str:
    return "\n".join(content.items)


def set_text_items(content: TextListContent, text: str) -> TextListContent:
    return content.model_copy(update={"items": text_items_from_text(text)})


# links and gallery

def _check_index(entries: list, index: int) -> None:
    if index < 0 or index >= len(entries):
        raise IndexError(f"No entry at index {index}")


def add_link(content: LinksContent, title: str = "", url: str = "") -> LinksContent:
    return content.model_copy(update={"links": content.links + [LinkItem(title=title, url=url)]})


def update_link(content: LinksContent, index: int, title: Optional[str] = None, url: Optional[str] = None) -> LinksContent:
    _check_index(content.links, index)
    links = list(content.links)
    changes = {}
    if title is not None:
        changes["title"] = title
    if url is not None:
        changes["url"] = url
    links[index] = links[index].model_copy(update=changes)
    return content.model_copy(update={"links": links})


def remove_link(content: LinksContent, index: int) -> LinksContent:
    _check_index(content.links, index)
    return content.model_copy(update={"links": content.links[:index] + content.links[index + 1:]})


def add_image(content: GalleryContent, url: str = "", caption: Optional[str] = None) -> GalleryContent:
    return content.model_copy(update={"images": content.images + [GalleryImage(url=url, caption=caption)]})


def update_image(content: GalleryContent, index: int, url: Optional[str] = None, caption: Optional[str] = None) -> GalleryContent:
    _check_index(content.images, index)
    images = list(content.images)
    changes = {}
    if url is not None:
        changes["url"] = url
    if caption is not None:
        changes["caption"] = caption
    images[index] = images[index].model_copy(update=changes)
    return content.model_copy(update={"images": images})


def remove_image(content: GalleryContent, index: int) -> GalleryContent:
    _check_index(content.images, index)
    return content.model_copy(update={"images": content.images[:index] + content.images[index + 1:]})
