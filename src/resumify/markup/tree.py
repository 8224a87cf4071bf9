"""Immutable markup tree produced by the compositor.

The tree is plain data: frozen dataclasses and tuples only, so two trees
composed from the same inputs compare equal and serialize identically.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from resumify.templates.base import (
        Palette,
        SpacingScale,
        TemplateDescriptor,
        TypeScale,
    )

__all__ = [
    "ContactItem",
    "Header",
    "Item",
    "Link",
    "MarkupTree",
    "Section",
    "SectionKind",
    "Style",
    "TextLine",
]


class SectionKind(StrEnum):
    """Content sections, declared in canonical render order."""

    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    PROJECTS = "projects"
    COURSEWORK = "coursework"
    TECHNICAL_SKILLS = "technical_skills"
    SKILLS = "skills"
    LANGUAGES = "languages"
    ACHIEVEMENTS = "achievements"
    CERTIFICATIONS = "certifications"


@dataclass(frozen=True)
class TextLine:
    """One line of free text; ``bullet`` marks a pre-bulleted line kept verbatim."""

    text: str
    bullet: bool = False


@dataclass(frozen=True)
class ContactItem:
    kind: str
    text: str
    href: str | None = None


@dataclass(frozen=True)
class Link:
    label: str
    href: str


@dataclass(frozen=True)
class Header:
    name: str
    contacts: tuple[ContactItem, ...] = ()
    photo_url: str | None = None


@dataclass(frozen=True)
class Item:
    """An entry inside a section (a job, a degree, a project, a skill row)."""

    title: str = ""
    subtitle: str = ""
    dates: str = ""
    lines: tuple[TextLine, ...] = ()
    detail_label: str = ""
    detail: str = ""
    bullets: tuple[str, ...] = ()
    links: tuple[Link, ...] = ()


@dataclass(frozen=True)
class Section:
    kind: SectionKind
    title: str
    lines: tuple[TextLine, ...] = ()
    items: tuple[Item, ...] = ()
    text: str = ""
    bullets: tuple[str, ...] = ()


@dataclass(frozen=True)
class Style:
    """Resolved visual settings for one composition."""

    descriptor: TemplateDescriptor
    palette: Palette
    type_scale: TypeScale
    spacing: SpacingScale
    font_stack: str


@dataclass(frozen=True)
class MarkupTree:
    title: str
    style: Style
    header: Header | None
    sections: tuple[Section, ...]

    @property
    def section_kinds(self) -> tuple[SectionKind, ...]:
        return tuple(section.kind for section in self.sections)

    def dumps(self, *, standalone: bool = True) -> str:
        """Serialize to HTML; ``standalone=False`` yields the preview fragment."""
        from resumify.markup.html import render_fragment, render_page

        return render_page(self) if standalone else render_fragment(self)
