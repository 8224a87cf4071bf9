"""Template-agnostic data contracts for resume composition.

These TypedDicts define the shape of data that flows from the document
store to the markup compositor.  The compositor depends ONLY on these
contracts (not ORM) so it stays a pure function and the storage layer
can evolve independently.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, TypedDict

from resumify.templates import DEFAULT_TEMPLATE_SETTINGS

if TYPE_CHECKING:
    from resumify.data.models import Resume

__all__ = [
    "CourseworkEntry",
    "EducationEntry",
    "ExperienceEntry",
    "PersonalInfo",
    "ProjectEntry",
    "ResumeData",
    "TechnicalSkillCategory",
    "TemplateSettings",
    "complete_template_settings",
    "resume_to_data",
]


class PersonalInfo(TypedDict, total=False):
    """Name, contact fields and optional profile photo."""

    first_name: str
    last_name: str
    email: str
    phone: str
    location: str
    website: str
    linkedin: str
    github: str
    profile_photo_url: str
    profile_photo_asset_id: str


class ExperienceEntry(TypedDict, total=False):
    """A single work-experience record."""

    company: str
    position: str
    location: str
    start_date: str  # ISO date string
    end_date: str
    current: bool
    description: str
    achievements: list[str]


class EducationEntry(TypedDict, total=False):
    """A single education record."""

    institution: str
    degree: str
    field: str
    location: str
    start_date: str
    end_date: str
    current: bool
    gpa: str
    achievements: list[str]


class ProjectEntry(TypedDict, total=False):
    """A single project record."""

    name: str
    description: str
    technologies: list[str]
    start_date: str
    end_date: str
    url: str
    github: str
    highlights: list[str]


class CourseworkEntry(TypedDict, total=False):
    name: str


class TechnicalSkillCategory(TypedDict, total=False):
    category: str
    items: list[str]


class TemplateSettings(TypedDict):
    """Always fully populated; defaults fill anything missing."""

    template: str
    color_theme: str
    font_size: str
    spacing: str
    font: str


class ResumeData(TypedDict, total=False):
    """Top-level bundle handed to the compositor."""

    id: str
    owner_id: str
    title: str
    personal_info: PersonalInfo | None
    summary: str | None
    experience: list[ExperienceEntry]
    education: list[EducationEntry]
    projects: list[ProjectEntry]
    coursework: list[CourseworkEntry]
    technical_skills: list[TechnicalSkillCategory]
    skills: list[str]
    languages: list[str]
    achievements: list[str]
    certifications: list[str]
    template_settings: TemplateSettings
    revision: int


def complete_template_settings(settings: dict | None) -> TemplateSettings:
    """Fill any missing template-setting keys with their defaults."""
    merged = dict(DEFAULT_TEMPLATE_SETTINGS)
    for key, value in (settings or {}).items():
        if key in merged and value:
            merged[key] = value
    return merged  # type: ignore[return-value]


def resume_to_data(resume: Resume) -> ResumeData:
    """Snapshot an ORM row into a detached :class:`ResumeData`.

    The snapshot is a deep copy so a background render never observes
    edits made to the row after it was taken.
    """
    data: ResumeData = {
        "id": resume.id,
        "owner_id": resume.owner_id,
        "title": resume.title,
        "personal_info": copy.deepcopy(resume.personal_info),
        "summary": resume.summary,
        "experience": copy.deepcopy(resume.experience or []),
        "education": copy.deepcopy(resume.education or []),
        "projects": copy.deepcopy(resume.projects or []),
        "coursework": copy.deepcopy(resume.coursework or []),
        "technical_skills": copy.deepcopy(resume.technical_skills or []),
        "skills": list(resume.skills or []),
        "languages": list(resume.languages or []),
        "achievements": list(resume.achievements or []),
        "certifications": list(resume.certifications or []),
        "template_settings": complete_template_settings(resume.template_settings),
        "revision": resume.revision,
    }
    return data
