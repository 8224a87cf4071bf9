"""Pydantic schemas for resume API endpoints.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from resumify.services.resume import MAX_SUMMARY_LENGTH, MAX_TITLE_LENGTH
from resumify.templates import (
    DEFAULT_TEMPLATE_SETTINGS,
    is_registered_template,
    is_registered_theme,
)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Visibility = Literal["private", "public"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PersonalInfo(CamelModel):
    """Header block; the photo pair is managed by the photo endpoints only."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., description="Contact email address")
    phone: str | None = None
    location: str | None = None
    website: str | None = None
    linkedin: str | None = None
    github: str | None = None

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        value = value.strip()
        if not _EMAIL.match(value):
            raise ValueError("Invalid email address")
        return value


class PublicPersonalInfo(CamelModel):
    """Stored header block as returned to readers; every field may be absent."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    website: str | None = None
    linkedin: str | None = None
    github: str | None = None
    profile_photo_url: str | None = None


class PersonalInfoView(PublicPersonalInfo):
    profile_photo_asset_id: str | None = None


class ExperienceEntry(CamelModel):
    company: str
    position: str
    location: str | None = None
    start_date: str
    end_date: str | None = None
    current: bool = False
    description: str = ""
    achievements: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _current_has_no_end(self) -> ExperienceEntry:
        if self.current:
            self.end_date = None
        return self


class EducationEntry(CamelModel):
    institution: str
    degree: str
    field: str
    location: str | None = None
    start_date: str
    end_date: str | None = None
    current: bool = False
    gpa: str | None = None
    achievements: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _current_has_no_end(self) -> EducationEntry:
        if self.current:
            self.end_date = None
        return self


class ProjectEntry(CamelModel):
    name: str
    description: str = ""
    technologies: list[str] = Field(default_factory=list)
    start_date: str | None = None
    end_date: str | None = None
    url: str | None = None
    github: str | None = None
    highlights: list[str] = Field(default_factory=list)


class CourseworkEntry(CamelModel):
    name: str


class TechnicalSkillCategory(CamelModel):
    category: str
    items: list[str] = Field(default_factory=list)


class TemplateSettings(CamelModel):
    template: str = DEFAULT_TEMPLATE_SETTINGS["template"]
    color_theme: str = DEFAULT_TEMPLATE_SETTINGS["color_theme"]
    font_size: Literal["small", "medium", "large"] = "medium"
    spacing: Literal["compact", "normal", "spacious"] = "normal"
    font: Literal["sans-serif", "serif", "monospace"] = "sans-serif"

    @field_validator("template")
    @classmethod
    def _known_template(cls, value: str) -> str:
        if not is_registered_template(value):
            raise ValueError(f"Unknown template: {value}")
        return value

    @field_validator("color_theme")
    @classmethod
    def _known_theme(cls, value: str) -> str:
        if not is_registered_theme(value):
            raise ValueError(f"Unknown color theme: {value}")
        return value


class ResumeContent(CamelModel):
    """Every user-editable field, used for create and full replace."""

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    personal_info: PersonalInfo | None = None
    summary: str | None = Field(None, max_length=MAX_SUMMARY_LENGTH)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    projects: list[ProjectEntry] = Field(default_factory=list)
    coursework: list[CourseworkEntry] = Field(default_factory=list)
    technical_skills: list[TechnicalSkillCategory] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    template_settings: TemplateSettings = Field(default_factory=TemplateSettings)


class ResumeCreateRequest(ResumeContent):
    visibility: Visibility = "private"


class ResumeUpdateRequest(CamelModel):
    """Partial update: only the fields that are sent are written."""

    title: str | None = Field(None, min_length=1, max_length=MAX_TITLE_LENGTH)
    personal_info: PersonalInfo | None = None
    summary: str | None = Field(None, max_length=MAX_SUMMARY_LENGTH)
    experience: list[ExperienceEntry] | None = None
    education: list[EducationEntry] | None = None
    projects: list[ProjectEntry] | None = None
    coursework: list[CourseworkEntry] | None = None
    technical_skills: list[TechnicalSkillCategory] | None = None
    skills: list[str] | None = None
    languages: list[str] | None = None
    achievements: list[str] | None = None
    certifications: list[str] | None = None
    template_settings: TemplateSettings | None = None
    visibility: Visibility | None = None

    @field_validator("title", "visibility", "template_settings")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("Field may be omitted but not null")
        return value


class ResumeResponse(ResumeContent):
    """A stored resume with its derived artifact pointers."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    personal_info: PersonalInfoView | None = None
    id: str
    share_id: str
    visibility: Visibility
    revision: int
    pdf_url: str | None = None
    pdf_asset_id: str | None = None
    preview_url: str | None = None
    view_url: str | None = None
    created_at: datetime
    updated_at: datetime


class PublicResumeResponse(ResumeContent):
    """What an anonymous viewer sees through a share link."""

    personal_info: PublicPersonalInfo | None = None
    share_id: str
    pdf_url: str | None = None
    preview_url: str | None = None
    view_url: str | None = None
    updated_at: datetime


class ResumeCountResponse(CamelModel):
    count: int


class VisibilityRequest(CamelModel):
    """Explicit visibility; omit it to flip the current value."""

    visibility: Visibility | None = None


class ArtifactResponse(CamelModel):
    """Result of a synchronous publish."""

    status: str
    revision: int
    pdf_url: str | None = None
    pdf_asset_id: str | None = None
    preview_url: str | None = None
    view_url: str | None = None
