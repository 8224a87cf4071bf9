"""Pydantic schemas for the template and theme catalogue."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TemplateSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str


class ThemeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    primary: str
    secondary: str
    accent: str
    text: str
    background: str
