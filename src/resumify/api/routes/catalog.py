"""Template and theme catalogue routes for the editing client."""

from __future__ import annotations

from fastapi import APIRouter

from resumify.api.schemas.catalog import TemplateSummary, ThemeSummary
from resumify.templates import list_templates, list_themes

router = APIRouter(tags=["catalog"])


@router.get("/templates", response_model=list[TemplateSummary])
def get_templates() -> list[TemplateSummary]:
    """List registered templates in registration order."""
    return [TemplateSummary.model_validate(t) for t in list_templates()]


@router.get("/themes", response_model=list[ThemeSummary])
def get_themes() -> list[ThemeSummary]:
    """List registered colour themes in registration order."""
    return [ThemeSummary.model_validate(p) for p in list_themes()]
